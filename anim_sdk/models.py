"""Pydantic models for the animation reference catalog."""
from __future__ import annotations

from types import MappingProxyType
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Sequence, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, WrapSerializer, field_validator

K = TypeVar("K")
V = TypeVar("V")
T = TypeVar("T")


def _freeze_list(value: Sequence[Any]) -> tuple:
    return tuple(value)


def _freeze_dict(value: Mapping[Any, Any]) -> Mapping[Any, Any]:
    return MappingProxyType(dict(value))


def _dump_list(value: Sequence[Any], handler: Any) -> Any:
    return handler(list(value))


def _dump_dict(value: Mapping[Any, Any], handler: Any) -> Any:
    return handler(dict(value))


# Catalog collections are validated as lists/dicts, stored as tuples and
# read-only mappings, and dumped back as plain lists/dicts.
FrozenList = Annotated[List[T], AfterValidator(_freeze_list), WrapSerializer(_dump_list)]
FrozenDict = Annotated[Dict[K, V], AfterValidator(_freeze_dict), WrapSerializer(_dump_dict)]

Feature = Literal[
    "3d_transforms",
    "blur",
    "blur_entrance",
    "camera_movement",
    "camera_shake",
    "ambient_motion",
]
Category = Literal[
    "Entrances",
    "Exits",
    "Emphasis",
    "Camera",
    "Ambient",
    "Transitions",
    "Typography",
]
EnergyLevel = Literal["static", "subtle", "moderate", "high"]

SHOT_SIZES = ("wide", "medium", "close_up", "extreme_close_up")
ANGLES = ("eye_level", "high", "low", "dutch")
FRAMINGS = ("center", "rule_of_thirds_left", "rule_of_thirds_right", "dynamic_offset")
TRANSITION_TYPES = (
    "hard_cut",
    "crossfade",
    "wipe",
    "whip_left",
    "whip_right",
    "whip_up",
    "whip_down",
)
CAMERA_MOVES = ("static", "push_in", "pull_out", "pan_left", "pan_right", "drift")


class FrozenModel(BaseModel):
    """Base for read-only catalog records."""

    model_config = ConfigDict(frozen=True, validate_default=True)


class Primitive(FrozenModel):
    """Named, reusable animation unit."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    name: str
    category: Category
    duration: str
    styles: FrozenList[str] = Field(default_factory=list)
    source: Optional[str] = None

    def supports(self, style: str) -> bool:
        return style in self.styles or "universal" in self.styles


class PrimitiveCatalog(FrozenModel):
    version: int
    primitives: FrozenList[Primitive]


class ShotGrammar(FrozenModel):
    """Size, angle and framing classification of a scene."""

    shot_size: str
    angle: str
    framing: str


class ShotGrammarRestrictions(FrozenModel):
    """Shot grammar values a style accepts."""

    allowed_sizes: FrozenList[str]
    allowed_angles: FrozenList[str]
    allowed_framings: FrozenList[str]
    max_scale: float = 1.4
    use_3d_rotation: bool = True


class CameraBehavior(FrozenModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    allowed_movements: FrozenList[str] = Field(default_factory=list)
    forbidden_movements: FrozenList[str] = Field(default_factory=list)
    easing: str = "cinematic_scurve"
    speed_tiers: FrozenDict[str, str] = Field(default_factory=dict)
    parallax: str = "none"
    depth_of_field: bool = False
    ambient_motion: FrozenDict[str, str] = Field(default_factory=dict)
    shake: bool = False
    constraints: Optional[str] = None


class Personality(FrozenModel):
    """Named creative configuration constraining motion vocabulary."""

    model_config = ConfigDict(frozen=True, extra="allow")

    slug: str
    name: str
    description: Optional[str] = None
    duration_tiers: FrozenDict[str, str] = Field(default_factory=dict)
    easing: FrozenDict[str, str] = Field(default_factory=dict)
    default_stagger: Optional[str] = None
    camera_behavior: CameraBehavior = Field(default_factory=CameraBehavior)
    shot_grammar: ShotGrammarRestrictions
    forbidden_features: FrozenList[Feature] = Field(default_factory=list)

    def forbids(self, feature: str) -> bool:
        return feature in self.forbidden_features


class PersonalityCatalog(FrozenModel):
    version: int
    personalities: FrozenList[Personality]


class TransitionRule(FrozenModel):
    """One step of a style pack's transition chain."""

    when: Literal["always", "opening", "emotional", "hero", "same_weight", "weight_change", "cycle"]
    type: Optional[str] = None
    cycle: FrozenList[str] = Field(default_factory=list)
    every: int = Field(default=3, ge=1)
    duration_ms: Optional[int] = Field(default=None, ge=0)


class CameraRule(FrozenModel):
    """Camera override applied when a scene matches the listed intents or content types."""

    intents: FrozenList[str] = Field(default_factory=list)
    content_types: FrozenList[str] = Field(default_factory=list)
    move: str
    intensity: float = Field(default=0.0, ge=0.0, le=1.0)
    easing: Optional[str] = None


class StylePack(FrozenModel):
    """Planner preset that maps to a personality."""

    name: str
    personality: str
    description: Optional[str] = None
    durations: FrozenDict[EnergyLevel, float]
    max_duration_s: Optional[float] = None
    transitions: FrozenList[TransitionRule]
    camera: FrozenList[CameraRule] = Field(default_factory=list)


class StylePackCatalog(FrozenModel):
    version: int
    content_hold_scale: FrozenDict[str, float] = Field(default_factory=dict)
    packs: FrozenList[StylePack]


class IntentMapping(FrozenModel):
    """Choreographic goal mapped to recommended primitives and camera behaviour."""

    model_config = ConfigDict(frozen=True, extra="allow")

    intent: str
    label: str
    camera_description: Optional[str] = None
    camera_primitives: FrozenList[str] = Field(default_factory=list)
    speed: Literal["slow", "medium", "fast"] = "medium"
    parallax: str = "none"
    parallax_layers: int = 0
    dof: bool = False
    ambient_primitives: FrozenList[str] = Field(default_factory=list)
    companion_entrance: FrozenList[str] = Field(default_factory=list)
    framing: str = "center"
    perspective_origin: Optional[str] = None
    style_support: FrozenList[str] = Field(default_factory=list)


class IntentCatalog(FrozenModel):
    version: int
    intents: FrozenList[IntentMapping]


class Amplitude(FrozenModel):
    """Peak displacement of a primitive along one property."""

    property: str
    max_displacement: float
    unit: str

    def limit_key(self) -> str:
        """Return the speed-limit key this amplitude is checked against."""

        if self.property == "scale" and self.unit == "percent":
            return "scale_ambient"
        return self.property


class SpeedLimit(FrozenModel):
    max_velocity: float
    unit: str


class Bounds(FrozenModel):
    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


class LensBounds(FrozenModel):
    perspective: Bounds
    blur: Bounds
    scale: Bounds
    rotation: Bounds


class Acceleration(FrozenModel):
    deceleration_phase_minimum: float = 0.4


class Jerk(FrozenModel):
    settling_on_reversal_ms: float = 200


class StyleBoundary(FrozenModel):
    """Numeric camera limits for a personality."""

    max_translate_xy: Optional[float] = None
    max_scale_change_percent: Optional[float] = None
    ambient_min_duration_s: Optional[float] = None
    ambient_never: bool = False


class GuardrailBounds(FrozenModel):
    version: int
    speed_limits: FrozenDict[str, SpeedLimit]
    lens_bounds: LensBounds
    acceleration: Acceleration = Field(default_factory=Acceleration)
    jerk: Jerk = Field(default_factory=Jerk)
    primitive_amplitudes: FrozenDict[str, Amplitude] = Field(default_factory=dict)
    blur_primitives: FrozenList[str] = Field(default_factory=list)
    shake_primitives: FrozenList[str] = Field(default_factory=list)
    style_boundaries: FrozenDict[str, StyleBoundary] = Field(default_factory=dict)


class SizeEntry(FrozenModel):
    scale: float
    affinity: FrozenList[str] = Field(default_factory=list)


class AngleEntry(FrozenModel):
    rotate_x: float = 0.0
    rotate_z: float = 0.0
    perspective_origin: str = "50% 50%"


class FramingEntry(FrozenModel):
    transform_origin: str = "50% 50%"


class ShotGrammarCatalog(FrozenModel):
    """Lookup tables from shot grammar values to static transform parameters."""

    version: int
    sizes: FrozenDict[str, SizeEntry]
    angles: FrozenDict[str, AngleEntry]
    framings: FrozenDict[str, FramingEntry]
    fallback: ShotGrammar = ShotGrammar(shot_size="medium", angle="eye_level", framing="center")

    def affinity_table(self) -> Dict[str, str]:
        """Return content_type -> shot_size, first declared size winning."""

        table: Dict[str, str] = {}
        for size, entry in self.sizes.items():
            for content_type in entry.affinity:
                table.setdefault(content_type, size)
        return table


class AnalysisConfig(FrozenModel):
    low_confidence_threshold: float = Field(default=0.5, ge=0.0, le=1.0)


class PlanningConfig(FrozenModel):
    max_shot_size_run: int = Field(default=2, ge=1)
    content_type_lookahead: int = Field(default=3, ge=1)


class Resolution(FrozenModel):
    w: int = 1920
    h: int = 1080


class ManifestConfig(FrozenModel):
    fps: int = 60
    resolution: Resolution = Field(default_factory=Resolution)
    allowed_fps: FrozenList[int] = Field(default=(24, 30, 60))
    min_duration_s: float = 0.5
    max_duration_s: float = 30.0
    max_transition_ms: int = 2000

    @field_validator("fps")
    @classmethod
    def _fps_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("fps must be positive")
        return value


class CoreConfig(FrozenModel):
    """Tunable settings for analysis, planning and manifest output."""

    version: int = 1
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    planning: PlanningConfig = Field(default_factory=PlanningConfig)
    manifest: ManifestConfig = Field(default_factory=ManifestConfig)


__all__ = [
    "ANGLES",
    "CAMERA_MOVES",
    "FRAMINGS",
    "SHOT_SIZES",
    "TRANSITION_TYPES",
    "Acceleration",
    "Amplitude",
    "AnalysisConfig",
    "AngleEntry",
    "Bounds",
    "CameraBehavior",
    "CameraRule",
    "CoreConfig",
    "FramingEntry",
    "GuardrailBounds",
    "IntentCatalog",
    "IntentMapping",
    "Jerk",
    "LensBounds",
    "ManifestConfig",
    "Personality",
    "PersonalityCatalog",
    "PlanningConfig",
    "Primitive",
    "PrimitiveCatalog",
    "ShotGrammar",
    "ShotGrammarCatalog",
    "ShotGrammarRestrictions",
    "SizeEntry",
    "SpeedLimit",
    "StyleBoundary",
    "StylePack",
    "StylePackCatalog",
    "TransitionRule",
]

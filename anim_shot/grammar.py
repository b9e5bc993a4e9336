"""Shot grammar validation and static CSS resolution."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from anim_sdk.models import ANGLES, FRAMINGS, SHOT_SIZES, ShotGrammar
from anim_sdk.registry import Registry

GrammarLike = Union[ShotGrammar, Mapping[str, Any], None]

DEFAULT_SCALE = 1.0
DEFAULT_ORIGIN = "50% 50%"


@dataclass(frozen=True)
class GrammarValidation:
    """Result of clamping a grammar to a style's allowed values."""

    valid: bool
    result: ShotGrammar
    corrections: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "corrections": list(self.corrections),
            "result": self.result.model_dump(),
        }


@dataclass(frozen=True)
class ShotCSS:
    """Static transform parameters for a shot grammar."""

    scale: float = DEFAULT_SCALE
    rotate_x: float = 0.0
    rotate_z: float = 0.0
    transform_origin: str = DEFAULT_ORIGIN
    perspective_origin: str = DEFAULT_ORIGIN

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scale": self.scale,
            "rotateX": self.rotate_x,
            "rotateZ": self.rotate_z,
            "transformOrigin": self.transform_origin,
            "perspectiveOrigin": self.perspective_origin,
        }


def _field(grammar: GrammarLike, name: str) -> Optional[str]:
    if grammar is None:
        return None
    if isinstance(grammar, ShotGrammar):
        return getattr(grammar, name)
    value = grammar.get(name)
    return value if isinstance(value, str) else None


def _allowed(registry: Registry, style: Optional[str]) -> Dict[str, Sequence[str]]:
    personality = registry.style(style) if style else None
    if personality is None:
        return {"shot_size": SHOT_SIZES, "angle": ANGLES, "framing": FRAMINGS}
    restrictions = personality.shot_grammar
    return {
        "shot_size": restrictions.allowed_sizes,
        "angle": restrictions.allowed_angles,
        "framing": restrictions.allowed_framings,
    }


def validate_shot_grammar(grammar: GrammarLike, style: Optional[str], registry: Registry) -> GrammarValidation:
    """Clamp each axis to the style's allowed enum, substituting the fallback.

    An unknown or missing style clamps against the full catalog enums. An
    in-bounds grammar is returned unchanged.
    """

    fallback = registry.shot_grammar.fallback.model_dump()
    allowed = _allowed(registry, style)
    label = style or "catalog"
    resolved: Dict[str, str] = {}
    corrections: List[str] = []
    for axis in ("shot_size", "angle", "framing"):
        value = _field(grammar, axis)
        if value in allowed[axis]:
            resolved[axis] = value
            continue
        resolved[axis] = fallback[axis]
        if value is None:
            corrections.append(f'{axis} missing, defaulted to "{fallback[axis]}"')
        else:
            corrections.append(f'{axis} "{value}" not allowed for {label}, corrected to "{fallback[axis]}"')
    return GrammarValidation(
        valid=not corrections,
        result=ShotGrammar(**resolved),
        corrections=corrections,
    )


def resolve_css(grammar: GrammarLike, registry: Registry, style: Optional[str] = None) -> ShotCSS:
    """Look up static transform parameters; unknown values fall back to identity.

    When ``style`` names a known personality its ``max_scale`` caps the scale
    and ``use_3d_rotation: false`` removes the angle's rotation.
    """

    tables = registry.shot_grammar
    size = tables.sizes.get(_field(grammar, "shot_size") or "")
    angle = tables.angles.get(_field(grammar, "angle") or "")
    framing = tables.framings.get(_field(grammar, "framing") or "")

    scale = size.scale if size else DEFAULT_SCALE
    rotate_x = angle.rotate_x if angle else 0.0
    rotate_z = angle.rotate_z if angle else 0.0
    perspective_origin = angle.perspective_origin if angle else DEFAULT_ORIGIN
    transform_origin = framing.transform_origin if framing else DEFAULT_ORIGIN

    personality = registry.style(style) if style else None
    if personality is not None:
        scale = min(scale, personality.shot_grammar.max_scale)
        if not personality.shot_grammar.use_3d_rotation:
            rotate_x = 0.0
            rotate_z = 0.0
            perspective_origin = DEFAULT_ORIGIN

    return ShotCSS(
        scale=scale,
        rotate_x=rotate_x,
        rotate_z=rotate_z,
        transform_origin=transform_origin,
        perspective_origin=perspective_origin,
    )


__all__ = ["GrammarValidation", "ShotCSS", "resolve_css", "validate_shot_grammar"]

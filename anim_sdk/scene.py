"""Scene input models and the metadata the analyzer attaches to them."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .models import ShotGrammar


class Canvas(BaseModel):
    model_config = ConfigDict(frozen=True)

    w: int = Field(default=1920, gt=0)
    h: int = Field(default=1080, gt=0)


class CameraMove(BaseModel):
    """Camera move applied across a scene's duration."""

    model_config = ConfigDict(frozen=True)

    move: str = "static"
    intensity: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    easing: Optional[str] = None


class Layout(BaseModel):
    model_config = ConfigDict(frozen=True)

    template: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)


class Entrance(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    primitive: Optional[str] = None
    delay_ms: int = 0


class Layer(BaseModel):
    """Single visual layer inside a scene."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str = ""
    type: str
    slot: Optional[str] = None
    position: Optional[Any] = None
    depth_class: Optional[str] = None
    entrance: Optional[Entrance] = None
    animation: Optional[str] = None
    content: Optional[str] = None
    style: Dict[str, Any] = Field(default_factory=dict)
    asset: Optional[str] = None

    @property
    def is_background(self) -> bool:
        return self.depth_class == "background"


class SceneMetadata(BaseModel):
    """Classified scene fields, each paired with a confidence in [0, 1]."""

    model_config = ConfigDict(frozen=True, extra="allow")

    content_type: Optional[str] = None
    visual_weight: Optional[str] = None
    motion_energy: Optional[str] = None
    intent_tags: List[str] = Field(default_factory=list)
    shot_grammar: Optional[ShotGrammar] = None
    confidence: Dict[str, float] = Field(default_factory=dict)


class Scene(BaseModel):
    """Atomic visual composition unit. Never mutated by the core."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    scene_id: str = Field(validation_alias=AliasChoices("scene_id", "id"))
    canvas: Canvas = Field(default_factory=Canvas)
    duration_s: float = Field(default=3.0, gt=0)
    assets: List[Any] = Field(default_factory=list)
    camera: Optional[CameraMove] = None
    layout: Optional[Layout] = None
    layers: List[Layer] = Field(default_factory=list)
    metadata: Optional[SceneMetadata] = None

    @property
    def template(self) -> Optional[str]:
        return self.layout.template if self.layout else None

    def foreground(self) -> List[Layer]:
        return [layer for layer in self.layers if not layer.is_background]

    def background(self) -> List[Layer]:
        return [layer for layer in self.layers if layer.is_background]


__all__ = [
    "CameraMove",
    "Canvas",
    "Entrance",
    "Layer",
    "Layout",
    "Scene",
    "SceneMetadata",
]

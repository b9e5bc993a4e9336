"""Choreography recommendations for a named intent."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from anim_sdk.errors import MalformedInput
from anim_sdk.registry import Registry, filter_by_style


@dataclass(frozen=True)
class StyleRecommendation:
    style: str
    camera_primitives: List[str]
    ambient_primitives: List[str]
    companion_entrance: List[str]
    speed: str
    duration: Optional[str]
    camera_easing: str
    parallax: str
    parallax_layers: int
    depth_of_field: bool
    framing: str
    perspective_origin: Optional[str]
    stagger: Optional[str] = None
    constraints: Optional[str] = None
    ambient_motion: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Recommendation:
    intent: str
    label: str
    camera_description: Optional[str]
    styles: List[StyleRecommendation]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def recommend_choreography(
    intent: str,
    registry: Registry,
    style: Optional[str] = None,
    subject_count: Optional[int] = None,
) -> Recommendation:
    """Build a per-style camera plan for ``intent``.

    Primitive lists are filtered to each style's affinity. When ``style`` is
    given only that style is returned and it must be supported by the intent.
    """

    mapping = registry.intent(intent)
    if mapping is None:
        known = ", ".join(sorted(registry.intents()))
        raise MalformedInput(f"unknown intent {intent!r}; expected one of: {known}")
    if style is not None and style not in mapping.style_support:
        raise MalformedInput(
            f"intent {intent} does not support {style}; supported: {', '.join(mapping.style_support)}"
        )
    if subject_count is not None and subject_count < 1:
        raise MalformedInput("subject_count must be at least 1")

    targets = [style] if style is not None else list(mapping.style_support)
    plans: List[StyleRecommendation] = []
    for slug in targets:
        personality = registry.style(slug)
        if personality is None:
            continue
        behavior = personality.camera_behavior
        stagger = personality.default_stagger if subject_count and subject_count > 1 else None
        plans.append(
            StyleRecommendation(
                style=slug,
                camera_primitives=filter_by_style(mapping.camera_primitives, slug, registry),
                ambient_primitives=filter_by_style(mapping.ambient_primitives, slug, registry),
                companion_entrance=filter_by_style(mapping.companion_entrance, slug, registry),
                speed=mapping.speed,
                duration=behavior.speed_tiers.get(mapping.speed),
                camera_easing=behavior.easing,
                parallax=mapping.parallax if behavior.parallax != "none" else "none",
                parallax_layers=mapping.parallax_layers if behavior.parallax != "none" else 0,
                depth_of_field=mapping.dof and behavior.depth_of_field,
                framing=mapping.framing,
                perspective_origin=mapping.perspective_origin,
                stagger=stagger,
                constraints=behavior.constraints,
                ambient_motion=dict(behavior.ambient_motion),
            )
        )
    return Recommendation(
        intent=mapping.intent,
        label=mapping.label,
        camera_description=mapping.camera_description,
        styles=plans,
    )


__all__ = ["Recommendation", "StyleRecommendation", "recommend_choreography"]

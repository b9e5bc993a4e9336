"""Tiered validation of a proposed set of motion primitives.

All six tiers run on every call and every finding is collected; nothing
short-circuits. Tiers 1-3 block, tiers 4-5 warn, tier 6 only annotates.
"""
from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional, Sequence, Union

import structlog
from pydantic import ValidationError

from anim_sdk.errors import MalformedInput
from anim_sdk.models import Personality, Primitive
from anim_sdk.registry import Registry, filter_by_style

from .models import ChoreographyOverrides, Finding, Verdict

logger = structlog.get_logger(__name__)

CHO_UNKNOWN_PRIMITIVE = "CHO_UNKNOWN_PRIMITIVE"
CHO_UNKNOWN_STYLE = "CHO_UNKNOWN_STYLE"
CHO_STYLE_MISMATCH = "CHO_STYLE_MISMATCH"
CHO_FORBIDDEN_3D = "CHO_FORBIDDEN_3D"
CHO_FORBIDDEN_BLUR = "CHO_FORBIDDEN_BLUR"
CHO_FORBIDDEN_BLUR_ENTRANCE = "CHO_FORBIDDEN_BLUR_ENTRANCE"
CHO_FORBIDDEN_CAMERA_MOVEMENT = "CHO_FORBIDDEN_CAMERA_MOVEMENT"
CHO_FORBIDDEN_CAMERA_SHAKE = "CHO_FORBIDDEN_CAMERA_SHAKE"
CHO_SPEED_EXCEEDED = "CHO_SPEED_EXCEEDED"
CHO_PERSPECTIVE_OUT_OF_BOUNDS = "CHO_PERSPECTIVE_OUT_OF_BOUNDS"
CHO_BLUR_OUT_OF_BOUNDS = "CHO_BLUR_OUT_OF_BOUNDS"
CHO_UNKNOWN_INTENT = "CHO_UNKNOWN_INTENT"
CHO_INTENT_STYLE_UNSUPPORTED = "CHO_INTENT_STYLE_UNSUPPORTED"
CHO_INTENT_MISSING_PRIMITIVES = "CHO_INTENT_MISSING_PRIMITIVES"

THREE_D_PROPERTIES = frozenset({"translateZ", "rotateX", "rotateY"})
CAMERA_PROPERTIES = frozenset({"translateX", "translateY", "translateZ", "rotateX", "rotateY"})

_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(ms|s)\b")

OverridesLike = Union[ChoreographyOverrides, Mapping[str, Any], None]


def parse_duration_ms(text: Optional[str]) -> Optional[float]:
    """Parse ``"1400ms"``, ``"6000ms loop"`` or ``"1.2s"`` into milliseconds."""

    if not text:
        return None
    match = _DURATION_RE.search(text)
    if not match:
        return None
    value = float(match.group(1))
    return value if match.group(2) == "ms" else value * 1000.0


def _coerce_overrides(overrides: OverridesLike) -> ChoreographyOverrides:
    if overrides is None:
        return ChoreographyOverrides()
    if isinstance(overrides, ChoreographyOverrides):
        return overrides
    try:
        return ChoreographyOverrides.model_validate(dict(overrides))
    except ValidationError as exc:
        raise MalformedInput(f"invalid overrides: {exc}") from exc


def _check_existence(ids: Sequence[str], style: str, registry: Registry, blocks: List[Finding]) -> None:
    if registry.style(style) is None:
        blocks.append(
            Finding(tier=1, code=CHO_UNKNOWN_STYLE, message=f"style {style!r} is not in the registry")
        )
    for primitive_id in ids:
        if registry.primitive(primitive_id) is None:
            blocks.append(
                Finding(
                    tier=1,
                    code=CHO_UNKNOWN_PRIMITIVE,
                    message=f"{primitive_id} is not in the registry",
                    primitive_id=primitive_id,
                )
            )


def _check_compatibility(entries: Sequence[Primitive], style: str, blocks: List[Finding]) -> None:
    for entry in entries:
        if not entry.supports(style):
            blocks.append(
                Finding(
                    tier=2,
                    code=CHO_STYLE_MISMATCH,
                    message=f"{entry.id} supports [{', '.join(entry.styles)}], not {style}",
                    primitive_id=entry.id,
                )
            )


def _check_forbidden(
    entries: Sequence[Primitive],
    personality: Optional[Personality],
    registry: Registry,
    blocks: List[Finding],
) -> None:
    if personality is None:
        return
    slug = personality.slug
    for entry in entries:
        amplitude = registry.amplitude(entry.id)
        prop = amplitude.property if amplitude else None
        is_blur = registry.is_blur_primitive(entry.id) or prop == "blur"

        if personality.forbids("3d_transforms") and prop in THREE_D_PROPERTIES:
            blocks.append(
                Finding(
                    tier=3,
                    code=CHO_FORBIDDEN_3D,
                    message=f"{entry.id} uses {prop}; 3D transforms are forbidden in {slug}",
                    primitive_id=entry.id,
                )
            )
        if personality.forbids("blur") and is_blur:
            blocks.append(
                Finding(
                    tier=3,
                    code=CHO_FORBIDDEN_BLUR,
                    message=f"{entry.id} uses blur, forbidden in {slug}",
                    primitive_id=entry.id,
                )
            )
        if (
            personality.forbids("blur_entrance")
            and registry.is_blur_primitive(entry.id)
            and entry.category == "Entrances"
        ):
            blocks.append(
                Finding(
                    tier=3,
                    code=CHO_FORBIDDEN_BLUR_ENTRANCE,
                    message=f"{entry.id} is a blur entrance, forbidden in {slug}",
                    primitive_id=entry.id,
                )
            )
        if personality.forbids("camera_movement") and prop in CAMERA_PROPERTIES:
            blocks.append(
                Finding(
                    tier=3,
                    code=CHO_FORBIDDEN_CAMERA_MOVEMENT,
                    message=f"{entry.id} uses {prop}; camera movement is forbidden in {slug}",
                    primitive_id=entry.id,
                )
            )
        if personality.forbids("camera_shake") and registry.is_shake_primitive(entry.id):
            blocks.append(
                Finding(
                    tier=3,
                    code=CHO_FORBIDDEN_CAMERA_SHAKE,
                    message=f"{entry.id} is camera shake, forbidden in {slug}",
                    primitive_id=entry.id,
                )
            )


def _check_speed(
    entries: Sequence[Primitive],
    overrides: ChoreographyOverrides,
    registry: Registry,
    warnings: List[Finding],
) -> None:
    for entry in entries:
        amplitude = registry.amplitude(entry.id)
        duration_ms = parse_duration_ms(entry.duration)
        if amplitude is None or not duration_ms:
            continue
        limit = registry.speed_limit(amplitude.limit_key())
        if limit is None:
            continue
        effective_s = duration_ms * overrides.duration_multiplier / 1000.0
        velocity = amplitude.max_displacement / effective_s
        if velocity > limit.max_velocity:
            warnings.append(
                Finding(
                    tier=4,
                    code=CHO_SPEED_EXCEEDED,
                    message=(
                        f"{entry.id} {amplitude.property} velocity {velocity:.1f} {amplitude.unit}/s "
                        f"exceeds limit of {limit.max_velocity} {limit.unit}"
                    ),
                    primitive_id=entry.id,
                    value=velocity,
                    limit=limit.max_velocity,
                )
            )


def _check_lens(overrides: ChoreographyOverrides, registry: Registry, warnings: List[Finding]) -> None:
    lens = registry.lens_bounds
    if overrides.perspective is not None and not lens.perspective.contains(overrides.perspective):
        warnings.append(
            Finding(
                tier=5,
                code=CHO_PERSPECTIVE_OUT_OF_BOUNDS,
                message=(
                    f"perspective {overrides.perspective}px is outside "
                    f"[{lens.perspective.min}, {lens.perspective.max}]px"
                ),
                value=overrides.perspective,
                limit={"min": lens.perspective.min, "max": lens.perspective.max},
            )
        )
    if overrides.max_blur is not None and not lens.blur.contains(overrides.max_blur):
        warnings.append(
            Finding(
                tier=5,
                code=CHO_BLUR_OUT_OF_BOUNDS,
                message=f"blur {overrides.max_blur}px is outside [{lens.blur.min}, {lens.blur.max}]px",
                value=overrides.max_blur,
                limit={"min": lens.blur.min, "max": lens.blur.max},
            )
        )


def _check_intent(
    ids: Sequence[str],
    style: str,
    intent: Optional[str],
    registry: Registry,
    notes: List[Finding],
) -> None:
    if not intent:
        return
    mapping = registry.intent(intent)
    if mapping is None:
        notes.append(Finding(tier=6, code=CHO_UNKNOWN_INTENT, message=f"intent {intent!r} not found"))
        return
    if style not in mapping.style_support:
        notes.append(
            Finding(
                tier=6,
                code=CHO_INTENT_STYLE_UNSUPPORTED,
                message=f"intent {intent} does not support {style}; supported: {', '.join(mapping.style_support)}",
            )
        )
    expected = filter_by_style(mapping.camera_primitives, style, registry)
    missing = [primitive_id for primitive_id in expected if primitive_id not in ids]
    if missing:
        notes.append(
            Finding(
                tier=6,
                code=CHO_INTENT_MISSING_PRIMITIVES,
                message=f"intent {intent} expects camera primitives not in the plan: {', '.join(missing)}",
            )
        )


def validate_choreography(
    primitive_ids: Sequence[str],
    style: str,
    registry: Registry,
    intent: Optional[str] = None,
    overrides: OverridesLike = None,
) -> Verdict:
    """Run all six guardrail tiers and return the combined verdict."""

    if isinstance(primitive_ids, (str, bytes)) or not isinstance(primitive_ids, Sequence):
        raise MalformedInput("primitive_ids must be a list of primitive ids")
    if not primitive_ids:
        raise MalformedInput("supply at least one primitive id to validate")
    if any(not isinstance(item, str) for item in primitive_ids):
        raise MalformedInput("primitive ids must be strings")
    ids = list(primitive_ids)
    options = _coerce_overrides(overrides)

    entries = [entry for entry in (registry.primitive(i) for i in ids) if entry is not None]
    personality = registry.style(style)

    blocks: List[Finding] = []
    warnings: List[Finding] = []
    notes: List[Finding] = []
    _check_existence(ids, style, registry, blocks)
    _check_compatibility(entries, style, blocks)
    _check_forbidden(entries, personality, registry, blocks)
    _check_speed(entries, options, registry, warnings)
    _check_lens(options, registry, warnings)
    _check_intent(ids, style, intent, registry, notes)

    verdict = Verdict.from_findings(blocks, warnings, notes)
    logger.info(
        "choreography.validated",
        style=style,
        intent=intent,
        primitives=len(ids),
        verdict=verdict.verdict,
        blocks=len(blocks),
        warnings=len(warnings),
        notes=len(notes),
    )
    return verdict


__all__ = [
    "CHO_BLUR_OUT_OF_BOUNDS",
    "CHO_FORBIDDEN_3D",
    "CHO_FORBIDDEN_BLUR",
    "CHO_FORBIDDEN_BLUR_ENTRANCE",
    "CHO_FORBIDDEN_CAMERA_MOVEMENT",
    "CHO_FORBIDDEN_CAMERA_SHAKE",
    "CHO_INTENT_MISSING_PRIMITIVES",
    "CHO_INTENT_STYLE_UNSUPPORTED",
    "CHO_PERSPECTIVE_OUT_OF_BOUNDS",
    "CHO_SPEED_EXCEEDED",
    "CHO_STYLE_MISMATCH",
    "CHO_UNKNOWN_INTENT",
    "CHO_UNKNOWN_PRIMITIVE",
    "CHO_UNKNOWN_STYLE",
    "parse_duration_ms",
    "validate_choreography",
]

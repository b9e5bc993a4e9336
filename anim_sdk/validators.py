"""Validators for reference catalog integrity."""
from __future__ import annotations

from typing import List, Set

from .models import ANGLES, CAMERA_MOVES, FRAMINGS, SHOT_SIZES, TRANSITION_TYPES
from .registry import Registry


def _check_style_packs(registry: Registry, errors: List[str], warnings: List[str]) -> None:
    styles = registry.styles()
    for pack in registry.style_packs().values():
        if pack.personality not in styles:
            errors.append(f"style_pack {pack.name} references unknown personality {pack.personality}")
        missing = {"static", "subtle", "moderate", "high"} - set(pack.durations)
        if missing:
            errors.append(f"style_pack {pack.name} missing durations for {sorted(missing)}")
        if not pack.transitions or pack.transitions[-1].when != "always":
            errors.append(f"style_pack {pack.name} transition chain must end with an 'always' rule")
        for rule in pack.transitions:
            if rule.when == "cycle":
                if not rule.cycle:
                    errors.append(f"style_pack {pack.name} cycle rule has no transition types")
                names = list(rule.cycle)
            else:
                if rule.type is None:
                    errors.append(f"style_pack {pack.name} rule '{rule.when}' has no type")
                names = [rule.type] if rule.type else []
            for name in names:
                if name not in TRANSITION_TYPES:
                    errors.append(f"style_pack {pack.name} uses unknown transition {name}")
        for rule in pack.camera:
            if rule.move not in CAMERA_MOVES:
                errors.append(f"style_pack {pack.name} uses unknown camera move {rule.move}")
            style = styles.get(pack.personality)
            if style and rule.move != "static" and style.forbids("camera_movement"):
                warnings.append(
                    f"style_pack {pack.name} assigns {rule.move} but {style.slug} forbids camera movement"
                )


def _check_styles(registry: Registry, errors: List[str], warnings: List[str]) -> None:
    fallback = registry.shot_grammar.fallback
    for style in registry.styles().values():
        grammar = style.shot_grammar
        for label, values, allowed in (
            ("sizes", grammar.allowed_sizes, SHOT_SIZES),
            ("angles", grammar.allowed_angles, ANGLES),
            ("framings", grammar.allowed_framings, FRAMINGS),
        ):
            if not values:
                errors.append(f"style {style.slug} allows no {label}")
            for value in values:
                if value not in allowed:
                    errors.append(f"style {style.slug} allows unknown {label[:-1]} {value}")
        if fallback.shot_size not in grammar.allowed_sizes:
            errors.append(f"style {style.slug} does not allow fallback size {fallback.shot_size}")
        if fallback.angle not in grammar.allowed_angles:
            errors.append(f"style {style.slug} does not allow fallback angle {fallback.angle}")
        if fallback.framing not in grammar.allowed_framings:
            errors.append(f"style {style.slug} does not allow fallback framing {fallback.framing}")
        if len(grammar.allowed_sizes) < 2:
            warnings.append(f"style {style.slug} allows a single shot size; variety repair cannot re-frame")
        if grammar.use_3d_rotation and style.forbids("3d_transforms"):
            warnings.append(f"style {style.slug} enables 3D rotation but forbids 3d_transforms")
        for move in style.camera_behavior.allowed_movements:
            if move not in CAMERA_MOVES:
                errors.append(f"style {style.slug} allows unknown camera move {move}")
        if registry.style_boundary(style.slug) is None:
            warnings.append(f"style {style.slug} has no guardrail boundary entry")


def _check_primitive_refs(registry: Registry, errors: List[str], warnings: List[str]) -> None:
    known: Set[str] = set(registry.primitives())
    styles = set(registry.styles()) | {"universal"}
    for entry in registry.primitives().values():
        for style in entry.styles:
            if style not in styles:
                errors.append(f"primitive {entry.id} references unknown style {style}")
    bounds = registry.guardrails
    for primitive_id, amplitude in bounds.primitive_amplitudes.items():
        if primitive_id not in known:
            errors.append(f"guardrails amplitude references unknown primitive {primitive_id}")
        if amplitude.limit_key() not in bounds.speed_limits and amplitude.unit != "factor":
            warnings.append(f"amplitude for {primitive_id} has no speed limit for {amplitude.limit_key()}")
    for label, ids in (("blur_primitives", bounds.blur_primitives), ("shake_primitives", bounds.shake_primitives)):
        for primitive_id in ids:
            if primitive_id not in known:
                errors.append(f"guardrails {label} references unknown primitive {primitive_id}")
    for slug in bounds.style_boundaries:
        if slug not in registry.styles():
            errors.append(f"guardrails style_boundaries references unknown style {slug}")


def _check_intents(registry: Registry, errors: List[str], warnings: List[str]) -> None:
    known = set(registry.primitives())
    for mapping in registry.intents().values():
        for style in mapping.style_support:
            if registry.style(style) is None:
                errors.append(f"intent {mapping.intent} supports unknown style {style}")
        for field in ("camera_primitives", "ambient_primitives", "companion_entrance"):
            for primitive_id in getattr(mapping, field):
                if primitive_id not in known:
                    warnings.append(f"intent {mapping.intent}.{field} references unknown primitive {primitive_id}")
        if mapping.framing not in FRAMINGS:
            errors.append(f"intent {mapping.intent} uses unknown framing {mapping.framing}")


def validate_registry(registry: Registry) -> List[str]:
    """Validate catalog cross-references, raising ValueError on failure.

    Returns soft findings that do not prevent the catalog from loading.
    """

    errors: List[str] = []
    warnings: List[str] = []
    _check_styles(registry, errors, warnings)
    _check_style_packs(registry, errors, warnings)
    _check_primitive_refs(registry, errors, warnings)
    _check_intents(registry, errors, warnings)

    shot_grammar = registry.shot_grammar
    for size in SHOT_SIZES:
        if size not in shot_grammar.sizes:
            errors.append(f"shot_grammar missing size {size}")
    for angle in ANGLES:
        if angle not in shot_grammar.angles:
            errors.append(f"shot_grammar missing angle {angle}")
    for framing in FRAMINGS:
        if framing not in shot_grammar.framings:
            errors.append(f"shot_grammar missing framing {framing}")

    if errors:
        raise ValueError("Catalog validation failed:\n" + "\n".join(errors))
    return warnings


__all__ = ["validate_registry"]

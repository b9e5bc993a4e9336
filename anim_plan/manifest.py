"""Shape checks for sequence manifests before they reach a renderer."""
from __future__ import annotations

from typing import List

from anim_sdk.models import CAMERA_MOVES, TRANSITION_TYPES
from anim_sdk.registry import Registry
from anim_shot.camera import EASINGS

from .models import SequenceManifest
from .planner import SEQUENCE_ID_RE


def validate_manifest_shape(manifest: SequenceManifest, registry: Registry) -> List[str]:
    """Return every shape problem found in ``manifest``; empty means valid."""

    bounds = registry.config.manifest
    errors: List[str] = []
    if not SEQUENCE_ID_RE.match(manifest.sequence_id):
        errors.append(f"sequence_id {manifest.sequence_id!r} must match {SEQUENCE_ID_RE.pattern}")
    if manifest.fps not in bounds.allowed_fps:
        errors.append(f"fps {manifest.fps} not in {list(bounds.allowed_fps)}")
    if not manifest.entries:
        errors.append("manifest has no entries")

    for index, entry in enumerate(manifest.entries):
        where = f"entries[{index}] ({entry.scene.scene_id})"
        if not bounds.min_duration_s <= entry.duration_s <= bounds.max_duration_s:
            errors.append(
                f"{where} duration_s {entry.duration_s} outside "
                f"[{bounds.min_duration_s}, {bounds.max_duration_s}]"
            )
        transition = entry.transition
        if index == 0 and transition is not None:
            errors.append(f"{where} first entry must not have a transition")
        if transition is not None:
            if transition.type not in TRANSITION_TYPES:
                errors.append(f"{where} unknown transition {transition.type}")
            if transition.duration_ms is not None and transition.duration_ms > bounds.max_transition_ms:
                errors.append(
                    f"{where} transition duration_ms {transition.duration_ms} exceeds {bounds.max_transition_ms}"
                )
        camera = entry.camera_override
        if camera.move not in CAMERA_MOVES:
            errors.append(f"{where} unknown camera move {camera.move}")
        if camera.easing is not None and camera.easing not in EASINGS:
            errors.append(f"{where} unknown camera easing {camera.easing}")
        style = registry.style(manifest.personality)
        if style is not None:
            grammar = entry.shot_grammar
            allowed = style.shot_grammar
            if grammar.shot_size not in allowed.allowed_sizes:
                errors.append(f"{where} shot_size {grammar.shot_size} not allowed for {style.slug}")
            if grammar.angle not in allowed.allowed_angles:
                errors.append(f"{where} angle {grammar.angle} not allowed for {style.slug}")
            if grammar.framing not in allowed.allowed_framings:
                errors.append(f"{where} framing {grammar.framing} not allowed for {style.slug}")
    return errors


__all__ = ["validate_manifest_shape"]

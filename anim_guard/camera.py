"""Guardrails for camera moves and planned manifests."""
from __future__ import annotations

import math
from typing import Any, List, Mapping, Optional, Union

import structlog

from anim_plan.models import SequenceManifest
from anim_sdk.models import ShotGrammar
from anim_sdk.registry import Registry
from anim_sdk.scene import CameraMove
from anim_shot.camera import DEFAULT_INTENSITY, DRIFT_AMPLITUDE, PAN_MAX_PX, SCALE_FACTOR
from anim_shot.grammar import resolve_css

from .models import Finding, ManifestVerdict, Verdict

logger = structlog.get_logger(__name__)

CAM_SPEED_LIMIT = "CAM_SPEED_LIMIT"
CAM_ACCELERATION = "CAM_ACCELERATION"
CAM_JERK = "CAM_JERK"
CAM_LENS_SCALE = "CAM_LENS_SCALE"
CAM_LENS_ROTATION = "CAM_LENS_ROTATION"
CAM_FORBIDDEN_MOVEMENT = "CAM_FORBIDDEN_MOVEMENT"
CAM_FORBIDDEN_3D = "CAM_FORBIDDEN_3D"
CAM_FORBIDDEN_AMBIENT = "CAM_FORBIDDEN_AMBIENT"
CAM_TRANSLATE_LIMIT = "CAM_TRANSLATE_LIMIT"
CAM_SCALE_LIMIT = "CAM_SCALE_LIMIT"
CAM_AMBIENT_DURATION = "CAM_AMBIENT_DURATION"
CAM_CONSECUTIVE_LINEAR = "CAM_CONSECUTIVE_LINEAR"

# Share of the move spent decelerating.
EASING_DECEL_PHASE = {"linear": 0.0, "ease_out": 0.6, "cinematic_scurve": 0.5}

CameraLike = Union[CameraMove, Mapping[str, Any], None]
GrammarLike = Union[ShotGrammar, Mapping[str, Any], None]


def _camera(camera: CameraLike) -> Optional[CameraMove]:
    if camera is None or isinstance(camera, CameraMove):
        return camera
    return CameraMove.model_validate(dict(camera))


def _velocity(move: str, intensity: float, duration_s: float) -> tuple[str, float, str]:
    if move in ("pan_left", "pan_right"):
        return "translateX", intensity * PAN_MAX_PX / duration_s, "px/s"
    if move in ("push_in", "pull_out"):
        return "scale_ambient", intensity * SCALE_FACTOR * 100 / duration_s, "percent/s"
    if move == "drift":
        return "translateX", intensity * DRIFT_AMPLITUDE * 2 * math.pi / duration_s, "px/s"
    return "", 0.0, ""


def validate_camera_move(
    camera: CameraLike,
    shot_grammar: GrammarLike,
    duration_s: float,
    style: str,
    registry: Registry,
) -> Verdict:
    """Check one camera move against speed, easing, settling, lens and style bounds."""

    move = _camera(camera)
    moving = move is not None and move.move != "static"
    intensity = DEFAULT_INTENSITY if move is None or move.intensity is None else move.intensity
    bounds = registry.guardrails
    blocks: List[Finding] = []
    warnings: List[Finding] = []
    duration_s = duration_s if duration_s > 0 else 3.0

    if moving:
        prop, velocity, unit = _velocity(move.move, intensity, duration_s)
        limit = registry.speed_limit(prop) if prop else None
        if limit is not None and velocity > limit.max_velocity:
            warnings.append(
                Finding(
                    tier=4,
                    code=CAM_SPEED_LIMIT,
                    message=(
                        f"{move.move} velocity {velocity:.1f} {unit} exceeds {prop} "
                        f"limit of {limit.max_velocity} {limit.unit}"
                    ),
                    value=velocity,
                    limit=limit.max_velocity,
                )
            )

        if move.move != "drift":
            easing = move.easing or "cinematic_scurve"
            phase = EASING_DECEL_PHASE.get(easing, 0.5)
            minimum = bounds.acceleration.deceleration_phase_minimum
            if phase < minimum:
                warnings.append(
                    Finding(
                        tier=4,
                        code=CAM_ACCELERATION,
                        message=(
                            f'easing "{easing}" has {phase * 100:.0f}% deceleration phase, '
                            f"below minimum {minimum * 100:.0f}%"
                        ),
                        value=phase,
                        limit=minimum,
                    )
                )
        else:
            reversal_ms = duration_s / 2 * 1000
            settling = bounds.jerk.settling_on_reversal_ms
            if reversal_ms < settling:
                warnings.append(
                    Finding(
                        tier=4,
                        code=CAM_JERK,
                        message=f"drift reversal interval {reversal_ms:.0f}ms is below settling minimum of {settling}ms",
                        value=reversal_ms,
                        limit=settling,
                    )
                )

        lens = bounds.lens_bounds
        if move.move in ("push_in", "pull_out"):
            camera_scale = 1 + intensity * SCALE_FACTOR
            if not lens.scale.contains(camera_scale):
                warnings.append(
                    Finding(
                        tier=5,
                        code=CAM_LENS_SCALE,
                        message=f"camera scale {camera_scale:.3f} exceeds lens bounds [{lens.scale.min}, {lens.scale.max}]",
                        value=camera_scale,
                        limit={"min": lens.scale.min, "max": lens.scale.max},
                    )
                )
        if shot_grammar is not None:
            css = resolve_css(shot_grammar, registry, style=style)
            for axis, angle in (("rotateX", css.rotate_x), ("rotateZ", css.rotate_z)):
                if angle and not lens.rotation.contains(angle):
                    warnings.append(
                        Finding(
                            tier=5,
                            code=CAM_LENS_ROTATION,
                            message=(
                                f"shot grammar {axis} {angle}deg exceeds rotation bounds "
                                f"[{lens.rotation.min}, {lens.rotation.max}]deg"
                            ),
                            value=angle,
                            limit={"min": lens.rotation.min, "max": lens.rotation.max},
                        )
                    )

    personality = registry.style(style)
    if personality is not None:
        behavior = personality.camera_behavior
        if moving and (personality.forbids("camera_movement") or move.move in behavior.forbidden_movements):
            blocks.append(
                Finding(
                    tier=3,
                    code=CAM_FORBIDDEN_MOVEMENT,
                    message=f'camera movement "{move.move}" is forbidden in {style}',
                )
            )
        if personality.forbids("3d_transforms") and shot_grammar is not None:
            css = resolve_css(shot_grammar, registry, style=style)
            if css.rotate_x or css.rotate_z:
                blocks.append(
                    Finding(tier=3, code=CAM_FORBIDDEN_3D, message=f"3D rotation is forbidden in {style}")
                )
        if moving and move.move == "drift" and personality.forbids("ambient_motion"):
            blocks.append(
                Finding(tier=3, code=CAM_FORBIDDEN_AMBIENT, message=f"ambient drift is forbidden in {style}")
            )

    boundary = registry.style_boundary(style)
    if boundary is not None and moving:
        displacement = 0.0
        if move.move in ("pan_left", "pan_right"):
            displacement = intensity * PAN_MAX_PX
        elif move.move == "drift":
            displacement = intensity * DRIFT_AMPLITUDE
        if boundary.max_translate_xy is not None and displacement > boundary.max_translate_xy:
            warnings.append(
                Finding(
                    tier=4,
                    code=CAM_TRANSLATE_LIMIT,
                    message=f"translation {displacement:.1f}px exceeds {style} max of {boundary.max_translate_xy}px",
                    value=displacement,
                    limit=boundary.max_translate_xy,
                )
            )
        if boundary.max_scale_change_percent is not None and move.move in ("push_in", "pull_out"):
            change = intensity * SCALE_FACTOR * 100
            if change > boundary.max_scale_change_percent:
                warnings.append(
                    Finding(
                        tier=4,
                        code=CAM_SCALE_LIMIT,
                        message=f"scale change {change:.1f}% exceeds {style} max of {boundary.max_scale_change_percent}%",
                        value=change,
                        limit=boundary.max_scale_change_percent,
                    )
                )
        if move.move == "drift":
            if boundary.ambient_never:
                blocks.append(
                    Finding(tier=3, code=CAM_FORBIDDEN_AMBIENT, message=f"ambient drift is never allowed in {style}")
                )
            elif boundary.ambient_min_duration_s is not None and duration_s <= boundary.ambient_min_duration_s:
                warnings.append(
                    Finding(
                        tier=4,
                        code=CAM_AMBIENT_DURATION,
                        message=(
                            f"drift in {style} only allowed for scenes over "
                            f"{boundary.ambient_min_duration_s}s (scene is {duration_s}s)"
                        ),
                        value=duration_s,
                        limit=boundary.ambient_min_duration_s,
                    )
                )

    return Verdict.from_findings(blocks, warnings, [])


def validate_manifest(manifest: SequenceManifest, registry: Registry) -> ManifestVerdict:
    """Validate every entry's camera and flag runs of more than two linear easings."""

    entries = [
        validate_camera_move(
            entry.camera_override,
            entry.shot_grammar,
            entry.duration_s,
            manifest.personality,
            registry,
        )
        for entry in manifest.entries
    ]

    cumulative: List[Finding] = []
    run = 0
    for index, entry in enumerate(manifest.entries):
        if entry.camera_override.easing == "linear":
            run += 1
            if run > 2:
                cumulative.append(
                    Finding(
                        tier=4,
                        code=CAM_CONSECUTIVE_LINEAR,
                        message=(
                            f"{run} consecutive scenes with linear easing "
                            f"(scenes {index - run + 2}-{index + 1}); consider varying easing"
                        ),
                        value=float(run),
                        limit=2,
                    )
                )
        else:
            run = 0

    levels = {verdict.verdict for verdict in entries}
    if "BLOCK" in levels:
        level = "BLOCK"
    elif "WARN" in levels or cumulative:
        level = "WARN"
    else:
        level = "PASS"
    logger.info(
        "guardrails.manifest.validated",
        sequence_id=manifest.sequence_id,
        personality=manifest.personality,
        verdict=level,
        cumulative=len(cumulative),
    )
    return ManifestVerdict(verdict=level, entries=entries, cumulative=cumulative)


__all__ = ["EASING_DECEL_PHASE", "validate_camera_move", "validate_manifest"]

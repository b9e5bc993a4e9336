from __future__ import annotations

from anim_guard.camera import (
    CAM_ACCELERATION,
    CAM_CONSECUTIVE_LINEAR,
    CAM_FORBIDDEN_AMBIENT,
    CAM_FORBIDDEN_MOVEMENT,
    CAM_JERK,
    CAM_LENS_SCALE,
    CAM_SCALE_LIMIT,
    CAM_SPEED_LIMIT,
    validate_camera_move,
    validate_manifest,
)
from anim_plan.models import SequenceManifest
from anim_plan.planner import plan_sequence

from conftest import analyzed

EYE_LEVEL = {"shot_size": "medium", "angle": "eye_level", "framing": "center"}


def codes(findings) -> list:
    return [finding.code for finding in findings]


def test_static_camera_passes(registry) -> None:
    assert validate_camera_move(None, None, 3.0, "neutral-light", registry).verdict == "PASS"
    assert validate_camera_move({"move": "static"}, EYE_LEVEL, 3.0, "montage", registry).verdict == "PASS"


def test_push_in_lens_scale_bounds(registry) -> None:
    mild = validate_camera_move({"move": "push_in", "intensity": 0.5}, EYE_LEVEL, 3.0, "cinematic-dark", registry)
    assert CAM_LENS_SCALE not in codes(mild.warnings)
    strong = validate_camera_move({"move": "push_in", "intensity": 1.0}, EYE_LEVEL, 3.0, "cinematic-dark", registry)
    assert CAM_LENS_SCALE in codes(strong.warnings)


def test_push_in_speed_and_style_scale_limit(registry) -> None:
    verdict = validate_camera_move({"move": "push_in", "intensity": 0.5}, EYE_LEVEL, 3.0, "editorial", registry)
    assert verdict.verdict == "WARN"
    assert CAM_SPEED_LIMIT in codes(verdict.warnings)
    assert CAM_SCALE_LIMIT in codes(verdict.warnings)


def test_linear_easing_lacks_deceleration(registry) -> None:
    verdict = validate_camera_move(
        {"move": "pull_out", "intensity": 0.1, "easing": "linear"}, EYE_LEVEL, 4.0, "cinematic-dark", registry
    )
    assert codes(verdict.warnings) == [CAM_ACCELERATION]


def test_short_drift_trips_jerk(registry) -> None:
    verdict = validate_camera_move({"move": "drift", "intensity": 0.1}, EYE_LEVEL, 0.3, "cinematic-dark", registry)
    assert CAM_JERK in codes(verdict.warnings)


def test_forbidden_moves_block(registry) -> None:
    pan = validate_camera_move({"move": "pan_left", "intensity": 0.2}, EYE_LEVEL, 3.0, "editorial", registry)
    assert pan.verdict == "BLOCK"
    assert codes(pan.blocks) == [CAM_FORBIDDEN_MOVEMENT]

    drift = validate_camera_move({"move": "drift", "intensity": 0.2}, EYE_LEVEL, 3.0, "neutral-light", registry)
    assert drift.verdict == "BLOCK"
    assert CAM_FORBIDDEN_AMBIENT in codes(drift.blocks)


def test_style_aware_rotation_does_not_block(registry) -> None:
    grammar = {"shot_size": "medium", "angle": "high", "framing": "center"}
    verdict = validate_camera_move({"move": "drift", "intensity": 0.2}, grammar, 4.0, "editorial", registry)
    assert verdict.blocks == []


def test_planned_manifests_pass(registry) -> None:
    scenes = [
        analyzed("ui", content_type="ui_screenshot"),
        analyzed("face", content_type="portrait", weight="dark", tags=("emotional",), size="close_up"),
        analyzed("chart", content_type="data_visualization", size="medium"),
    ]
    for style in ("prestige", "dramatic", "minimal", "energy"):
        manifest = plan_sequence(scenes, style, registry).manifest
        result = validate_manifest(manifest, registry)
        assert result.verdict == "PASS", (style, result.model_dump())
        assert len(result.entries) == 3


def test_consecutive_linear_easing_warns(registry) -> None:
    entry = {
        "scene": {"scene_id": "s"},
        "duration_s": 3.0,
        "camera_override": {"move": "static", "easing": "linear"},
        "shot_grammar": EYE_LEVEL,
    }
    manifest = SequenceManifest.model_validate(
        {
            "sequence_id": "seq_linear",
            "style": "energy",
            "personality": "montage",
            "fps": 60,
            "resolution": {"w": 1920, "h": 1080},
            "entries": [entry, entry, entry],
        }
    )
    result = validate_manifest(manifest, registry)
    assert result.verdict == "WARN"
    assert codes(result.cumulative) == [CAM_CONSECUTIVE_LINEAR]

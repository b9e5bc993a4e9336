from __future__ import annotations

import pytest

from anim_guard.choreography import (
    CHO_BLUR_OUT_OF_BOUNDS,
    CHO_FORBIDDEN_3D,
    CHO_FORBIDDEN_BLUR_ENTRANCE,
    CHO_FORBIDDEN_CAMERA_MOVEMENT,
    CHO_FORBIDDEN_CAMERA_SHAKE,
    CHO_INTENT_MISSING_PRIMITIVES,
    CHO_INTENT_STYLE_UNSUPPORTED,
    CHO_PERSPECTIVE_OUT_OF_BOUNDS,
    CHO_SPEED_EXCEEDED,
    CHO_STYLE_MISMATCH,
    CHO_UNKNOWN_INTENT,
    CHO_UNKNOWN_PRIMITIVE,
    CHO_UNKNOWN_STYLE,
    parse_duration_ms,
    validate_choreography,
)
from anim_sdk.errors import MalformedInput
from anim_sdk.loader import build_registry

from conftest import tiny_catalog


def codes(findings) -> list:
    return [finding.code for finding in findings]


def test_compatible_plan_passes(registry) -> None:
    verdict = validate_choreography(["cd-focus-stagger", "ct-camera-push-in", "un-fade-in"], "cinematic-dark", registry)
    assert verdict.verdict == "PASS"
    assert verdict.blocks == [] and verdict.warnings == []


def test_rotate_y_primitive_blocks_in_editorial(registry) -> None:
    verdict = validate_choreography(["ct-parallax-orbit"], "editorial", registry)
    assert verdict.verdict == "BLOCK"
    assert codes(verdict.blocks) == [CHO_STYLE_MISMATCH, CHO_FORBIDDEN_3D]
    assert [finding.tier for finding in verdict.blocks] == [2, 3]
    assert verdict.blocks[1].primitive_id == "ct-parallax-orbit"


def test_blur_entrance_is_forbidden_in_editorial(registry) -> None:
    verdict = validate_choreography(["ed-blur-reveal"], "editorial", registry)
    assert codes(verdict.blocks) == [CHO_FORBIDDEN_BLUR_ENTRANCE]


def test_shake_collects_every_block_in_neutral_light(registry) -> None:
    verdict = validate_choreography(["ct-camera-shake"], "neutral-light", registry)
    assert codes(verdict.blocks) == [
        CHO_STYLE_MISMATCH,
        CHO_FORBIDDEN_CAMERA_MOVEMENT,
        CHO_FORBIDDEN_CAMERA_SHAKE,
    ]


def test_unknown_references_are_findings_not_errors(registry) -> None:
    verdict = validate_choreography(["ghost", "cd-fade-exit"], "vapor", registry)
    assert verdict.verdict == "BLOCK"
    assert codes(verdict.blocks)[:2] == [CHO_UNKNOWN_STYLE, CHO_UNKNOWN_PRIMITIVE]
    assert verdict.blocks[1].primitive_id == "ghost"


def test_block_outranks_warn(registry) -> None:
    verdict = validate_choreography(
        ["ghost", "cd-depth-reveal"],
        "cinematic-dark",
        registry,
        overrides={"duration_multiplier": 0.25},
    )
    assert verdict.verdict == "BLOCK"
    assert codes(verdict.warnings) == [CHO_SPEED_EXCEEDED]
    assert verdict.warnings[0].value == pytest.approx(500.0)
    assert verdict.warnings[0].limit == 300


def test_lens_overrides_warn(registry) -> None:
    verdict = validate_choreography(
        ["nl-fade-in"],
        "neutral-light",
        registry,
        overrides={"perspective": 500, "max_blur": 20},
    )
    assert verdict.verdict == "WARN"
    assert codes(verdict.warnings) == [CHO_PERSPECTIVE_OUT_OF_BOUNDS, CHO_BLUR_OUT_OF_BOUNDS]


def test_velocity_at_limit_passes(tiny_registry) -> None:
    assert validate_choreography(["slide"], "plain", tiny_registry).verdict == "PASS"


def test_velocity_over_limit_warns() -> None:
    registry = build_registry(tiny_catalog(displacement=401))
    verdict = validate_choreography(["slide"], "plain", registry)
    assert verdict.verdict == "WARN"
    assert verdict.warnings[0].value == pytest.approx(401.0)


def test_intent_findings_are_notes_only(registry) -> None:
    verdict = validate_choreography(["cd-depth-reveal"], "cinematic-dark", registry, intent="hero-reveal")
    assert verdict.verdict == "PASS"
    assert codes(verdict.notes) == [CHO_INTENT_MISSING_PRIMITIVES]
    assert "ct-camera-push-in" in verdict.notes[0].message

    unsupported = validate_choreography(["ed-slide-stagger"], "editorial", registry, intent="dramatic-entrance")
    assert CHO_INTENT_STYLE_UNSUPPORTED in codes(unsupported.notes)

    unknown = validate_choreography(["ed-slide-stagger"], "editorial", registry, intent="nope")
    assert codes(unknown.notes) == [CHO_UNKNOWN_INTENT]


@pytest.mark.parametrize("ids", [[], "cd-fade-exit", [1, 2]])
def test_malformed_primitive_lists_raise(ids, registry) -> None:
    with pytest.raises(MalformedInput):
        validate_choreography(ids, "cinematic-dark", registry)


def test_bad_overrides_raise(registry) -> None:
    with pytest.raises(MalformedInput, match="invalid overrides"):
        validate_choreography(["cd-fade-exit"], "cinematic-dark", registry, overrides={"duration_multiplier": 0})


def test_parse_duration_ms() -> None:
    assert parse_duration_ms("1400ms") == 1400
    assert parse_duration_ms("6000ms loop") == 6000
    assert parse_duration_ms("1.6s loop") == pytest.approx(1600)
    assert parse_duration_ms("forever") is None
    assert parse_duration_ms(None) is None

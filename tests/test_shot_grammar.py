from __future__ import annotations

import pytest

from anim_shot.camera import EASINGS, camera_values, compose, get_easing, linear
from anim_shot.grammar import ShotCSS, resolve_css, validate_shot_grammar

OUT_OF_BOUNDS = {"shot_size": "extreme_close_up", "angle": "dutch", "framing": "dynamic_offset"}


def test_out_of_bounds_grammar_is_clamped_to_fallback(registry) -> None:
    checked = validate_shot_grammar(OUT_OF_BOUNDS, "editorial", registry)
    assert checked.valid is False
    assert checked.result.model_dump() == {"shot_size": "medium", "angle": "eye_level", "framing": "center"}
    assert checked.corrections[0] == (
        'shot_size "extreme_close_up" not allowed for editorial, corrected to "medium"'
    )
    assert len(checked.corrections) == 3


def test_clamping_is_a_fixed_point(registry) -> None:
    once = validate_shot_grammar(OUT_OF_BOUNDS, "neutral-light", registry)
    twice = validate_shot_grammar(once.result, "neutral-light", registry)
    assert twice.valid is True
    assert twice.result == once.result
    assert twice.corrections == []


def test_missing_grammar_defaults_every_axis(registry) -> None:
    checked = validate_shot_grammar(None, "montage", registry)
    assert checked.corrections == [
        'shot_size missing, defaulted to "medium"',
        'angle missing, defaulted to "eye_level"',
        'framing missing, defaulted to "center"',
    ]


def test_unknown_style_clamps_to_catalog_enums(registry) -> None:
    assert validate_shot_grammar(OUT_OF_BOUNDS, "vapor", registry).valid is True
    checked = validate_shot_grammar({"shot_size": "huge", "angle": "dutch", "framing": "center"}, "vapor", registry)
    assert checked.result.shot_size == "medium"
    assert checked.corrections == ['shot_size "huge" not allowed for vapor, corrected to "medium"']


def test_resolve_css_reads_lookup_tables(registry) -> None:
    css = resolve_css({"shot_size": "close_up", "angle": "high", "framing": "rule_of_thirds_right"}, registry)
    assert css == ShotCSS(
        scale=1.2,
        rotate_x=3.0,
        rotate_z=0.0,
        transform_origin="67% 50%",
        perspective_origin="50% 30%",
    )
    assert css.to_dict()["transformOrigin"] == "67% 50%"


def test_resolve_css_applies_style_limits(registry) -> None:
    grammar = {"shot_size": "extreme_close_up", "angle": "dutch", "framing": "center"}
    editorial = resolve_css(grammar, registry, style="editorial")
    assert editorial.scale == 1.2
    assert (editorial.rotate_x, editorial.rotate_z) == (0.0, 0.0)
    assert resolve_css(grammar, registry, style="neutral-light").scale == 1.08
    assert resolve_css(grammar, registry, style="cinematic-dark").rotate_z == 3.0


def test_resolve_css_unknown_values_are_identity(registry) -> None:
    assert resolve_css({"shot_size": "huge", "angle": "sideways", "framing": "nowhere"}, registry) == ShotCSS()
    assert resolve_css(None, registry) == ShotCSS()


@pytest.mark.parametrize("name", sorted(EASINGS))
def test_easings_hit_endpoints(name) -> None:
    curve = EASINGS[name]
    assert curve(0.0) == pytest.approx(0.0)
    assert curve(1.0) == pytest.approx(1.0)


def test_unknown_easing_uses_scurve() -> None:
    assert get_easing("bouncy") is EASINGS["cinematic_scurve"]


def test_compose_orders_functions_and_multiplies_scale() -> None:
    static = ShotCSS(scale=1.1, rotate_x=3.0, transform_origin="33% 50%")
    composed = compose(static, {"move": "push_in", "intensity": 0.5}, 1.0)
    assert composed.transform == "scale(1.144) rotateX(3deg) rotateZ(0deg) translate(0px, 0px)"
    assert composed.transform_origin == "33% 50%"
    assert composed.perspective_origin == "50% 50%"


def test_compose_pan_translates_only() -> None:
    composed = compose(ShotCSS(), {"move": "pan_left", "intensity": 1.0}, 0.5, easing=linear)
    assert composed.transform == "scale(1) rotateX(0deg) rotateZ(0deg) translate(-40px, 0px)"
    assert compose(ShotCSS(), {"move": "pan_left", "intensity": 1.0}, 0.0).transform.endswith(
        "translate(0px, 0px)"
    )


def test_drift_runs_on_raw_progress() -> None:
    composed = compose(ShotCSS(), {"move": "drift", "intensity": 0.5}, 0.0)
    assert composed.transform == "scale(1) rotateX(0deg) rotateZ(0deg) translate(0px, 0.9px)"


def test_static_and_missing_camera_are_identity() -> None:
    assert camera_values(None, 0.7) == camera_values({"move": "static"}, 0.3)
    assert camera_values({"move": "orbit"}, 0.5).scale == 1.0


def test_progress_is_clamped() -> None:
    camera = {"move": "pull_out", "intensity": 1.0}
    assert camera_values(camera, 2.0) == camera_values(camera, 1.0)
    assert camera_values(camera, -1.0).scale == pytest.approx(1.08)

from __future__ import annotations

import random
from itertools import groupby
from typing import Sequence

import pytest

from anim_plan.manifest import validate_manifest_shape
from anim_plan.ordering import order_scenes
from anim_plan.planner import plan_sequence
from anim_plan.variety import Slot, nearest_other_size, repair_shot_variety
from anim_scene.analyzer import coerce_scene
from anim_sdk.errors import MalformedInput, MissingMetadata
from anim_sdk.models import ANGLES, FRAMINGS, SHOT_SIZES, ShotGrammar

from conftest import analyzed


def longest_run(sizes: Sequence[str]) -> int:
    return max(len(list(group)) for _, group in groupby(sizes))


def test_unanalyzed_scenes_raise_missing_metadata(registry) -> None:
    with pytest.raises(MissingMetadata, match="analyze them first") as excinfo:
        plan_sequence([{"scene_id": "raw"}, analyzed("ok")], "prestige", registry)
    assert excinfo.value.scene_ids == ["raw"]


@pytest.mark.parametrize(
    "scenes, style, sequence_id",
    [
        ([], "prestige", None),
        ([analyzed("a")], "disco", None),
        ([analyzed("a")], "prestige", "Not An Id"),
    ],
)
def test_bad_planner_input_is_malformed(scenes, style, sequence_id, registry) -> None:
    with pytest.raises(MalformedInput):
        plan_sequence(scenes, style, registry, sequence_id=sequence_id)


def test_five_wide_scenes_are_broken_up(registry) -> None:
    scenes = [analyzed(f"wide_{i}") for i in range(5)]
    plan = plan_sequence(scenes, "prestige", registry)
    entries = plan.manifest.entries
    sizes = [entry.shot_grammar.shot_size for entry in entries]

    assert len(entries) == 5
    assert sorted(entry.scene.scene_id for entry in entries) == [f"wide_{i}" for i in range(5)]
    assert longest_run(sizes) <= registry.config.planning.max_shot_size_run
    allowed = registry.style("editorial").shot_grammar.allowed_sizes
    assert all(size in allowed for size in sizes)
    assert any("re-framed" in note for note in plan.notes.repairs)


def test_variety_repair_prefers_swapping(registry) -> None:
    scenes = [analyzed("w1"), analyzed("w2"), analyzed("w3"), analyzed("c1", size="close_up")]
    plan = plan_sequence(scenes, "prestige", registry)
    order = [entry.scene.scene_id for entry in plan.manifest.entries]
    assert order == ["w1", "c1", "w3", "w2"]
    assert plan.notes.repairs[0].startswith("swapped")


def test_prestige_plan_fields(registry) -> None:
    plan = plan_sequence([analyzed(f"ui_{i}") for i in range(3)], "prestige", registry, sequence_id="seq_demo")
    manifest = plan.manifest
    assert manifest.sequence_id == "seq_demo"
    assert (manifest.style, manifest.personality, manifest.fps) == ("prestige", "editorial", 60)
    assert manifest.entries[0].transition is None
    assert [entry.transition.type for entry in manifest.entries[1:]] == ["hard_cut", "hard_cut"]
    first = manifest.entries[0]
    assert first.duration_s == 3.3
    assert first.camera_override.move == "drift"
    assert first.camera_override.intensity == 0.2
    assert first.camera_override.easing == "ease_out"
    assert plan.notes.transition_summary == {"hard_cut": 2}
    assert plan.notes.total_duration_s == pytest.approx(9.9)
    assert validate_manifest_shape(manifest, registry) == []


def test_energy_pack_cycles_whips(registry) -> None:
    scenes = [analyzed(f"s{i}", content_type="product_shot", energy="high") for i in range(7)]
    plan = plan_sequence(scenes, "energy", registry)
    transitions = [entry.transition.type for entry in plan.manifest.entries[1:]]
    assert transitions == ["hard_cut", "hard_cut", "whip_left", "hard_cut", "hard_cut", "whip_right"]
    assert all(entry.camera_override.move == "static" for entry in plan.manifest.entries)
    assert all(entry.duration_s <= 4.0 for entry in plan.manifest.entries)
    assert plan.notes.total_duration_s == pytest.approx(7 * 1.5 - 0.5)


def test_forbidden_camera_falls_back_to_static(registry) -> None:
    scene = analyzed("walk", content_type="typography")
    scene["camera"] = {"move": "pan_left", "intensity": 0.5}
    plan = plan_sequence([scene], "prestige", registry)
    assert plan.manifest.entries[0].camera_override.move == "static"
    assert any("not allowed for editorial" in note for note in plan.notes.repairs)


def test_out_of_bounds_grammar_is_corrected_and_noted(registry) -> None:
    scene = analyzed("tight", size="extreme_close_up")
    plan = plan_sequence([scene], "minimal", registry)
    assert plan.manifest.entries[0].shot_grammar.shot_size == "medium"
    assert plan.notes.grammar_corrections["tight"]


def test_missing_grammar_is_classified(registry) -> None:
    scene = analyzed("nogrammar")
    scene["metadata"]["shot_grammar"] = None
    plan = plan_sequence([scene], "prestige", registry)
    assert plan.manifest.entries[0].shot_grammar.shot_size in ("wide", "medium", "close_up")


def test_planning_is_deterministic(registry) -> None:
    scenes = [analyzed("a"), analyzed("b", weight="dark"), analyzed("c", tags=("opening",))]
    first = plan_sequence(scenes, "dramatic", registry)
    second = plan_sequence(scenes, "dramatic", registry)
    assert first.model_dump() == second.model_dump()
    assert first.manifest.sequence_id.startswith("seq_")


def test_order_scenes_buckets_by_intent() -> None:
    scenes = [
        coerce_scene(analyzed("detail", content_type="ui_screenshot", weight="light")),
        coerce_scene(analyzed("closing", content_type="brand_mark", weight="dark", tags=("closing",))),
        coerce_scene(analyzed("opening", content_type="typography", weight="mixed", tags=("opening",))),
        coerce_scene(analyzed("hero", content_type="product_shot", weight="dark", tags=("hero",))),
    ]
    ordered = [scene.scene_id for scene in order_scenes(scenes)]
    assert ordered == ["opening", "hero", "detail", "closing"]


def test_rationale_names_opening_and_closing_intents(registry) -> None:
    scenes = [
        analyzed("detail", content_type="ui_screenshot", weight="light"),
        analyzed("closing", content_type="brand_mark", weight="dark", tags=("closing",)),
        analyzed("opening", content_type="typography", weight="mixed", tags=("opening",)),
        analyzed("hero", content_type="product_shot", weight="dark", tags=("hero",)),
    ]
    notes = plan_sequence(scenes, "prestige", registry).notes
    assert notes.ordering_rationale == (
        "Opens with opening scene; closes with closing scene; 4 content type(s) across 4 scenes"
    )

    single = plan_sequence([analyzed("solo", tags=())], "prestige", registry).notes
    assert single.ordering_rationale == "1 content type(s) across 1 scenes"


def test_nearest_other_size() -> None:
    assert nearest_other_size("wide", ["wide", "medium", "close_up"]) == "medium"
    assert nearest_other_size("medium", ["wide", "medium", "close_up"]) == "wide"
    assert nearest_other_size("wide", ["wide"]) == "wide"


def test_repair_leaves_run_when_style_has_one_size() -> None:
    scene = coerce_scene(analyzed("only"))
    grammar = ShotGrammar(shot_size="wide", angle="eye_level", framing="center")
    slots = [Slot(scene=scene, grammar=grammar) for _ in range(3)]
    repaired, notes = repair_shot_variety(slots, ["wide"])
    assert [slot.size for slot in repaired] == ["wide", "wide", "wide"]
    assert "left as is" in notes[0]


@pytest.mark.parametrize("style", ["prestige", "energy", "dramatic", "minimal"])
def test_random_plans_keep_grammar_in_bounds(style, registry) -> None:
    rng = random.Random(style)
    personality = registry.style(registry.style_pack(style).personality)
    allowed = personality.shot_grammar
    for _ in range(25):
        scenes = []
        for index in range(rng.randint(1, 8)):
            scene = analyzed(
                f"s{index}",
                content_type=rng.choice(["ui_screenshot", "portrait", "typography", "collage"]),
                weight=rng.choice(["light", "dark", "mixed"]),
                energy=rng.choice(["static", "subtle", "moderate", "high"]),
                tags=rng.sample(["opening", "hero", "detail", "emotional", "closing"], rng.randint(0, 2)),
                size=rng.choice(SHOT_SIZES),
            )
            scene["metadata"]["shot_grammar"]["angle"] = rng.choice(ANGLES)
            scene["metadata"]["shot_grammar"]["framing"] = rng.choice(FRAMINGS)
            scenes.append(scene)
        entries = plan_sequence(scenes, style, registry).manifest.entries
        assert len(entries) == len(scenes)
        for entry in entries:
            assert entry.shot_grammar.shot_size in allowed.allowed_sizes
            assert entry.shot_grammar.angle in allowed.allowed_angles
            assert entry.shot_grammar.framing in allowed.allowed_framings
        if len(allowed.allowed_sizes) > 1:
            assert longest_run([entry.shot_grammar.shot_size for entry in entries]) <= 2

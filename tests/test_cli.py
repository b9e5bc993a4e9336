from __future__ import annotations

import json

from typer.testing import CliRunner

from anim_plan.planner import plan_sequence
from anim_sdk.cli import app
from conftest import SCENES_DIR, analyzed

runner = CliRunner()


def test_catalog_validate_ok() -> None:
    result = runner.invoke(app, ["catalog", "validate"])
    assert result.exit_code == 0
    assert "Catalog OK" in result.stdout


def test_catalog_stats() -> None:
    result = runner.invoke(app, ["catalog", "stats"])
    assert result.exit_code == 0
    assert "primitives: 27" in result.stdout
    assert "style packs: 4" in result.stdout


def test_scene_analyze_reads_yaml() -> None:
    result = runner.invoke(app, ["scene", "analyze", str(SCENES_DIR / "founder_portrait.yml")])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["metadata"]["content_type"] == "portrait"


def test_sequence_plan_with_analysis() -> None:
    result = runner.invoke(
        app,
        [
            "sequence",
            "plan",
            str(SCENES_DIR / "split_panel.json"),
            str(SCENES_DIR / "founder_portrait.yml"),
            str(SCENES_DIR / "dashboard.json"),
            "--style",
            "dramatic",
            "--analyze",
        ],
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["manifest"]["personality"] == "cinematic-dark"
    assert payload["notes"]["scene_count"] == 3


def test_sequence_plan_without_metadata_fails() -> None:
    result = runner.invoke(app, ["sequence", "plan", str(SCENES_DIR / "split_panel.json")])
    assert result.exit_code == 1
    assert "analyze them first" in result.stdout


def test_choreography_validate_exit_codes() -> None:
    ok = runner.invoke(app, ["choreography", "validate", "cd-focus-stagger", "--style", "cinematic-dark"])
    assert ok.exit_code == 0
    assert "verdict: PASS" in ok.stdout

    blocked = runner.invoke(app, ["choreography", "validate", "ct-parallax-orbit", "--style", "editorial"])
    assert blocked.exit_code == 1
    assert "CHO_FORBIDDEN_3D" in blocked.stdout


def test_choreography_recommend() -> None:
    result = runner.invoke(app, ["choreography", "recommend", "hero-reveal", "--style", "editorial"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["styles"][0]["camera_primitives"] == ["ct-camera-push-in"]


def test_sequence_evaluate_reads_plan_output(tmp_path, registry) -> None:
    scenes = [analyzed("a"), analyzed("b", weight="dark")]
    plan_path = tmp_path / "plan.json"
    plan_path.write_text(json.dumps(plan_sequence(scenes, "prestige", registry).model_dump(mode="json")))

    result = runner.invoke(app, ["sequence", "evaluate", str(plan_path)])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["dimensions"]["adherence"]["score"] == 100

    strict = runner.invoke(app, ["sequence", "evaluate", str(plan_path), "--min-score", "101"])
    assert strict.exit_code == 1

    unknown = runner.invoke(app, ["sequence", "evaluate", str(plan_path), "--style", "vapor"])
    assert unknown.exit_code == 1
    assert "unknown style pack" in unknown.stdout

from __future__ import annotations

import json

from fastapi.testclient import TestClient

from anim_api.main import app
from conftest import SCENES_DIR, analyzed

client = TestClient(app)


def _scene(name: str) -> dict:
    return json.loads((SCENES_DIR / name).read_text(encoding="utf-8"))


def test_health_reports_catalog_version() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["version"]


def test_status_lists_catalog_files() -> None:
    payload = client.get("/status").json()
    assert payload["ok"] is True
    versions = payload["data"]["catalog_versions"]
    assert {"primitives", "personalities", "guardrails", "config"} <= set(versions)
    assert "sha256" in versions["primitives"]
    catalog = payload["data"]["catalog"]
    assert catalog["primitives"] == 27
    assert catalog["style_packs"] == ["dramatic", "energy", "minimal", "prestige"]
    assert "editorial" in catalog["styles"]


def test_catalog_search_and_lookup() -> None:
    payload = client.get("/catalog/primitives", params={"style": "montage"}).json()
    assert payload["ok"] is True
    ids = [entry["id"] for entry in payload["data"]["primitives"]]
    assert "mo-hard-pop" in ids and "un-crossfade" in ids
    assert "cd-depth-reveal" not in ids

    primitive = client.get("/catalog/primitives/cd-focus-stagger").json()["data"]
    assert primitive["blur"] is True
    assert primitive["amplitude"]["property"] == "blur"

    style = client.get("/catalog/styles/editorial").json()["data"]
    assert "3d_transforms" in style["forbidden_features"]
    assert style["boundaries"]["max_translate_xy"] == 30

    assert client.get("/catalog/intents/hero-reveal").json()["data"]["label"] == "Hero reveal"


def test_unknown_catalog_ids_are_404() -> None:
    assert client.get("/catalog/primitives/ghost").status_code == 404
    assert client.get("/catalog/styles/vapor").status_code == 404
    assert client.get("/catalog/intents/nope").status_code == 404


def test_scene_analyze_endpoint() -> None:
    response = client.post("/scene/analyze", json={"scene": _scene("split_panel.json"), "enrich": True})
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    data = payload["data"]
    assert data["metadata"]["content_type"] == "split_panel"
    assert data["scene"]["metadata"]["shot_grammar"]["framing"] == "rule_of_thirds_left"


def test_scene_analyze_rejects_malformed_scene() -> None:
    payload = client.post("/scene/analyze", json={"scene": {"layers": []}}).json()
    assert payload["ok"] is False
    assert payload["errors"]


def test_sequence_plan_endpoint() -> None:
    body = {
        "scenes": [_scene("split_panel.json"), _scene("dashboard.json")],
        "style": "prestige",
        "analyze": True,
        "sequence_id": "seq_api_demo",
    }
    payload = client.post("/sequence/plan", json=body).json()
    assert payload["ok"] is True
    assert payload["warnings"] == []
    manifest = payload["data"]["manifest"]
    assert manifest["sequence_id"] == "seq_api_demo"
    assert len(manifest["entries"]) == 2
    assert payload["data"]["notes"]["scene_count"] == 2


def test_sequence_plan_reports_missing_metadata() -> None:
    body = {"scenes": [_scene("split_panel.json"), analyzed("done")], "style": "prestige"}
    payload = client.post("/sequence/plan", json=body).json()
    assert payload["ok"] is False
    assert payload["data"]["missing_metadata"] == ["sc_split_intro"]


def test_choreography_validate_endpoint() -> None:
    body = {"primitive_ids": ["ct-parallax-orbit"], "style": "editorial"}
    payload = client.post("/choreography/validate", json=body).json()
    assert payload["ok"] is True
    assert payload["data"]["verdict"] == "BLOCK"

    bad = client.post("/choreography/validate", json={"primitive_ids": [], "style": "editorial"}).json()
    assert bad["ok"] is False


def test_choreography_recommend_endpoint() -> None:
    payload = client.post("/choreography/recommend", json={"intent": "sizzle-burst"}).json()
    assert payload["ok"] is True
    assert payload["data"]["styles"][0]["style"] == "montage"


def test_guardrail_endpoints() -> None:
    camera = client.post(
        "/guardrails/camera",
        json={"camera": {"move": "pan_left", "intensity": 0.2}, "duration_s": 3.0, "style": "editorial"},
    ).json()
    assert camera["data"]["verdict"] == "BLOCK"

    plan = client.post(
        "/sequence/plan",
        json={"scenes": [analyzed("a"), analyzed("b")], "style": "dramatic"},
    ).json()
    manifest = plan["data"]["manifest"]
    result = client.post("/guardrails/manifest", json=manifest).json()
    assert result["ok"] is True
    assert result["data"]["verdict"] == "PASS"


def test_sequence_evaluate_endpoint() -> None:
    plan = client.post(
        "/sequence/plan",
        json={"scenes": [analyzed("a"), analyzed("b", weight="dark")], "style": "prestige"},
    ).json()
    manifest = plan["data"]["manifest"]
    payload = client.post("/sequence/evaluate", json={"manifest": manifest}).json()
    assert payload["ok"] is True
    assert payload["data"]["dimensions"]["adherence"]["score"] == 100
    assert set(payload["data"]["dimensions"]) == {"pacing", "variety", "flow", "adherence"}

    manifest["entries"][1]["camera_override"] = {"move": "pan_left", "intensity": 0.2}
    edited = client.post("/sequence/evaluate", json={"manifest": manifest, "style": "prestige"}).json()
    assert edited["data"]["dimensions"]["adherence"]["score"] < 100
    assert any('camera "pan_left"' in warning for warning in edited["warnings"])

    bad = client.post("/sequence/evaluate", json={"manifest": manifest, "style": "vapor"}).json()
    assert bad["ok"] is False

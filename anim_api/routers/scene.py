"""Scene analysis endpoints."""
from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter
from pydantic import BaseModel, Field

from anim_api.utils import err, ok
from anim_scene.analyzer import analyze_scene, enrich_scene
from anim_sdk.errors import AnimaticError
from anim_sdk.loader import get_registry

router = APIRouter()


class AnalyzeRequest(BaseModel):
    scene: Dict[str, Any]
    enrich: bool = False


class AnalyzeBatchRequest(BaseModel):
    scenes: List[Dict[str, Any]] = Field(default_factory=list)


@router.post("/scene/analyze")
def analyze(payload: AnalyzeRequest) -> Dict[str, Any]:
    registry = get_registry()
    try:
        analysis = analyze_scene(payload.scene, registry)
    except AnimaticError as exc:
        return err([str(exc)])
    data = analysis.to_dict()
    if payload.enrich:
        data["scene"] = enrich_scene(payload.scene, registry).model_dump(mode="json")
    warnings = [f"low confidence: {name}" for name in analysis.low_confidence]
    return ok(data, warnings)


@router.post("/scene/analyze/batch")
def analyze_batch(payload: AnalyzeBatchRequest) -> Dict[str, Any]:
    registry = get_registry()
    results: List[Dict[str, Any]] = []
    errors: List[str] = []
    for index, scene in enumerate(payload.scenes):
        try:
            results.append(enrich_scene(scene, registry).model_dump(mode="json"))
        except AnimaticError as exc:
            errors.append(f"scenes[{index}]: {exc}")
    data = {"scenes": results}
    if errors:
        return {"ok": False, "data": data, "warnings": [], "errors": errors}
    return ok(data)


__all__ = ["analyze", "analyze_batch"]

"""Sequence planning and evaluation endpoints."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from anim_api.utils import err, ok
from anim_guard.evaluate import evaluate_sequence
from anim_plan.manifest import validate_manifest_shape
from anim_plan.models import SequenceManifest
from anim_plan.planner import plan_sequence
from anim_scene.analyzer import enrich_scene
from anim_sdk.errors import AnimaticError, MissingMetadata
from anim_sdk.loader import get_registry

router = APIRouter()


class PlanRequest(BaseModel):
    scenes: List[Dict[str, Any]]
    style: str = "prestige"
    sequence_id: Optional[str] = None
    analyze: bool = False


class EvaluateRequest(BaseModel):
    manifest: SequenceManifest
    scenes: Optional[List[Dict[str, Any]]] = None
    style: Optional[str] = None


@router.post("/sequence/plan")
def plan(payload: PlanRequest) -> Dict[str, Any]:
    registry = get_registry()
    try:
        scenes = payload.scenes
        if payload.analyze:
            scenes = [enrich_scene(scene, registry) for scene in scenes]
        result = plan_sequence(scenes, payload.style, registry, sequence_id=payload.sequence_id)
    except MissingMetadata as exc:
        return {
            "ok": False,
            "data": {"missing_metadata": exc.scene_ids},
            "warnings": [],
            "errors": [str(exc)],
        }
    except AnimaticError as exc:
        return err([str(exc)])
    shape_errors = validate_manifest_shape(result.manifest, registry)
    return ok(result.model_dump(mode="json"), shape_errors)


@router.post("/sequence/evaluate")
def evaluate(payload: EvaluateRequest) -> Dict[str, Any]:
    try:
        result = evaluate_sequence(payload.manifest, payload.scenes, payload.style, get_registry())
    except AnimaticError as exc:
        return err([str(exc)])
    warnings = [finding.message for finding in result.findings if finding.severity == "warning"]
    return ok(result.model_dump(mode="json"), warnings)


__all__ = ["evaluate", "plan"]

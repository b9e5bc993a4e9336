"""Camera and manifest guardrail endpoints."""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from anim_api.utils import ok
from anim_guard.camera import validate_camera_move, validate_manifest
from anim_plan.models import SequenceManifest
from anim_sdk.loader import get_registry
from anim_sdk.models import ShotGrammar
from anim_sdk.scene import CameraMove

router = APIRouter(prefix="/guardrails")


class CameraRequest(BaseModel):
    camera: Optional[CameraMove] = None
    shot_grammar: Optional[ShotGrammar] = None
    duration_s: float = Field(default=3.0, gt=0)
    style: str


@router.post("/camera")
def camera(payload: CameraRequest) -> Dict[str, Any]:
    verdict = validate_camera_move(
        payload.camera,
        payload.shot_grammar,
        payload.duration_s,
        payload.style,
        get_registry(),
    )
    return ok(verdict.model_dump(mode="json"))


@router.post("/manifest")
def manifest(payload: SequenceManifest) -> Dict[str, Any]:
    verdict = validate_manifest(payload, get_registry())
    return ok(verdict.model_dump(mode="json"))


__all__ = ["camera", "manifest"]

"""Choreography validation and recommendation endpoints."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from anim_api.utils import err, ok
from anim_guard.choreography import validate_choreography
from anim_guard.models import ChoreographyOverrides
from anim_guard.recommend import recommend_choreography
from anim_sdk.errors import AnimaticError
from anim_sdk.loader import get_registry

router = APIRouter(prefix="/choreography")


class ValidateRequest(BaseModel):
    primitive_ids: List[str]
    style: str
    intent: Optional[str] = None
    overrides: Optional[ChoreographyOverrides] = None


class RecommendRequest(BaseModel):
    intent: str
    style: Optional[str] = None
    subject_count: Optional[int] = None


@router.post("/validate")
def validate(payload: ValidateRequest) -> Dict[str, Any]:
    try:
        verdict = validate_choreography(
            payload.primitive_ids,
            payload.style,
            get_registry(),
            intent=payload.intent,
            overrides=payload.overrides,
        )
    except AnimaticError as exc:
        return err([str(exc)])
    return ok(verdict.model_dump(mode="json"))


@router.post("/recommend")
def recommend(payload: RecommendRequest) -> Dict[str, Any]:
    try:
        recommendation = recommend_choreography(
            payload.intent,
            get_registry(),
            style=payload.style,
            subject_count=payload.subject_count,
        )
    except AnimaticError as exc:
        return err([str(exc)])
    return ok(recommendation.to_dict())


__all__ = ["recommend", "validate"]

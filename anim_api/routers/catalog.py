"""Read-only catalog endpoints."""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException

from anim_api.utils import ok
from anim_sdk.loader import get_registry
from anim_sdk.registry import search_primitives

router = APIRouter(prefix="/catalog")


@router.get("/primitives")
def list_primitives(
    q: Optional[str] = None,
    style: Optional[str] = None,
    category: Optional[str] = None,
    source: Optional[str] = None,
) -> Dict[str, Any]:
    registry = get_registry()
    matches = search_primitives(registry, query=q, style=style, category=category, source=source)
    return ok({"count": len(matches), "primitives": [entry.model_dump() for entry in matches]})


@router.get("/primitives/{primitive_id}")
def get_primitive(primitive_id: str) -> Dict[str, Any]:
    registry = get_registry()
    entry = registry.primitive(primitive_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"primitive {primitive_id} not found")
    amplitude = registry.amplitude(primitive_id)
    data = entry.model_dump()
    data["amplitude"] = amplitude.model_dump() if amplitude else None
    data["blur"] = registry.is_blur_primitive(primitive_id)
    return ok(data)


@router.get("/styles/{slug}")
def get_style(slug: str) -> Dict[str, Any]:
    registry = get_registry()
    style = registry.style(slug)
    if style is None:
        raise HTTPException(status_code=404, detail=f"style {slug} not found")
    boundary = registry.style_boundary(slug)
    data = style.model_dump()
    data["boundaries"] = boundary.model_dump() if boundary else None
    return ok(data)


@router.get("/intents/{slug}")
def get_intent(slug: str) -> Dict[str, Any]:
    mapping = get_registry().intent(slug)
    if mapping is None:
        raise HTTPException(status_code=404, detail=f"intent {slug} not found")
    return ok(mapping.model_dump())


__all__ = ["get_intent", "get_primitive", "get_style", "list_primitives"]

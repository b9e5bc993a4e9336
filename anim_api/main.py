"""Animatic core FastAPI application."""
from __future__ import annotations

import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from anim_sdk import catalog_versions
from anim_sdk.loader import get_registry
from anim_sdk.validators import validate_registry

from .routers import catalog, choreography, guardrails, health, scene, sequence, status

structlog.configure(processors=[structlog.processors.JSONRenderer()])
logger = structlog.get_logger(__name__)


def _log_catalog() -> None:
    registry = get_registry()
    warnings = validate_registry(registry)
    logger.info(
        "catalog.registry.validated",
        version=registry.version,
        primitives=len(registry.primitives()),
        styles=len(registry.styles()),
        style_packs=len(registry.style_packs()),
        intents=len(registry.intents()),
        warnings=len(warnings),
    )


def _log_catalog_versions() -> None:
    logger.info("catalog.versions.snapshot", versions=catalog_versions())


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - framework glue
    _log_catalog_versions()
    _log_catalog()
    yield


app = FastAPI(title="Animatic Core API", version="0.1.0", lifespan=lifespan)
app.include_router(health.router)
app.include_router(status.router)
app.include_router(catalog.router)
app.include_router(scene.router)
app.include_router(sequence.router)
app.include_router(choreography.router)
app.include_router(guardrails.router)


def _cors_enabled() -> bool:
    toggle = os.getenv("ANIMATIC_API_ENABLE_CORS", "").strip().lower()
    return toggle in {"1", "true", "yes", "on"}


if _cors_enabled():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

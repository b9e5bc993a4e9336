"""Status endpoint exposing runtime and catalog metadata."""
from __future__ import annotations

import platform
import sys
import time

from fastapi import APIRouter

from anim_api.utils import ok
from anim_sdk import __version__ as sdk_version
from anim_sdk.loader import get_registry
from anim_sdk.versioning import catalog_versions

_started = time.time()
router = APIRouter()


@router.get("/status")
def status() -> dict[str, object]:
    """Return uptime, catalog contents and file digests."""

    registry = get_registry()
    return ok(
        {
            "sdk_version": sdk_version,
            "catalog_version": registry.version,
            "catalog": {
                "primitives": len(registry.primitives()),
                "styles": sorted(registry.styles()),
                "style_packs": sorted(registry.style_packs()),
                "intents": len(registry.intents()),
                "amplitudes": len(registry.guardrails.primitive_amplitudes),
            },
            "catalog_versions": catalog_versions(),
            "uptime_sec": round(time.time() - _started, 2),
            "build": {
                "python": sys.version.split()[0],
                "platform": platform.platform(),
            },
        }
    )

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from anim_sdk.loader import build_registry, load_registry  # noqa: E402
from anim_sdk.registry import Registry  # noqa: E402

SCENES_DIR = REPO_ROOT / "tests" / "fixtures" / "scenes"


@pytest.fixture(scope="session")
def registry() -> Registry:
    """The shipped reference catalog."""

    return load_registry()


def tiny_catalog(
    *,
    displacement: float = 400,
    duration: str = "1000ms",
    speed_limit: float = 400,
    forbidden: Optional[list] = None,
) -> Dict[str, Any]:
    """Return an in-memory catalog with one primitive and one style."""

    return {
        "version": "test",
        "primitives": {
            "version": 1,
            "primitives": [
                {
                    "id": "slide",
                    "name": "Slide",
                    "category": "Entrances",
                    "duration": duration,
                    "styles": ["plain"],
                }
            ],
        },
        "personalities": {
            "version": 1,
            "personalities": [
                {
                    "slug": "plain",
                    "name": "Plain",
                    "forbidden_features": forbidden or [],
                    "shot_grammar": {
                        "allowed_sizes": ["wide", "medium"],
                        "allowed_angles": ["eye_level"],
                        "allowed_framings": ["center"],
                        "max_scale": 1.1,
                        "use_3d_rotation": False,
                    },
                }
            ],
        },
        "style_packs": {
            "version": 1,
            "packs": [
                {
                    "name": "plain-pack",
                    "personality": "plain",
                    "durations": {"static": 3.0, "subtle": 3.0, "moderate": 3.0, "high": 3.0},
                    "transitions": [{"when": "always", "type": "hard_cut"}],
                }
            ],
        },
        "intents": {"version": 1, "intents": []},
        "guardrails": {
            "version": 1,
            "speed_limits": {"translateX": {"max_velocity": speed_limit, "unit": "px/s"}},
            "lens_bounds": {
                "perspective": {"min": 800, "max": 2000},
                "blur": {"min": 0, "max": 12},
                "scale": {"min": 0.95, "max": 1.05},
                "rotation": {"min": -20, "max": 20},
            },
            "primitive_amplitudes": {
                "slide": {"property": "translateX", "max_displacement": displacement, "unit": "px"}
            },
        },
        "shot_grammar": {
            "version": 1,
            "sizes": {
                "wide": {"scale": 1.0},
                "medium": {"scale": 1.1},
                "close_up": {"scale": 1.2},
                "extreme_close_up": {"scale": 1.4},
            },
            "angles": {
                "eye_level": {},
                "high": {"rotate_x": 3, "perspective_origin": "50% 30%"},
                "low": {"rotate_x": -2, "perspective_origin": "50% 70%"},
                "dutch": {"rotate_z": 3},
            },
            "framings": {
                "center": {},
                "rule_of_thirds_left": {"transform_origin": "33% 50%"},
                "rule_of_thirds_right": {"transform_origin": "67% 50%"},
                "dynamic_offset": {"transform_origin": "30% 40%"},
            },
        },
    }


@pytest.fixture
def tiny_registry() -> Registry:
    return build_registry(tiny_catalog())


def analyzed(
    scene_id: str,
    *,
    content_type: str = "ui_screenshot",
    weight: str = "light",
    energy: str = "moderate",
    tags: Sequence[str] = ("detail",),
    size: str = "wide",
    confidence: float = 0.65,
) -> Dict[str, Any]:
    """Return a scene dict that already carries analyzer metadata."""

    return {
        "scene_id": scene_id,
        "layers": [{"id": "shot", "type": "image"}],
        "metadata": {
            "content_type": content_type,
            "visual_weight": weight,
            "motion_energy": energy,
            "intent_tags": list(tags),
            "shot_grammar": {"shot_size": size, "angle": "eye_level", "framing": "center"},
            "confidence": {"content_type": 0.9, "intent_tags": confidence},
        },
    }

"""Shot grammar resolution and camera composition."""
from __future__ import annotations

from .camera import EASINGS, CameraValues, ComposedTransform, camera_values, compose, get_easing
from .grammar import GrammarValidation, ShotCSS, resolve_css, validate_shot_grammar

__all__ = [
    "EASINGS",
    "CameraValues",
    "ComposedTransform",
    "GrammarValidation",
    "ShotCSS",
    "camera_values",
    "compose",
    "get_easing",
    "resolve_css",
    "validate_shot_grammar",
]

"""Exceptions raised by the animatic core.

Only caller contract violations are raised. Unknown catalog references inside
a proposed choreography are reported as findings, never thrown.
"""
from __future__ import annotations

from typing import Iterable, List


class AnimaticError(ValueError):
    """Base class for caller contract violations."""


class MalformedInput(AnimaticError):
    """A scene, scene list or primitive list failed basic shape checks."""


class MissingMetadata(AnimaticError):
    """The planner was handed scenes that were never analyzed."""

    def __init__(self, scene_ids: Iterable[str]) -> None:
        self.scene_ids: List[str] = list(scene_ids)
        joined = ", ".join(self.scene_ids)
        super().__init__(f"scenes missing metadata, analyze them first: {joined}")


__all__ = ["AnimaticError", "MalformedInput", "MissingMetadata"]

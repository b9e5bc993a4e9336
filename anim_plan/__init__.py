"""Sequence planning: ordering, timing, transitions and shot variety."""
from __future__ import annotations

from .manifest import validate_manifest_shape
from .models import ManifestEntry, PlanNotes, SequenceManifest, SequencePlan, Transition
from .planner import plan_sequence

__all__ = [
    "ManifestEntry",
    "PlanNotes",
    "SequenceManifest",
    "SequencePlan",
    "Transition",
    "plan_sequence",
    "validate_manifest_shape",
]

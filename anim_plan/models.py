"""Pydantic models for sequence manifests and planning notes."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from anim_sdk.models import Resolution, ShotGrammar
from anim_sdk.scene import CameraMove, Scene


class Transition(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    duration_ms: Optional[int] = Field(default=None, ge=0)


class ManifestEntry(BaseModel):
    """Fully resolved scene slot; a renderer needs nothing else."""

    model_config = ConfigDict(frozen=True)

    scene: Scene
    duration_s: float
    transition: Optional[Transition] = None
    camera_override: CameraMove
    shot_grammar: ShotGrammar


class SequenceManifest(BaseModel):
    model_config = ConfigDict(frozen=True)

    sequence_id: str
    style: str
    personality: str
    fps: int
    resolution: Resolution
    entries: List[ManifestEntry]


class PlanNotes(BaseModel):
    """Editorial notes describing the decisions behind a manifest."""

    total_duration_s: float
    scene_count: int
    style_personality: str
    ordering_rationale: str
    transition_summary: Dict[str, int] = Field(default_factory=dict)
    repairs: List[str] = Field(default_factory=list)
    grammar_corrections: Dict[str, List[str]] = Field(default_factory=dict)
    low_confidence: Dict[str, List[str]] = Field(default_factory=dict)


class SequencePlan(BaseModel):
    manifest: SequenceManifest
    notes: PlanNotes


__all__ = ["ManifestEntry", "PlanNotes", "SequenceManifest", "SequencePlan", "Transition"]

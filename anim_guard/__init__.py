"""Guardrails: choreography verdicts, camera checks, recommendations and sequence scoring."""
from __future__ import annotations

from .camera import validate_camera_move, validate_manifest
from .choreography import parse_duration_ms, validate_choreography
from .evaluate import evaluate_sequence
from .models import (
    ChoreographyOverrides,
    DimensionScore,
    EvaluationFinding,
    Finding,
    ManifestVerdict,
    SequenceEvaluation,
    Verdict,
)
from .recommend import Recommendation, recommend_choreography

__all__ = [
    "ChoreographyOverrides",
    "DimensionScore",
    "EvaluationFinding",
    "Finding",
    "ManifestVerdict",
    "Recommendation",
    "SequenceEvaluation",
    "Verdict",
    "evaluate_sequence",
    "parse_duration_ms",
    "recommend_choreography",
    "validate_camera_move",
    "validate_choreography",
    "validate_manifest",
]

"""Verdicts and findings produced by the guardrail checks."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

VerdictLevel = Literal["PASS", "WARN", "BLOCK"]


class Finding(BaseModel):
    """One diagnostic emitted by a guardrail tier."""

    model_config = ConfigDict(frozen=True)

    tier: int
    code: str
    message: str
    primitive_id: Optional[str] = None
    value: Optional[float] = None
    limit: Optional[Any] = None


class Verdict(BaseModel):
    """PASS/WARN/BLOCK with ordered blocks, warnings and notes."""

    model_config = ConfigDict(frozen=True)

    verdict: VerdictLevel
    blocks: List[Finding] = Field(default_factory=list)
    warnings: List[Finding] = Field(default_factory=list)
    notes: List[Finding] = Field(default_factory=list)

    @classmethod
    def from_findings(
        cls,
        blocks: List[Finding],
        warnings: List[Finding],
        notes: List[Finding],
    ) -> "Verdict":
        if blocks:
            level: VerdictLevel = "BLOCK"
        elif warnings:
            level = "WARN"
        else:
            level = "PASS"
        return cls(verdict=level, blocks=list(blocks), warnings=list(warnings), notes=list(notes))


class ChoreographyOverrides(BaseModel):
    """Optional numeric overrides checked against lens bounds and used for speed."""

    model_config = ConfigDict(frozen=True)

    perspective: Optional[float] = None
    max_blur: Optional[float] = None
    duration_multiplier: float = Field(default=1.0, gt=0)


class ManifestVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    verdict: VerdictLevel
    entries: List[Verdict] = Field(default_factory=list)
    cumulative: List[Finding] = Field(default_factory=list)


class EvaluationFinding(BaseModel):
    """Actionable observation about a planned sequence."""

    model_config = ConfigDict(frozen=True)

    severity: Literal["info", "warning"]
    dimension: str
    message: str
    scene_index: Optional[int] = None


class DimensionScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    findings: List[EvaluationFinding] = Field(default_factory=list)


class SequenceEvaluation(BaseModel):
    """Overall 0-100 score with per-dimension scores and merged findings."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    dimensions: Dict[str, DimensionScore]
    findings: List[EvaluationFinding] = Field(default_factory=list)


__all__ = [
    "ChoreographyOverrides",
    "DimensionScore",
    "EvaluationFinding",
    "Finding",
    "ManifestVerdict",
    "SequenceEvaluation",
    "Verdict",
    "VerdictLevel",
]

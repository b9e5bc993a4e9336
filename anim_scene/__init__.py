"""Scene analysis: content metadata and shot grammar classification."""
from __future__ import annotations

from .analyzer import Analysis, analyze_scene, classify_shot_grammar, coerce_scene, enrich_scene
from .rules import Classification, Rule, first_match

__all__ = [
    "Analysis",
    "Classification",
    "Rule",
    "analyze_scene",
    "classify_shot_grammar",
    "coerce_scene",
    "enrich_scene",
    "first_match",
]

"""Score a planned sequence on pacing, variety, flow and style adherence.

Expected durations, transitions and cameras are re-derived from the style
pack rules, so a manifest edited after planning is scored against what the
pack would have produced. Every dimension is 0-100; the overall score is
their weighted mean.
"""
from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import structlog
from pydantic import ValidationError

from anim_plan.models import ManifestEntry, SequenceManifest
from anim_plan.planner import assign_duration, select_camera, select_transition
from anim_scene.analyzer import coerce_scene
from anim_sdk.errors import MalformedInput
from anim_sdk.models import Personality, StylePack
from anim_sdk.registry import Registry
from anim_sdk.scene import Scene

from .models import DimensionScore, EvaluationFinding, SequenceEvaluation

logger = structlog.get_logger(__name__)

ENERGY_NUMERIC = {"static": 0, "subtle": 1, "moderate": 2, "high": 3}
DIMENSION_WEIGHTS = {"pacing": 0.25, "variety": 0.25, "flow": 0.25, "adherence": 0.25}

ManifestLike = Union[SequenceManifest, Mapping[str, Any]]
SceneLike = Union[Scene, Mapping[str, Any]]


def _round(value: float) -> int:
    """Round half up and clamp to the 0-100 score range."""

    return max(0, min(100, int(math.floor(value + 0.5))))


@dataclass(frozen=True)
class _Context:
    entries: Sequence[ManifestEntry]
    scenes: Sequence[Scene]
    pack: StylePack
    personality: Personality
    registry: Registry


def _meta(scene: Scene, name: str) -> Any:
    return getattr(scene.metadata, name) if scene.metadata else None


def _tags(scene: Scene) -> List[str]:
    return list(scene.metadata.intent_tags) if scene.metadata else []


def _actual_transition(entry: ManifestEntry) -> str:
    return entry.transition.type if entry.transition is not None else "hard_cut"


def _transition_matches(ctx: _Context, dimension: str, severity: str) -> tuple[int, List[EvaluationFinding]]:
    findings: List[EvaluationFinding] = []
    total = len(ctx.entries) - 1
    if total <= 0:
        return 100, findings
    matching = 0
    for index in range(1, len(ctx.entries)):
        expected = select_transition(ctx.pack, ctx.scenes[index - 1], ctx.scenes[index], index).type
        actual = _actual_transition(ctx.entries[index])
        if actual == expected:
            matching += 1
            continue
        label = ctx.entries[index].transition.type if ctx.entries[index].transition else "none"
        findings.append(
            EvaluationFinding(
                severity=severity,
                dimension=dimension,
                message=f'Scene {index + 1} transition "{label}" differs from expected "{expected}"',
                scene_index=index,
            )
        )
    return _round(matching / total * 100), findings


def score_pacing(ctx: _Context) -> DimensionScore:
    """Penalise holds that stray from the pack's energy table."""

    findings: List[EvaluationFinding] = []
    if len(ctx.entries) <= 1:
        return DimensionScore(score=100)

    penalty = 0.0
    for index, (entry, scene) in enumerate(zip(ctx.entries, ctx.scenes)):
        energy = _meta(scene, "motion_energy") or "moderate"
        expected = assign_duration(scene, ctx.pack, ctx.registry)
        actual = entry.duration_s
        deviation = abs(actual - expected)
        confidence = scene.metadata.confidence.get("motion_energy", 1.0) if scene.metadata else 1.0

        scene_penalty = 0.0
        if deviation > 0.5:
            # 0.5s off costs nothing, 2s off costs the whole scene
            scene_penalty = min(100.0, (deviation - 0.5) * (100.0 / 1.5)) * confidence
        if deviation > 1.0:
            findings.append(
                EvaluationFinding(
                    severity="warning",
                    dimension="pacing",
                    message=f"Scene {index + 1} duration ({actual}s) deviates from expected ({expected}s) for {energy} energy",
                    scene_index=index,
                )
            )
        cap = ctx.pack.max_duration_s
        if cap is not None and actual > cap:
            findings.append(
                EvaluationFinding(
                    severity="warning",
                    dimension="pacing",
                    message=f"Scene {index + 1} duration ({actual}s) exceeds max hold ({cap}s)",
                    scene_index=index,
                )
            )
            scene_penalty += 15
        penalty += scene_penalty

    return DimensionScore(score=_round(100 - penalty / len(ctx.entries)), findings=findings)


def score_variety(ctx: _Context) -> DimensionScore:
    """Average of shot size, content type, visual weight and energy spread."""

    findings: List[EvaluationFinding] = []
    count = len(ctx.entries)
    if count <= 2:
        return DimensionScore(score=100)

    sizes = [entry.shot_grammar.shot_size for entry in ctx.entries]
    size_score = 100
    for i in range(count - 1):
        if sizes[i] != sizes[i + 1]:
            continue
        if i + 2 < count and sizes[i + 2] == sizes[i]:
            size_score -= 25
            findings.append(
                EvaluationFinding(
                    severity="warning",
                    dimension="variety",
                    message=f'3+ consecutive "{sizes[i]}" shot size starting at scene {i + 1}',
                    scene_index=i,
                )
            )
        else:
            size_score -= 10

    content_score = 100
    for i in range(count - 1):
        current = _meta(ctx.scenes[i], "content_type")
        if current and current == _meta(ctx.scenes[i + 1], "content_type"):
            content_score -= 20
            findings.append(
                EvaluationFinding(
                    severity="info",
                    dimension="variety",
                    message=f'Adjacent scenes {i + 1}-{i + 2} share content_type "{current}"',
                    scene_index=i,
                )
            )

    weight_score = 100
    weights = Counter(w for w in (_meta(scene, "visual_weight") for scene in ctx.scenes) if w)
    weighted = sum(weights.values())
    for weight, seen in weights.items():
        if seen / weighted > 0.8:
            weight_score -= 30
            findings.append(
                EvaluationFinding(
                    severity="info",
                    dimension="variety",
                    message=f'Visual weight "{weight}" dominates ({_round(seen / weighted * 100)}% of scenes)',
                )
            )

    energy_score = 100
    energies = Counter(e for e in (_meta(scene, "motion_energy") for scene in ctx.scenes) if e)
    if len(energies) == 1:
        energy_score -= 40
        findings.append(
            EvaluationFinding(
                severity="warning",
                dimension="variety",
                message=f'All scenes have same motion_energy "{next(iter(energies))}"',
            )
        )

    parts = [max(0, size_score), max(0, content_score), max(0, weight_score), energy_score]
    return DimensionScore(score=_round(sum(parts) / 4), findings=findings)


def _energy_arc(ctx: _Context, findings: List[EvaluationFinding]) -> int:
    values = [ENERGY_NUMERIC.get(_meta(scene, "motion_energy") or "", 1) for scene in ctx.scenes]
    if len(values) < 3:
        return 60
    if all(value == values[0] for value in values):
        findings.append(
            EvaluationFinding(
                severity="info",
                dimension="flow",
                message="Flat energy arc: all scenes have same motion_energy",
            )
        )
        return 40
    peak = values.index(max(values)) / (len(values) - 1)
    if 0.3 <= peak <= 0.7:
        return 100
    if peak >= 0.15:
        return 70
    first = _tags(ctx.scenes[0])
    if "hero" in first or "opening" in first:
        return 80
    findings.append(
        EvaluationFinding(
            severity="warning",
            dimension="flow",
            message="Energy peaks at the very start without hero/opening tag",
            scene_index=0,
        )
    )
    return 40


def _intent_progression(ctx: _Context, findings: List[EvaluationFinding]) -> int:
    tags = [_tags(scene) for scene in ctx.scenes]
    if not any(tag in scene_tags for scene_tags in tags for tag in ("opening", "closing", "hero")):
        return 60
    total = len(tags)
    quarter = max(1, int(total * 0.25))
    half = max(1, int(total * 0.5))
    head, tail = tags[:quarter], tags[-quarter:]

    score = 0
    if any("opening" in scene_tags for scene_tags in head):
        score += 33
    elif any("opening" in scene_tags for scene_tags in tail):
        findings.append(
            EvaluationFinding(
                severity="warning",
                dimension="flow",
                message="Opening scene placed near the end of sequence",
                scene_index=total - 1,
            )
        )
    if any("closing" in scene_tags for scene_tags in tail):
        score += 33
    if any("hero" in scene_tags for scene_tags in tags[:half]):
        score += 34
    return score


def score_flow(ctx: _Context) -> DimensionScore:
    """Energy arc (40%), intent progression (30%), transition coherence (30%)."""

    findings: List[EvaluationFinding] = []
    if len(ctx.entries) <= 1:
        return DimensionScore(score=100)
    arc = _energy_arc(ctx, findings)
    progression = _intent_progression(ctx, findings)
    transitions, transition_findings = _transition_matches(ctx, "flow", "info")
    findings.extend(transition_findings)
    return DimensionScore(score=_round(arc * 0.4 + progression * 0.3 + transitions * 0.3), findings=findings)


def score_adherence(ctx: _Context) -> DimensionScore:
    """Camera, transition, shot grammar and duration agreement with the pack."""

    findings: List[EvaluationFinding] = []
    if not ctx.entries:
        return DimensionScore(score=100)

    camera_matching = 0
    for index, (entry, scene) in enumerate(zip(ctx.entries, ctx.scenes)):
        expected, _ = select_camera(scene, ctx.pack, ctx.personality)
        if expected.move == entry.camera_override.move:
            camera_matching += 1
            continue
        findings.append(
            EvaluationFinding(
                severity="warning",
                dimension="adherence",
                message=f'Scene {index + 1} camera "{entry.camera_override.move}" differs from expected "{expected.move}"',
                scene_index=index,
            )
        )
    camera_score = _round(camera_matching / len(ctx.entries) * 100)

    transition_score, transition_findings = _transition_matches(ctx, "adherence", "warning")
    findings.extend(transition_findings)

    restrictions = ctx.personality.shot_grammar
    allowed = {
        "shot_size": restrictions.allowed_sizes,
        "angle": restrictions.allowed_angles,
        "framing": restrictions.allowed_framings,
    }
    compliant = 0
    for index, entry in enumerate(ctx.entries):
        valid = True
        for axis, values in allowed.items():
            value = getattr(entry.shot_grammar, axis)
            if value not in values:
                valid = False
                findings.append(
                    EvaluationFinding(
                        severity="warning",
                        dimension="adherence",
                        message=f'Scene {index + 1} {axis} "{value}" not allowed for {ctx.personality.slug}',
                        scene_index=index,
                    )
                )
        compliant += int(valid)
    grammar_score = _round(compliant / len(ctx.entries) * 100)

    deviation = sum(
        abs(entry.duration_s - assign_duration(scene, ctx.pack, ctx.registry))
        for entry, scene in zip(ctx.entries, ctx.scenes)
    ) / len(ctx.entries)
    # 1s average deviation scores about 67; 3s scores zero
    duration_score = _round(100 - deviation / 3 * 100)

    score = _round((camera_score + transition_score + grammar_score + duration_score) / 4)
    return DimensionScore(score=score, findings=findings)


def _coerce_manifest(manifest: ManifestLike) -> SequenceManifest:
    if isinstance(manifest, SequenceManifest):
        return manifest
    if not isinstance(manifest, Mapping):
        raise MalformedInput(f"manifest must be a mapping, got {type(manifest).__name__}")
    try:
        return SequenceManifest.model_validate(dict(manifest))
    except ValidationError as exc:
        raise MalformedInput(f"manifest failed shape checks: {exc}") from exc


def evaluate_sequence(
    manifest: ManifestLike,
    scenes: Optional[Sequence[SceneLike]],
    style: Optional[str],
    registry: Registry,
) -> SequenceEvaluation:
    """Score ``manifest`` against the rules of ``style`` (default: the manifest's pack).

    ``scenes`` supplies analyzed metadata by scene id; entries whose scene is
    not listed fall back to the scene embedded in the manifest.
    """

    model = _coerce_manifest(manifest)
    pack_name = style or model.style
    pack = registry.style_pack(pack_name)
    if pack is None:
        known = ", ".join(sorted(registry.style_packs()))
        raise MalformedInput(f"unknown style pack {pack_name!r}; expected one of: {known}")
    personality = registry.style(pack.personality)
    if personality is None:
        raise MalformedInput(f"style pack {pack_name} maps to unknown personality {pack.personality}")

    by_id: Dict[str, Scene] = {}
    for scene in scenes or ():
        analyzed = coerce_scene(scene)
        by_id[analyzed.scene_id] = analyzed
    resolved = [by_id.get(entry.scene.scene_id, entry.scene) for entry in model.entries]

    ctx = _Context(
        entries=model.entries,
        scenes=resolved,
        pack=pack,
        personality=personality,
        registry=registry,
    )
    dimensions = {
        "pacing": score_pacing(ctx),
        "variety": score_variety(ctx),
        "flow": score_flow(ctx),
        "adherence": score_adherence(ctx),
    }
    overall = _round(sum(dimensions[name].score * weight for name, weight in DIMENSION_WEIGHTS.items()))
    findings = [finding for result in dimensions.values() for finding in result.findings]
    logger.info(
        "guardrails.sequence.evaluated",
        sequence_id=model.sequence_id,
        style=pack.name,
        score=overall,
        findings=len(findings),
    )
    return SequenceEvaluation(score=overall, dimensions=dimensions, findings=findings)


__all__ = [
    "DIMENSION_WEIGHTS",
    "ENERGY_NUMERIC",
    "evaluate_sequence",
    "score_adherence",
    "score_flow",
    "score_pacing",
    "score_variety",
]

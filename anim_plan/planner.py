"""Sequence planner: analyzed scenes plus a style pack in, manifest out."""
from __future__ import annotations

import hashlib
import json
import re
from collections import Counter
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import structlog

from anim_scene.analyzer import classify_shot_grammar, coerce_scene
from anim_sdk.errors import MalformedInput, MissingMetadata
from anim_sdk.models import Personality, StylePack, TransitionRule
from anim_sdk.registry import Registry
from anim_sdk.scene import CameraMove, Scene
from anim_shot.camera import DEFAULT_INTENSITY
from anim_shot.grammar import validate_shot_grammar

from .models import ManifestEntry, PlanNotes, SequenceManifest, SequencePlan, Transition
from .ordering import highest_intent, order_scenes
from .variety import Slot, repair_shot_variety

logger = structlog.get_logger(__name__)

SEQUENCE_ID_RE = re.compile(r"^seq_[a-z0-9_]+$")
STATIC_CAMERA = CameraMove(move="static", intensity=0.0)

SceneInput = Union[Scene, Mapping[str, Any]]


def _coerce_scenes(scenes: Sequence[SceneInput]) -> List[Scene]:
    if isinstance(scenes, (str, bytes)) or not isinstance(scenes, Sequence):
        raise MalformedInput("scenes must be a list of scene objects")
    if not scenes:
        raise MalformedInput("scenes must contain at least one scene")
    models = [coerce_scene(scene) for scene in scenes]
    missing = [scene.scene_id for scene in models if scene.metadata is None]
    if missing:
        raise MissingMetadata(missing)
    return models


def _resolve_pack(style: str, registry: Registry) -> tuple[StylePack, Personality]:
    pack = registry.style_pack(style)
    if pack is None:
        known = ", ".join(sorted(registry.style_packs()))
        raise MalformedInput(f"unknown style pack {style!r}; expected one of: {known}")
    personality = registry.style(pack.personality)
    if personality is None:
        raise MalformedInput(f"style pack {style} maps to unknown personality {pack.personality}")
    return pack, personality


def assign_duration(scene: Scene, pack: StylePack, registry: Registry) -> float:
    """Hold duration from the pack's energy table, scaled by content type."""

    meta = scene.metadata
    energy = (meta.motion_energy if meta else None) or "moderate"
    base = pack.durations.get(energy, pack.durations.get("moderate", 3.0))
    content_type = meta.content_type if meta else None
    duration = base * registry.content_hold_scale.get(content_type or "", 1.0)
    if pack.max_duration_s is not None:
        duration = min(duration, pack.max_duration_s)
    bounds = registry.config.manifest
    duration = max(bounds.min_duration_s, min(bounds.max_duration_s, duration))
    return round(duration, 1)


def _rule_matches(rule: TransitionRule, previous: Scene, current: Scene, index: int) -> bool:
    tags = current.metadata.intent_tags if current.metadata else []
    prev_weight = previous.metadata.visual_weight if previous.metadata else None
    curr_weight = current.metadata.visual_weight if current.metadata else None
    if rule.when == "always":
        return True
    if rule.when in ("opening", "emotional", "hero"):
        return rule.when in tags
    if rule.when == "same_weight":
        return bool(prev_weight and curr_weight and prev_weight == curr_weight)
    if rule.when == "weight_change":
        return bool(prev_weight and curr_weight and prev_weight != curr_weight)
    if rule.when == "cycle":
        return bool(rule.cycle) and index % rule.every == 0
    return False


def select_transition(pack: StylePack, previous: Scene, current: Scene, index: int) -> Transition:
    """Transition into the scene at ``index`` (1-based position of the incoming scene)."""

    for rule in pack.transitions:
        if not _rule_matches(rule, previous, current, index):
            continue
        if rule.when == "cycle":
            name = rule.cycle[(index // rule.every - 1) % len(rule.cycle)]
        else:
            name = rule.type or "hard_cut"
        return Transition(type=name, duration_ms=rule.duration_ms)
    return Transition(type="hard_cut")


def select_camera(scene: Scene, pack: StylePack, personality: Personality) -> tuple[CameraMove, Optional[str]]:
    """Return the camera override for ``scene`` and a repair note, if one was needed."""

    meta = scene.metadata
    tags = set(meta.intent_tags) if meta else set()
    content_type = meta.content_type if meta else None
    behavior = personality.camera_behavior

    chosen: Optional[CameraMove] = None
    for rule in pack.camera:
        if rule.intents and not tags.intersection(rule.intents):
            continue
        if rule.content_types and content_type not in rule.content_types:
            continue
        chosen = CameraMove(move=rule.move, intensity=rule.intensity, easing=rule.easing)
        break
    if chosen is None and scene.camera is not None:
        chosen = scene.camera
    if chosen is None or chosen.move == "static":
        return STATIC_CAMERA, None

    if chosen.move in behavior.forbidden_movements or personality.forbids("camera_movement"):
        return STATIC_CAMERA, f"camera {chosen.move} on {scene.scene_id} not allowed for {personality.slug}, set to static"
    intensity = DEFAULT_INTENSITY if chosen.intensity is None else chosen.intensity
    return CameraMove(move=chosen.move, intensity=intensity, easing=chosen.easing or behavior.easing), None


def _sequence_id(style: str, scenes: Sequence[Scene]) -> str:
    payload = json.dumps({"style": style, "scenes": [scene.scene_id for scene in scenes]}, sort_keys=True)
    return "seq_" + hashlib.sha256(payload.encode("utf-8")).hexdigest()[:12]


def _rationale(entries: Sequence[ManifestEntry]) -> str:
    parts: List[str] = []
    first = highest_intent(entries[0].scene)
    if first:
        parts.append(f"Opens with {first} scene")
    last = highest_intent(entries[-1].scene)
    if last and len(entries) > 1:
        parts.append(f"closes with {last} scene")
    types = {entry.scene.metadata.content_type for entry in entries if entry.scene.metadata}
    types.discard(None)
    parts.append(f"{len(types)} content type(s) across {len(entries)} scenes")
    return "; ".join(parts)


def plan_sequence(
    scenes: Sequence[SceneInput],
    style: str,
    registry: Registry,
    sequence_id: Optional[str] = None,
) -> SequencePlan:
    """Order, time, transition and frame analyzed scenes under a style pack.

    Raises MissingMetadata when any scene was not analyzed and MalformedInput
    for an empty scene list, an unknown style pack or a bad sequence id.
    """

    models = _coerce_scenes(scenes)
    pack, personality = _resolve_pack(style, registry)
    if sequence_id is not None and not SEQUENCE_ID_RE.match(sequence_id):
        raise MalformedInput(f"sequence_id {sequence_id!r} must match {SEQUENCE_ID_RE.pattern}")
    planning = registry.config.planning
    threshold = registry.config.analysis.low_confidence_threshold

    ordered = order_scenes(models, planning.content_type_lookahead)

    slots: List[Slot] = []
    corrections: Dict[str, List[str]] = {}
    low_confidence: Dict[str, List[str]] = {}
    for scene in ordered:
        meta = scene.metadata
        grammar = meta.shot_grammar
        if grammar is None:
            grammar, _ = classify_shot_grammar(scene, registry, meta.content_type, meta.intent_tags)
        checked = validate_shot_grammar(grammar, personality.slug, registry)
        if checked.corrections:
            corrections[scene.scene_id] = list(checked.corrections)
        low = sorted(name for name, value in meta.confidence.items() if value < threshold)
        if low:
            low_confidence[scene.scene_id] = low
        slots.append(Slot(scene=scene, grammar=checked.result))

    slots, repairs = repair_shot_variety(
        slots,
        personality.shot_grammar.allowed_sizes,
        max_run=planning.max_shot_size_run,
    )

    entries: List[ManifestEntry] = []
    for index, slot in enumerate(slots):
        transition = None
        if index > 0:
            transition = select_transition(pack, slots[index - 1].scene, slot.scene, index)
        camera, note = select_camera(slot.scene, pack, personality)
        if note:
            repairs.append(note)
        entries.append(
            ManifestEntry(
                scene=slot.scene,
                duration_s=assign_duration(slot.scene, pack, registry),
                transition=transition,
                camera_override=camera,
                shot_grammar=slot.grammar,
            )
        )

    overlap_ms = sum(
        entry.transition.duration_ms or 0 for entry in entries if entry.transition is not None
    )
    total = round(sum(entry.duration_s for entry in entries) - overlap_ms / 1000.0, 2)
    summary = Counter(entry.transition.type for entry in entries if entry.transition is not None)

    manifest_config = registry.config.manifest
    manifest = SequenceManifest(
        sequence_id=sequence_id or _sequence_id(style, [slot.scene for slot in slots]),
        style=pack.name,
        personality=personality.slug,
        fps=manifest_config.fps,
        resolution=manifest_config.resolution,
        entries=entries,
    )
    notes = PlanNotes(
        total_duration_s=total,
        scene_count=len(entries),
        style_personality=personality.slug,
        ordering_rationale=_rationale(entries),
        transition_summary=dict(sorted(summary.items())),
        repairs=repairs,
        grammar_corrections=corrections,
        low_confidence=low_confidence,
    )
    logger.info(
        "plan.sequence.planned",
        sequence_id=manifest.sequence_id,
        style=pack.name,
        personality=personality.slug,
        scenes=len(entries),
        repairs=len(repairs),
        total_duration_s=total,
    )
    return SequencePlan(manifest=manifest, notes=notes)


__all__ = ["assign_duration", "plan_sequence", "select_camera", "select_transition"]

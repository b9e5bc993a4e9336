"""Shot order: intent buckets followed by local variety swaps."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from anim_sdk.scene import Scene

INTENT_PRIORITY = ("closing", "opening", "hero", "emotional", "detail", "informational", "transition")


def highest_intent(scene: Scene) -> Optional[str]:
    tags = scene.metadata.intent_tags if scene.metadata else []
    for intent in INTENT_PRIORITY:
        if intent in tags:
            return intent
    return None


def _intent_confidence(scene: Scene) -> float:
    if scene.metadata is None:
        return 0.0
    return scene.metadata.confidence.get("intent_tags", 0.0)


def _interleave(middle: List[Scene], emotional: List[Scene]) -> List[Scene]:
    if not emotional or not middle:
        return middle + emotional
    interval = max(1, len(middle) // (len(emotional) + 1))
    out: List[Scene] = []
    pending = list(emotional)
    for index, scene in enumerate(middle):
        out.append(scene)
        if pending and (index + 1) % interval == 0:
            out.append(pending.pop(0))
    return out + pending


def _meta(scene: Scene, name: str) -> Optional[str]:
    return getattr(scene.metadata, name) if scene.metadata else None


def _spread_content_types(scenes: List[Scene], lookahead: int) -> None:
    for i in range(len(scenes) - 1):
        current = _meta(scenes[i], "content_type")
        if current is None or current != _meta(scenes[i + 1], "content_type"):
            continue
        for j in range(i + 2, min(i + 2 + lookahead, len(scenes))):
            if _meta(scenes[j], "content_type") != current:
                scenes[i + 1], scenes[j] = scenes[j], scenes[i + 1]
                break


def _spread_visual_weights(scenes: List[Scene], lookahead: int) -> None:
    for i in range(len(scenes) - 2):
        weight = _meta(scenes[i], "visual_weight")
        if weight is None or not (weight == _meta(scenes[i + 1], "visual_weight") == _meta(scenes[i + 2], "visual_weight")):
            continue
        for j in range(i + 3, min(i + 3 + lookahead, len(scenes))):
            if _meta(scenes[j], "visual_weight") != weight:
                scenes[i + 2], scenes[j] = scenes[j], scenes[i + 2]
                break


def _soften_energy_open(scenes: List[Scene]) -> None:
    if _meta(scenes[0], "motion_energy") != "high" or highest_intent(scenes[0]) in ("hero", "opening"):
        return
    for j in range(1, min(4, len(scenes))):
        if _meta(scenes[j], "motion_energy") in ("static", "subtle", "moderate"):
            scenes[0], scenes[j] = scenes[j], scenes[0]
            return


def order_scenes(scenes: Sequence[Scene], lookahead: int = 3) -> List[Scene]:
    """Order analyzed scenes: opening, hero, middle with emotional beats, closing."""

    if len(scenes) <= 1:
        return list(scenes)

    buckets: Dict[str, List[Scene]] = {name: [] for name in INTENT_PRIORITY}
    untagged: List[Scene] = []
    for scene in scenes:
        intent = highest_intent(scene)
        (buckets[intent] if intent else untagged).append(scene)

    def by_confidence(items: List[Scene]) -> List[Scene]:
        return sorted(items, key=_intent_confidence, reverse=True)

    middle = (
        by_confidence(buckets["detail"])
        + by_confidence(buckets["informational"])
        + by_confidence(buckets["transition"])
        + by_confidence(untagged)
    )
    ordered = (
        by_confidence(buckets["opening"])
        + by_confidence(buckets["hero"])
        + _interleave(middle, by_confidence(buckets["emotional"]))
        + by_confidence(buckets["closing"])
    )

    if len(ordered) > 2:
        _spread_content_types(ordered, lookahead)
        _spread_visual_weights(ordered, lookahead)
        _soften_energy_open(ordered)
    return ordered


__all__ = ["INTENT_PRIORITY", "highest_intent", "order_scenes"]

"""Shot-size variety repair.

A single left-to-right scan over a sliding window. Runs longer than the
allowed length are broken by swapping the middle slot with the nearest later
slot of a different size; the scene count never changes.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Sequence, Tuple

from anim_sdk.models import SHOT_SIZES, ShotGrammar
from anim_sdk.scene import Scene


@dataclass(frozen=True)
class Slot:
    scene: Scene
    grammar: ShotGrammar

    @property
    def size(self) -> str:
        return self.grammar.shot_size


def nearest_other_size(size: str, allowed: Sequence[str]) -> str:
    """Closest allowed size to ``size`` in catalog order, excluding ``size`` itself."""

    order = {name: index for index, name in enumerate(SHOT_SIZES)}
    origin = order.get(size, 1)
    candidates = [name for name in allowed if name != size]
    if not candidates:
        return size
    return min(candidates, key=lambda name: (abs(order.get(name, origin) - origin), order.get(name, 0)))


def repair_shot_variety(
    slots: Sequence[Slot],
    allowed_sizes: Sequence[str],
    max_run: int = 2,
) -> Tuple[List[Slot], List[str]]:
    """Break every run of more than ``max_run`` equal shot sizes.

    When no later slot has a different size the middle slot is re-framed to
    the nearest other size the style allows.
    """

    result = list(slots)
    notes: List[str] = []
    window = max_run + 1
    middle = window // 2

    for start in range(0, len(result) - window + 1):
        run = result[start : start + window]
        size = run[0].size
        if any(slot.size != size for slot in run):
            continue

        target = start + middle
        swap_with = next(
            (j for j in range(start + window, len(result)) if result[j].size != size),
            None,
        )
        if swap_with is not None:
            result[target], result[swap_with] = result[swap_with], result[target]
            notes.append(
                f"swapped {result[swap_with].scene.scene_id} and {result[target].scene.scene_id} "
                f"to break a run of {size}"
            )
            continue

        replacement = nearest_other_size(size, allowed_sizes)
        if replacement == size:
            notes.append(f"run of {size} at position {start} left as is: style allows no other size")
            continue
        slot = result[target]
        result[target] = replace(slot, grammar=slot.grammar.model_copy(update={"shot_size": replacement}))
        notes.append(
            f"re-framed {slot.scene.scene_id} from {size} to {replacement}: no later scene of another size"
        )
    return result, notes


__all__ = ["Slot", "nearest_other_size", "repair_shot_variety"]

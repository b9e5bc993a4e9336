"""Ordered first-match rule chains for scene classification."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Sequence, TypeVar

V = TypeVar("V")


@dataclass(frozen=True)
class Rule(Generic[V]):
    """A named predicate that, when it matches, fixes a value and confidence."""

    name: str
    when: Callable[[V], bool]
    value: str
    confidence: float


@dataclass(frozen=True)
class Classification:
    value: str
    confidence: float
    rule: str


def always(_: object) -> bool:
    return True


def first_match(rules: Sequence[Rule[V]], view: V) -> Classification:
    """Evaluate ``rules`` in declaration order and return the first match.

    Declaration order is the tie-break: when two rules both match with equal
    confidence the earlier one wins. Chains end with an ``always`` rule, so a
    chain without a match is a programming error.
    """

    for rule in rules:
        if rule.when(view):
            return Classification(rule.value, rule.confidence, rule.name)
    raise LookupError("rule chain has no terminal default")


__all__ = ["Classification", "Rule", "always", "first_match"]

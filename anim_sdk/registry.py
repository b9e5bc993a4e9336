"""Read-only view over the loaded reference catalog."""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from .models import (
    Amplitude,
    CoreConfig,
    GuardrailBounds,
    IntentCatalog,
    IntentMapping,
    LensBounds,
    Personality,
    PersonalityCatalog,
    Primitive,
    PrimitiveCatalog,
    ShotGrammarCatalog,
    SpeedLimit,
    StyleBoundary,
    StylePack,
    StylePackCatalog,
)


class Registry:
    """Immutable catalog of primitives, styles, intents and guardrail bounds.

    Built once and handed to every component entry point. Lookups return
    ``None`` for unknown ids so callers decide whether absence is an error.
    """

    __slots__ = (
        "_primitives",
        "_styles",
        "_packs",
        "_intents",
        "_guardrails",
        "_shot_grammar",
        "_config",
        "_version",
        "_content_hold_scale",
    )

    def __init__(
        self,
        *,
        primitives: PrimitiveCatalog,
        personalities: PersonalityCatalog,
        style_packs: StylePackCatalog,
        intents: IntentCatalog,
        guardrails: GuardrailBounds,
        shot_grammar: ShotGrammarCatalog,
        config: Optional[CoreConfig] = None,
        version: str = "unknown",
    ) -> None:
        self._primitives = MappingProxyType({item.id: item for item in primitives.primitives})
        self._styles = MappingProxyType({item.slug: item for item in personalities.personalities})
        self._packs = MappingProxyType({item.name: item for item in style_packs.packs})
        self._intents = MappingProxyType({item.intent: item for item in intents.intents})
        self._content_hold_scale = MappingProxyType(dict(style_packs.content_hold_scale))
        self._guardrails = guardrails
        self._shot_grammar = shot_grammar
        self._config = config or CoreConfig()
        self._version = version

    def __setattr__(self, name: str, value: object) -> None:
        if hasattr(self, name):
            raise AttributeError(f"Registry is read-only; cannot set {name}")
        object.__setattr__(self, name, value)

    @property
    def version(self) -> str:
        return self._version

    @property
    def config(self) -> CoreConfig:
        return self._config

    @property
    def guardrails(self) -> GuardrailBounds:
        return self._guardrails

    @property
    def shot_grammar(self) -> ShotGrammarCatalog:
        return self._shot_grammar

    @property
    def lens_bounds(self) -> LensBounds:
        return self._guardrails.lens_bounds

    @property
    def content_hold_scale(self) -> Mapping[str, float]:
        return self._content_hold_scale

    def primitive(self, primitive_id: str) -> Optional[Primitive]:
        return self._primitives.get(primitive_id)

    def primitives(self) -> Mapping[str, Primitive]:
        return self._primitives

    def style(self, slug: str) -> Optional[Personality]:
        return self._styles.get(slug)

    def styles(self) -> Mapping[str, Personality]:
        return self._styles

    def style_pack(self, name: str) -> Optional[StylePack]:
        return self._packs.get(name)

    def style_packs(self) -> Mapping[str, StylePack]:
        return self._packs

    def intent(self, slug: str) -> Optional[IntentMapping]:
        return self._intents.get(slug)

    def intents(self) -> Mapping[str, IntentMapping]:
        return self._intents

    def amplitude(self, primitive_id: str) -> Optional[Amplitude]:
        return self._guardrails.primitive_amplitudes.get(primitive_id)

    def speed_limit(self, key: str) -> Optional[SpeedLimit]:
        return self._guardrails.speed_limits.get(key)

    def style_boundary(self, slug: str) -> Optional[StyleBoundary]:
        return self._guardrails.style_boundaries.get(slug)

    def is_blur_primitive(self, primitive_id: str) -> bool:
        return primitive_id in self._guardrails.blur_primitives

    def is_shake_primitive(self, primitive_id: str) -> bool:
        return primitive_id in self._guardrails.shake_primitives


def filter_by_style(primitive_ids: Iterable[str], style: str, registry: Registry) -> List[str]:
    """Keep ids compatible with ``style``; unknown ids stay visible."""

    kept: List[str] = []
    for primitive_id in primitive_ids:
        entry = registry.primitive(primitive_id)
        if entry is None or entry.supports(style):
            kept.append(primitive_id)
    return kept


def search_primitives(
    registry: Registry,
    query: Optional[str] = None,
    style: Optional[str] = None,
    category: Optional[str] = None,
    source: Optional[str] = None,
) -> List[Primitive]:
    """Return primitives matching every supplied filter, in catalog order."""

    needle = (query or "").strip().lower()
    results: List[Primitive] = []
    for entry in registry.primitives().values():
        if needle and needle not in entry.id.lower() and needle not in entry.name.lower():
            continue
        if style and not entry.supports(style):
            continue
        if category and entry.category.lower() != category.lower():
            continue
        if source and entry.source != source:
            continue
        results.append(entry)
    return results


__all__ = ["Registry", "filter_by_style", "search_primitives"]

"""Helpers for loading the reference catalog from YAML."""
from __future__ import annotations

import hashlib
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml

from .models import (
    CoreConfig,
    GuardrailBounds,
    IntentCatalog,
    PersonalityCatalog,
    PrimitiveCatalog,
    ShotGrammarCatalog,
    StylePackCatalog,
)
from .registry import Registry

ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CATALOG_DIR = ROOT / "catalog"
DEFAULT_CONFIG_PATH = ROOT / "config" / "animatic.yml"

CATALOG_FILES = {
    "primitives": "primitives.yml",
    "personalities": "personalities.yml",
    "style_packs": "style_packs.yml",
    "intents": "intents.yml",
    "guardrails": "guardrails.yml",
    "shot_grammar": "shot_grammar.yml",
}

logger = structlog.get_logger(__name__)


def catalog_dir() -> Path:
    """Return the catalog directory, honouring ANIMATIC_CATALOG_DIR."""

    override = os.getenv("ANIMATIC_CATALOG_DIR", "").strip()
    return Path(override) if override else DEFAULT_CATALOG_DIR


def config_path() -> Path:
    """Return the core config path, honouring ANIMATIC_CONFIG_PATH."""

    override = os.getenv("ANIMATIC_CONFIG_PATH", "").strip()
    return Path(override) if override else DEFAULT_CONFIG_PATH


def load_yaml(path: Path | str) -> Dict[str, Any]:
    """Load a YAML file as a dictionary."""
    p = Path(path)
    with p.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at root of {p}, got {type(data)!r}")
    return data


def file_sha256(path: Path) -> str:
    """Compute a SHA-256 digest for the supplied file path."""

    data = path.read_bytes()
    return hashlib.sha256(data).hexdigest()


def load_primitives(directory: Optional[Path] = None) -> PrimitiveCatalog:
    raw = load_yaml((directory or catalog_dir()) / CATALOG_FILES["primitives"])
    return PrimitiveCatalog(**raw)


def load_personalities(directory: Optional[Path] = None) -> PersonalityCatalog:
    raw = load_yaml((directory or catalog_dir()) / CATALOG_FILES["personalities"])
    return PersonalityCatalog(**raw)


def load_style_packs(directory: Optional[Path] = None) -> StylePackCatalog:
    raw = load_yaml((directory or catalog_dir()) / CATALOG_FILES["style_packs"])
    return StylePackCatalog(**raw)


def load_intents(directory: Optional[Path] = None) -> IntentCatalog:
    raw = load_yaml((directory or catalog_dir()) / CATALOG_FILES["intents"])
    return IntentCatalog(**raw)


def load_guardrails(directory: Optional[Path] = None) -> GuardrailBounds:
    raw = load_yaml((directory or catalog_dir()) / CATALOG_FILES["guardrails"])
    return GuardrailBounds(**raw)


def load_shot_grammar(directory: Optional[Path] = None) -> ShotGrammarCatalog:
    raw = load_yaml((directory or catalog_dir()) / CATALOG_FILES["shot_grammar"])
    return ShotGrammarCatalog(**raw)


def load_core_config(path: Optional[Path] = None) -> CoreConfig:
    """Load config/animatic.yml, falling back to defaults when absent."""

    target = path or config_path()
    if not target.exists():
        return CoreConfig()
    return CoreConfig(**load_yaml(target))


def load_catalog_version(directory: Optional[Path] = None) -> str:
    """Return the curated catalog version string."""

    path = (directory or catalog_dir()) / "VERSION"
    if not path.exists():
        return "unknown"
    return path.read_text(encoding="utf-8").strip()


def build_registry(raw: Dict[str, Any]) -> Registry:
    """Construct a registry from in-memory catalog mappings."""

    return Registry(
        primitives=PrimitiveCatalog(**raw["primitives"]),
        personalities=PersonalityCatalog(**raw["personalities"]),
        style_packs=StylePackCatalog(**raw["style_packs"]),
        intents=IntentCatalog(**raw["intents"]),
        guardrails=GuardrailBounds(**raw["guardrails"]),
        shot_grammar=ShotGrammarCatalog(**raw["shot_grammar"]),
        config=CoreConfig(**raw.get("config", {})),
        version=str(raw.get("version", "unknown")),
    )


def load_registry(directory: Optional[Path] = None, config: Optional[Path] = None) -> Registry:
    """Read every catalog file and assemble a read-only registry."""

    base = directory or catalog_dir()
    registry = Registry(
        primitives=load_primitives(base),
        personalities=load_personalities(base),
        style_packs=load_style_packs(base),
        intents=load_intents(base),
        guardrails=load_guardrails(base),
        shot_grammar=load_shot_grammar(base),
        config=load_core_config(config),
        version=load_catalog_version(base),
    )
    logger.info(
        "catalog.registry.loaded",
        path=str(base),
        version=registry.version,
        primitives=len(registry.primitives()),
        styles=len(registry.styles()),
        intents=len(registry.intents()),
    )
    return registry


@lru_cache(maxsize=1)
def get_registry() -> Registry:
    """Return the process-wide registry, loading it on first use."""

    return load_registry()


__all__ = [
    "CATALOG_FILES",
    "DEFAULT_CATALOG_DIR",
    "DEFAULT_CONFIG_PATH",
    "build_registry",
    "catalog_dir",
    "config_path",
    "file_sha256",
    "get_registry",
    "load_catalog_version",
    "load_core_config",
    "load_guardrails",
    "load_intents",
    "load_personalities",
    "load_primitives",
    "load_registry",
    "load_shot_grammar",
    "load_style_packs",
    "load_yaml",
]

"""Public SDK surface: catalog loading, registry and scene models."""
from __future__ import annotations

from .errors import AnimaticError, MalformedInput, MissingMetadata
from .loader import (
    build_registry,
    file_sha256,
    get_registry,
    load_catalog_version,
    load_core_config,
    load_registry,
    load_yaml,
)
from .registry import Registry, filter_by_style, search_primitives
from .scene import Scene, SceneMetadata
from .versioning import catalog_versions

__all__ = [
    "__version__",
    "AnimaticError",
    "MalformedInput",
    "MissingMetadata",
    "Registry",
    "Scene",
    "SceneMetadata",
    "build_registry",
    "catalog_versions",
    "file_sha256",
    "filter_by_style",
    "get_registry",
    "load_catalog_version",
    "load_core_config",
    "load_registry",
    "load_yaml",
    "search_primitives",
]

__version__ = "0.1.0"

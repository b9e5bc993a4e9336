"""Utilities for reporting catalog component versions."""
from __future__ import annotations

from pathlib import Path

from .loader import CATALOG_FILES, catalog_dir, config_path, file_sha256


def _version_from_yaml(path: Path) -> str | None:
    for line in path.read_text(encoding="utf-8").splitlines():
        if line.strip().startswith("version:"):
            return line.split(":", 1)[1].strip().strip('"\'')
    return None


def catalog_versions() -> dict[str, dict[str, object]]:
    """Return version and digest metadata for each catalog file."""

    paths = {key: catalog_dir() / name for key, name in CATALOG_FILES.items()}
    paths["config"] = config_path()

    out: dict[str, dict[str, object]] = {}
    for key, path in paths.items():
        path = path.resolve()
        if path.exists():
            out[key] = {
                "version": _version_from_yaml(path),
                "sha256": file_sha256(path)[:12],
                "path": str(path),
            }
        else:
            out[key] = {"missing": True, "path": str(path)}
    return out


__all__ = ["catalog_versions"]

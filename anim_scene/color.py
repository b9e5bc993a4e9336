"""Colour helpers used by the visual weight classifier."""
from __future__ import annotations

import re
from typing import List, Optional

_HEX_RE = re.compile(r"#([0-9a-fA-F]{3}(?:[0-9a-fA-F]{3})?)\b")


def _expand(hex_value: str) -> Optional[str]:
    value = hex_value.lstrip("#").lower()
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6 or any(ch not in "0123456789abcdef" for ch in value):
        return None
    return value


def _channel(raw: int) -> float:
    c = raw / 255.0
    return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4


def hex_to_luminance(hex_value: object) -> Optional[float]:
    """Relative luminance (WCAG 2.x) of a ``#rgb`` or ``#rrggbb`` colour."""

    if not isinstance(hex_value, str):
        return None
    value = _expand(hex_value.strip())
    if value is None:
        return None
    r, g, b = (int(value[i : i + 2], 16) for i in (0, 2, 4))
    return 0.2126 * _channel(r) + 0.7152 * _channel(g) + 0.0722 * _channel(b)


def extract_hex_colors(html: Optional[str]) -> List[str]:
    """Return every hex colour in an HTML snippet as lowercase ``#rrggbb``."""

    if not html:
        return []
    colors: List[str] = []
    for match in _HEX_RE.finditer(html):
        expanded = _expand(match.group(1))
        if expanded:
            colors.append("#" + expanded)
    return colors


__all__ = ["extract_hex_colors", "hex_to_luminance"]

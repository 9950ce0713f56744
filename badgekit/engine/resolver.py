from __future__ import annotations

import re
from typing import Any, List, Mapping

TOKEN_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][\w.]*)\s*\}\}")

_MISSING = object()


def lookup(path: str, context: Any) -> Any:
    """Walk a dotted path through nested mappings; return ``_MISSING`` on any miss."""
    current = context
    for segment in str(path or "").split("."):
        segment = segment.strip()
        if not segment or not isinstance(current, Mapping) or segment not in current:
            return _MISSING
        current = current[segment]
    if current is None:
        return _MISSING
    return current


def stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (str, int, float)):
        return str(value)
    if isinstance(value, Mapping):
        # Paths may stop at a record (``venue`` instead of ``venue.name``).
        return stringify(value.get("name")) if "name" in value else ""
    if isinstance(value, (list, tuple)):
        return ", ".join(text for text in (stringify(item) for item in value) if text)
    return ""


def resolve(path: str, context: Any, placeholder: str | None = "") -> str:
    value = lookup(path, context)
    if value is _MISSING or value == "":
        return placeholder or ""
    return stringify(value)


def interpolate(text: str, context: Any) -> str:
    def _replace(match: re.Match) -> str:
        value = lookup(match.group(1), context)
        if value is _MISSING:
            return match.group(0)
        return stringify(value)

    return TOKEN_PATTERN.sub(_replace, str(text or ""))


def find_tokens(text: str) -> List[str]:
    return TOKEN_PATTERN.findall(str(text or ""))


def is_resolvable(path: str, context: Any) -> bool:
    return lookup(path, context) is not _MISSING

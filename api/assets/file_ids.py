"""
Asset file-id normalization.

The same stored file is referenced as a bare id, as an expanded relation
object (`{"id": ...}`), or as a previously rendered asset URL pasted back by a
client. All of them must resolve to the same lowercase UUID.
"""

from __future__ import annotations

import re
from typing import Any, Iterable

UUID_PATTERN = r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"

_UUID_RE = re.compile(UUID_PATTERN, re.IGNORECASE)
_UUID_FULL_RE = re.compile(rf"^{UUID_PATTERN}$", re.IGNORECASE)
# Matches `/api/v1/public/assets/<uuid>` and the store's own `/assets/<uuid>`.
_ASSET_ROUTE_RE = re.compile(rf"/assets/({UUID_PATTERN})(?![0-9a-f])", re.IGNORECASE)


def extract_file_ids(text: str) -> list[str]:
    """
    Every UUID substring of `text`, lowercased, in order of appearance.
    """
    if not text:
        return []
    return [match.lower() for match in _UUID_RE.findall(text)]


def normalize_file_id(value: Any) -> str | None:
    if value is None:
        return None

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if _UUID_FULL_RE.match(raw):
            return raw.lower()
        routed = _ASSET_ROUTE_RE.search(raw)
        if routed:
            return routed.group(1).lower()
        found = extract_file_ids(raw)
        return found[0] if found else None

    if isinstance(value, dict):
        inner = value.get("id")
    else:
        inner = getattr(value, "id", None)
    if isinstance(inner, str):
        return normalize_file_id(inner)
    return None


def unique_file_ids(values: Iterable[Any]) -> set[str]:
    found: set[str] = set()
    for value in values:
        file_id = normalize_file_id(value)
        if file_id:
            found.add(file_id)
    return found

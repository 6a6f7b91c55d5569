"""
Configuration-document reference scanner.

Site settings are one freeform JSON document per row. File ids show up at any
depth (banner image lists, favicon entries, navbar icons, profile avatar), so
instead of registering fixed paths we walk the whole value:

- strings: every embedded UUID is a possible reference
- arrays / objects: recurse (object keys are never references)
- numbers, booleans, null: ignored

The document is writable through the settings PATCH endpoint, so the walk is
depth-bounded. Hitting the bound is an error, not a truncation: a truncated
walk could miss a reference and let the sweeper delete a live file.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from core.directus import CollectionNotFoundError

from . import repository
from .file_ids import extract_file_ids

MAX_CONFIG_DEPTH = 64

logger = logging.getLogger(__name__)


class ConfigDepthError(RuntimeError):
    pass


class ReferenceVisitor:
    """
    Collects file ids found in JSON values.

    With `candidates`, only those ids are kept and the walk stops as soon as
    all of them were seen. Without it, every embedded id is collected.
    """

    def __init__(self, candidates: set[str] | None = None, *, max_depth: int = MAX_CONFIG_DEPTH) -> None:
        self.candidates = candidates
        self.max_depth = max_depth
        self.found: set[str] = set()

    def done(self) -> bool:
        return self.candidates is not None and len(self.found) >= len(self.candidates)

    def visit(self, value: Any, depth: int = 0) -> None:
        if self.done():
            return None

        if isinstance(value, str):
            self.visit_string(value)
        elif isinstance(value, dict):
            self.visit_items(value.values(), depth)
        elif isinstance(value, (list, tuple)):
            self.visit_items(value, depth)

    def visit_items(self, items: Iterable[Any], depth: int) -> None:
        # `depth` is the nesting level of the container holding `items`
        if depth >= self.max_depth:
            raise ConfigDepthError(f"Configuration document is nested deeper than {self.max_depth} levels.")
        for item in items:
            self.visit(item, depth + 1)
            if self.done():
                return None

    def visit_string(self, value: str) -> None:
        for file_id in extract_file_ids(value):
            if self.candidates is None or file_id in self.candidates:
                self.found.add(file_id)


def collect_config_file_ids(document: Any) -> set[str]:
    visitor = ReferenceVisitor()
    visitor.visit(document)
    return visitor.found


def check_config_depth(document: Any) -> None:
    """
    Raise `ConfigDepthError` if `document` could not be fully scanned later.
    """
    ReferenceVisitor().visit(document)


async def scan_config(candidates: set[str]) -> set[str]:
    """
    Which of `candidates` are embedded in any persisted settings document.

    Only an absent settings collection means "no references". Any other read
    failure (forbidden included) propagates, so the sweep deletes nothing.
    """
    if not candidates:
        return set()

    try:
        documents = await repository.read_site_settings_documents()
    except CollectionNotFoundError as exc:
        logger.warning("config_scan_skipped reason=%s", exc)
        return set()

    visitor = ReferenceVisitor(candidates)
    for document in documents:
        visitor.visit(document)
        if visitor.done():
            break
    return visitor.found

"""
Structured reference scanner.

Asks every registered (collection, field) target whether it still holds any of
the candidate file ids. Paging and scanning stop as soon as the answer is
known.
"""

from __future__ import annotations

import logging

from core.directus import DirectusSoftError

from . import repository
from .file_ids import normalize_file_id
from .registry import REFERENCE_TARGETS, ReferenceTarget

REFERENCE_PAGE_SIZE = 200

logger = logging.getLogger(__name__)


async def scan(target: ReferenceTarget, candidates: set[str]) -> set[str]:
    """
    Candidate ids referenced by at least one row of `target`.

    A collection or field missing from this deployment (or hidden from our
    token) counts as holding no references.
    """
    found: set[str] = set()
    if not candidates:
        return found

    file_ids = sorted(candidates)
    offset = 0
    while len(found) < len(candidates):
        try:
            values = await repository.read_reference_page(
                target,
                file_ids,
                limit=REFERENCE_PAGE_SIZE,
                offset=offset,
            )
        except DirectusSoftError as exc:
            logger.warning(
                "reference_scan_skipped collection=%s field=%s reason=%s",
                target.collection,
                target.field,
                exc,
            )
            return found

        for value in values:
            file_id = normalize_file_id(value)
            if file_id in candidates:
                found.add(file_id)

        if len(values) < REFERENCE_PAGE_SIZE:
            break
        offset += len(values)

    return found


async def scan_all(
    candidates: set[str],
    targets: tuple[ReferenceTarget, ...] = REFERENCE_TARGETS,
) -> set[str]:
    referenced: set[str] = set()
    for target in targets:
        if len(referenced) >= len(candidates):
            break
        unresolved = candidates - referenced
        referenced |= await scan(target, unresolved)
    return referenced

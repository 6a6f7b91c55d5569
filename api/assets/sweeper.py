"""
Orphan sweeper.

Flow for one mutation:
1) Normalize candidate ids (captured before the mutation)
2) Config scan (one small read); skip step 3 if it already explains everything
3) Structured scan over the registry, only for the unresolved ids
4) Delete candidates that neither scan found

A file that fails to delete stays as harmless orphaned storage and is found
again by a later sweep. A scan that fails hard deletes nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from core.directus import DirectusError

from . import repository, scanner
from .config_scanner import ConfigDepthError, scan_config
from .file_ids import unique_file_ids

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepReport:
    candidates: frozenset[str] = frozenset()
    referenced: frozenset[str] = frozenset()
    orphans: tuple[str, ...] = ()
    deleted: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()
    dry_run: bool = False
    aborted: bool = False
    notes: tuple[str, ...] = ()


async def _referenced(candidates: set[str]) -> set[str]:
    referenced = await scan_config(candidates)
    unresolved = candidates - referenced
    if unresolved:
        referenced |= await scanner.scan_all(unresolved)
    return referenced


async def sweep(values: Iterable[Any], *, dry_run: bool = False) -> SweepReport:
    candidates = unique_file_ids(values)
    if not candidates:
        return SweepReport(dry_run=dry_run)

    try:
        referenced = await _referenced(candidates)
    except (DirectusError, ConfigDepthError) as exc:
        logger.exception("sweep_aborted candidates=%s", len(candidates))
        return SweepReport(
            candidates=frozenset(candidates),
            referenced=frozenset(candidates),
            dry_run=dry_run,
            aborted=True,
            notes=(str(exc),),
        )

    orphans = tuple(sorted(candidates - referenced))
    if dry_run:
        return SweepReport(
            candidates=frozenset(candidates),
            referenced=frozenset(referenced),
            orphans=orphans,
            dry_run=True,
        )

    deleted: list[str] = []
    failed: list[str] = []
    for file_id in orphans:
        try:
            await repository.delete_file(file_id)
        except DirectusError:
            logger.exception("orphan_delete_failed file_id=%s", file_id)
            failed.append(file_id)
            continue
        deleted.append(file_id)

    logger.info(
        "sweep_complete candidates=%s referenced=%s deleted=%s failed=%s",
        len(candidates),
        len(referenced),
        len(deleted),
        len(failed),
    )
    return SweepReport(
        candidates=frozenset(candidates),
        referenced=frozenset(referenced),
        orphans=orphans,
        deleted=tuple(deleted),
        failed=tuple(failed),
    )


async def sweep_file_ids(values: Iterable[Any]) -> list[str]:
    """
    Mutation-handler entrypoint.

    This should never raise to the request path; the primary action already
    happened. Returns the ids actually deleted.
    """
    try:
        report = await sweep(values)
    except Exception:
        logger.exception("sweep_failed")
        return []
    return list(report.deleted)

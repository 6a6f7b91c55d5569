"""
Site settings logic.

Reads go through the cache; the PATCH path always reads the stored document
fresh, because the pre-patch document decides which file ids may have become
orphaned.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any

from fastapi import HTTPException, status

from assets import collectors, sweeper
from assets.config_scanner import ConfigDepthError, check_config_depth
from assets.registry import SITE_SETTINGS_FIELD
from core.cache import CachePort
from core.directus import DirectusError

from . import repository

CACHE_DOMAIN = "site-settings"
CACHE_KEY = "current"

logger = logging.getLogger(__name__)


def _document(row: dict[str, Any] | None) -> dict[str, Any]:
    if row is None:
        return {}
    value = row.get(SITE_SETTINGS_FIELD)
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return {}
    return value if isinstance(value, dict) else {}


def _updated_at(row: dict[str, Any] | None) -> Any:
    if row is None:
        return None
    return row.get("date_updated") or row.get("date_created")


def merge_settings(current: Any, patch: Any) -> Any:
    """
    JSON merge patch: objects merge key by key, `null` removes a key, and any
    other value (arrays included) replaces what was there.
    """
    if not isinstance(patch, dict):
        return copy.deepcopy(patch)
    result = copy.deepcopy(current) if isinstance(current, dict) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
            continue
        result[key] = merge_settings(result.get(key), value)
    return result


def _check_depth(document: Any) -> None:
    """
    A document the reference scanner can not walk to the end would make every
    later sweep abort, so it is never stored.
    """
    try:
        check_config_depth(document)
    except ConfigDepthError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _save_failure(exc: DirectusError) -> HTTPException:
    logger.error("site_settings_save_failed error=%s", exc)
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail="Could not save site settings.",
    )


async def get_site_settings(*, cache: CachePort) -> dict:
    cached = cache.get(CACHE_DOMAIN, CACHE_KEY)
    if cached is not None:
        return cached

    try:
        row = await repository.get_settings_row()
    except DirectusError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not read site settings.",
        ) from exc

    result = {"settings": _document(row), "updated_at": _updated_at(row)}
    cache.set(CACHE_DOMAIN, CACHE_KEY, result)
    return result


async def patch_site_settings(patch: dict[str, Any], *, cache: CachePort) -> dict:
    if not isinstance(patch, dict):
        raise HTTPException(status_code=400, detail="Settings patch must be a JSON object.")
    # Bounds the merge recursion below as well.
    _check_depth(patch)

    try:
        row = await repository.get_settings_row()
    except DirectusError as exc:
        raise _save_failure(exc) from exc

    current = _document(row)
    settings = merge_settings(current, patch)
    _check_depth(settings)
    # Only ids that disappeared are candidates; new ones are in use.
    removed = collectors.collect_removed_config_file_ids(current, settings)

    try:
        saved = await repository.save_settings(str(row["id"]) if row else None, settings)
    except DirectusError as exc:
        raise _save_failure(exc) from exc

    cache.invalidate(CACHE_DOMAIN)
    deleted = await sweeper.sweep_file_ids(removed)
    return {
        "settings": settings,
        "updated_at": _updated_at(saved),
        "deleted_files": deleted,
    }

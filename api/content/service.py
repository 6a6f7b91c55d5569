"""
Content mutation logic.

Every mutation that can drop a file reference follows the same order:
1) collect candidate file ids from the row as it is now
2) mutate
3) sweep the candidates (never fails the request)
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from assets import collectors, sweeper
from assets.file_ids import normalize_file_id
from core.cache import CachePort
from core.directus import DirectusError

from . import repository

COVER_KINDS = {"articles", "anime", "albums"}

logger = logging.getLogger(__name__)


def _store_failure(action: str, exc: DirectusError) -> HTTPException:
    logger.error("content_store_failed action=%s error=%s", action, exc)
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Content store rejected {action}.",
    )


def _collection_for(kind: str) -> str:
    collection = repository.COLLECTIONS.get(kind)
    if collection is None:
        raise HTTPException(status_code=404, detail=f"Unknown content kind '{kind}'.")
    return collection


def _parse_file_ref(value: str | None, *, field: str) -> str | None:
    """
    Empty input clears the field; anything else must resolve to a file id.
    """
    if value is None or not value.strip():
        return None
    file_id = normalize_file_id(value)
    if file_id is None:
        raise HTTPException(status_code=400, detail=f"{field} is not a valid file reference.")
    return file_id


async def _load_owned(collection: str, item_id: str, *, user_id: str, fields: list[str]) -> dict[str, Any]:
    try:
        row = await repository.get_item(collection, item_id, fields=["id", "author_id", *fields])
    except DirectusError as exc:
        raise _store_failure(f"read {collection}", exc) from exc
    if row is None:
        raise HTTPException(status_code=404, detail="Item not found.")
    if str(row.get("author_id") or "") != user_id:
        raise HTTPException(status_code=403, detail="Item belongs to another user.")
    return row


async def update_profile_avatar(user_id: str, avatar_file: str | None, *, cache: CachePort) -> dict:
    next_file = _parse_file_ref(avatar_file, field="avatar_file")
    try:
        profile = await repository.get_profile_by_user(user_id)
    except DirectusError as exc:
        raise _store_failure("read profile", exc) from exc
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found.")

    previous = normalize_file_id(profile.get("avatar_file"))
    candidates = collectors.collect_previous_file_ids(previous) if previous != next_file else set()

    try:
        updated = await repository.update_profile(str(profile["id"]), {"avatar_file": next_file})
    except DirectusError as exc:
        raise _store_failure("update profile", exc) from exc

    deleted = await sweeper.sweep_file_ids(candidates)
    cache.invalidate("author", user_id)
    return {"profile": updated, "deleted_files": deleted}


async def update_cover(
    kind: str,
    item_id: str,
    cover_file: str | None,
    *,
    user_id: str,
    cache: CachePort,
) -> dict:
    if kind not in COVER_KINDS:
        raise HTTPException(status_code=404, detail=f"'{kind}' has no cover.")
    collection = _collection_for(kind)
    next_file = _parse_file_ref(cover_file, field="cover_file")
    row = await _load_owned(collection, item_id, user_id=user_id, fields=["cover_file"])

    previous = normalize_file_id(row.get("cover_file"))
    candidates = collectors.collect_previous_file_ids(previous) if previous != next_file else set()

    try:
        updated = await repository.update_item(collection, item_id, {"cover_file": next_file})
    except DirectusError as exc:
        raise _store_failure(f"update {collection}", exc) from exc

    deleted = await sweeper.sweep_file_ids(candidates)
    cache.invalidate(repository.CACHE_DOMAINS[kind], item_id)
    return {"item": updated, "deleted_files": deleted}


async def _collect_item_candidates(kind: str, collection: str, row: dict[str, Any]) -> set[str]:
    item_id = str(row["id"])
    if kind == "albums":
        return await collectors.collect_album_file_ids(item_id, cover_file=row.get("cover_file"))
    if kind == "diaries":
        return await collectors.collect_diary_file_ids(item_id)
    return await collectors.collect_cover_file_ids(collection, item_id)


async def delete_item(kind: str, item_id: str, *, user_id: str, cache: CachePort) -> dict:
    collection = _collection_for(kind)
    fields = ["cover_file"] if kind in COVER_KINDS else []
    row = await _load_owned(collection, item_id, user_id=user_id, fields=fields)

    candidates = await _collect_item_candidates(kind, collection, row)

    try:
        child = repository.CHILD_COLLECTIONS.get(kind)
        if child is not None:
            await repository.delete_children(child[0], child[1], item_id)
        await repository.delete_item(collection, item_id)
    except DirectusError as exc:
        raise _store_failure(f"delete {collection}", exc) from exc

    deleted = await sweeper.sweep_file_ids(candidates)
    cache.invalidate(repository.CACHE_DOMAINS[kind], item_id)
    return {"ok": True, "id": item_id, "deleted_files": deleted}


async def _load_owned_child(
    kind: str,
    parent_id: str,
    child_id: str,
    *,
    user_id: str,
) -> tuple[str, dict[str, Any]]:
    """
    An album photo or diary image row, checked against the parent's owner.
    """
    parent_collection = _collection_for(kind)
    child = repository.CHILD_COLLECTIONS.get(kind)
    if child is None:
        raise HTTPException(status_code=404, detail=f"'{kind}' has no attachments.")
    child_collection, parent_field = child

    await _load_owned(parent_collection, parent_id, user_id=user_id, fields=[])
    try:
        row = await repository.get_item(child_collection, child_id, fields=["id", parent_field, "file_id"])
    except DirectusError as exc:
        raise _store_failure(f"read {child_collection}", exc) from exc
    if row is None or str(row.get(parent_field) or "") != parent_id:
        raise HTTPException(status_code=404, detail="Item not found.")
    return child_collection, row


async def update_child_file(
    kind: str,
    parent_id: str,
    child_id: str,
    file_id: str,
    *,
    user_id: str,
    cache: CachePort,
) -> dict:
    """
    Point one album photo or diary image at a different file.
    """
    next_file = _parse_file_ref(file_id, field="file_id")
    if next_file is None:
        raise HTTPException(status_code=400, detail="file_id is required.")
    child_collection, row = await _load_owned_child(kind, parent_id, child_id, user_id=user_id)

    previous = normalize_file_id(row.get("file_id"))
    candidates = collectors.collect_previous_file_ids(previous) if previous != next_file else set()

    try:
        updated = await repository.update_item(child_collection, child_id, {"file_id": next_file})
    except DirectusError as exc:
        raise _store_failure(f"update {child_collection}", exc) from exc

    deleted = await sweeper.sweep_file_ids(candidates)
    cache.invalidate(repository.CACHE_DOMAINS[kind], parent_id)
    return {"item": updated, "deleted_files": deleted}


async def delete_child_file(
    kind: str,
    parent_id: str,
    child_id: str,
    *,
    user_id: str,
    cache: CachePort,
) -> dict:
    child_collection, row = await _load_owned_child(kind, parent_id, child_id, user_id=user_id)

    candidates = collectors.collect_previous_file_ids(row.get("file_id"))
    try:
        await repository.delete_item(child_collection, child_id)
    except DirectusError as exc:
        raise _store_failure(f"delete {child_collection}", exc) from exc

    deleted = await sweeper.sweep_file_ids(candidates)
    cache.invalidate(repository.CACHE_DOMAINS[kind], parent_id)
    return {"ok": True, "id": child_id, "deleted_files": deleted}

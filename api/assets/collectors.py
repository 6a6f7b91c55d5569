"""
Candidate collectors.

Each collector answers "which file ids did this entity hold before the
mutation?" and is scoped to that one entity. Results feed `sweeper.sweep`.

Collectors never raise: a sub-query against a collection that is absent,
forbidden or unreachable contributes an empty set, so a storage gap can not
block the user-facing mutation.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable

from core.directus import DirectusError, DirectusSoftError

from . import repository
from .config_scanner import ConfigDepthError, collect_config_file_ids
from .file_ids import unique_file_ids

RELATION_LIMIT = 5000

logger = logging.getLogger(__name__)


async def _values_or_empty(label: str, query: Awaitable[list[Any]]) -> list[Any]:
    try:
        return await query
    except DirectusSoftError as exc:
        logger.warning("candidate_query_skipped query=%s reason=%s", label, exc)
    except DirectusError:
        logger.exception("candidate_query_failed query=%s", label)
    return []


def collect_previous_file_ids(*previous: Any) -> set[str]:
    """
    Single-field swap or clear (avatar, cover, photo, image): the old value.
    """
    return unique_file_ids(previous)


async def collect_cover_file_ids(collection: str, item_id: str) -> set[str]:
    values = await _values_or_empty(
        f"{collection}.cover_file",
        repository.read_field_values(collection, "cover_file", filter={"id": {"_eq": item_id}}, limit=1),
    )
    return unique_file_ids(values)


async def _relation_file_ids(collection: str, parent_field: str, parent_ids: list[str]) -> list[Any]:
    if not parent_ids:
        return []
    return await _values_or_empty(
        f"{collection}.file_id",
        repository.read_field_values(
            collection,
            "file_id",
            filter={parent_field: {"_in": parent_ids}},
            limit=RELATION_LIMIT,
        ),
    )


async def collect_album_file_ids(album_id: str, *, cover_file: Any = None) -> set[str]:
    """
    Every photo under the album, plus its cover.
    """
    values = await _relation_file_ids("app_album_photos", "album_id", [album_id])
    return unique_file_ids([*values, cover_file])


async def collect_diary_file_ids(diary_id: str) -> set[str]:
    values = await _relation_file_ids("app_diary_images", "diary_id", [diary_id])
    return unique_file_ids(values)


async def _authored_ids(collection: str, user_id: str) -> list[str]:
    return await _values_or_empty(
        f"{collection}.id",
        repository.read_ids(collection, filter={"author_id": {"_eq": user_id}}),
    )


async def collect_account_file_ids(user_id: str) -> set[str]:
    """
    Everything an account may have left behind.

    The store-side "uploaded by" index is collected as well, independently of
    the relations above, as a safety net for files whose referencing row is
    already gone.
    """
    by_owner = {"author_id": {"_eq": user_id}}
    scalar_queries = [
        ("app_user_profiles.avatar_file", repository.read_field_values(
            "app_user_profiles", "avatar_file", filter={"user_id": {"_eq": user_id}})),
        ("directus_users.avatar", repository.read_field_values(
            "directus_users", "avatar", filter={"id": {"_eq": user_id}}, limit=1)),
        ("app_articles.cover_file", repository.read_field_values(
            "app_articles", "cover_file", filter=by_owner)),
        ("app_anime_entries.cover_file", repository.read_field_values(
            "app_anime_entries", "cover_file", filter=by_owner)),
        ("app_albums.cover_file", repository.read_field_values(
            "app_albums", "cover_file", filter=by_owner)),
        ("app_user_registration_requests.avatar_file", repository.read_field_values(
            "app_user_registration_requests", "avatar_file", filter={"approved_user_id": {"_eq": user_id}})),
        ("directus_files.uploaded_by", repository.list_uploaded_file_ids(user_id)),
    ]
    scalar_results, album_ids, diary_ids = await asyncio.gather(
        asyncio.gather(*(_values_or_empty(label, query) for label, query in scalar_queries)),
        _authored_ids("app_albums", user_id),
        _authored_ids("app_diaries", user_id),
    )
    photo_values, image_values = await asyncio.gather(
        _relation_file_ids("app_album_photos", "album_id", album_ids),
        _relation_file_ids("app_diary_images", "diary_id", diary_ids),
    )

    values: list[Any] = [*photo_values, *image_values]
    for result in scalar_results:
        values.extend(result)
    return unique_file_ids(values)


def collect_removed_config_file_ids(before: Any, after: Any) -> set[str]:
    """
    Ids embedded in `before` that are gone from `after`. Added ids are never
    candidates.
    """
    try:
        previous = collect_config_file_ids(before)
        current = collect_config_file_ids(after)
    except ConfigDepthError:
        logger.warning("config_candidates_skipped reason=depth_exceeded")
        return set()
    return previous - current

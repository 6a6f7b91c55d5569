"""
Content persistence (profile, articles, anime entries, albums, diaries).
"""

from __future__ import annotations

from typing import Any

from core import directus

COLLECTIONS = {
    "articles": "app_articles",
    "anime": "app_anime_entries",
    "albums": "app_albums",
    "diaries": "app_diaries",
}

CACHE_DOMAINS = {
    "articles": "article-detail",
    "anime": "anime-detail",
    "albums": "album-detail",
    "diaries": "diary-detail",
}

# children are removed before their parent row
CHILD_COLLECTIONS = {
    "albums": ("app_album_photos", "album_id"),
    "diaries": ("app_diary_images", "diary_id"),
}


async def get_profile_by_user(user_id: str) -> dict[str, Any] | None:
    rows = await directus.client().read_many(
        "app_user_profiles",
        filter={"user_id": {"_eq": user_id}},
        fields=["id", "user_id", "avatar_file"],
        limit=1,
    )
    return rows[0] if rows else None


async def update_profile(profile_id: str, payload: dict[str, Any]) -> dict[str, Any]:
    return await directus.client().update_one("app_user_profiles", profile_id, payload)


async def get_item(collection: str, item_id: str, *, fields: list[str]) -> dict[str, Any] | None:
    return await directus.client().read_one(collection, item_id, fields=fields)


async def update_item(collection: str, item_id: str, payload: dict[str, Any]) -> dict[str, Any]:
    return await directus.client().update_one(collection, item_id, payload)


async def delete_item(collection: str, item_id: str) -> None:
    await directus.client().delete_one(collection, item_id)


async def delete_children(collection: str, parent_field: str, parent_id: str) -> None:
    await directus.client().delete_many(collection, filter={parent_field: {"_eq": parent_id}})

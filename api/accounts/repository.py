"""
Account cascade persistence.
"""

from __future__ import annotations

from typing import Any

from core import directus

# Columns elsewhere that point at an account and block its deletion.
BLOCKING_REFERENCES: tuple[tuple[str, str], ...] = (
    ("app_notifications", "sender_id"),
    ("app_articles", "user_updated"),
    ("app_anime_entries", "user_updated"),
    ("app_albums", "user_updated"),
    ("app_diaries", "user_updated"),
    ("app_site_settings", "user_updated"),
    ("app_user_registration_requests", "approved_user_id"),
)

# Rows owned by the account, children first.
OWNED_CHILDREN: tuple[tuple[str, str, str], ...] = (
    ("app_album_photos", "album_id", "app_albums"),
    ("app_diary_images", "diary_id", "app_diaries"),
)
OWNED_ROWS: tuple[tuple[str, str], ...] = (
    ("app_articles", "author_id"),
    ("app_anime_entries", "author_id"),
    ("app_albums", "author_id"),
    ("app_diaries", "author_id"),
    ("app_user_profiles", "user_id"),
)


async def get_account(user_id: str) -> dict[str, Any] | None:
    return await directus.client().read_one("directus_users", user_id, fields=["id", "email", "status"])


async def clear_registration_avatars(user_id: str) -> None:
    await directus.client().update_many(
        "app_user_registration_requests",
        filter={"approved_user_id": {"_eq": user_id}},
        data={"avatar_file": None},
    )


async def nullify_reference(collection: str, field: str, user_id: str) -> None:
    await directus.client().update_many(
        collection,
        filter={field: {"_eq": user_id}},
        data={field: None},
    )


async def owned_ids(collection: str, owner_field: str, user_id: str) -> list[str]:
    rows = await directus.client().read_many(
        collection,
        filter={owner_field: {"_eq": user_id}},
        fields=["id"],
        limit=5000,
    )
    return [str(row["id"]) for row in rows if row.get("id") is not None]


async def delete_where(collection: str, filter: dict[str, Any]) -> None:
    await directus.client().delete_many(collection, filter=filter)


async def delete_account(user_id: str) -> None:
    await directus.client().delete_one("directus_users", user_id)

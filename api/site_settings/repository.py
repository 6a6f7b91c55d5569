"""
Site settings persistence (single configuration row).
"""

from __future__ import annotations

from typing import Any

from assets.registry import SITE_SETTINGS_COLLECTION, SITE_SETTINGS_FIELD
from core import directus


async def get_settings_row() -> dict[str, Any] | None:
    rows = await directus.client().read_many(
        SITE_SETTINGS_COLLECTION,
        fields=["id", SITE_SETTINGS_FIELD, "date_created", "date_updated"],
        sort=["id"],
        limit=1,
    )
    return rows[0] if rows else None


async def save_settings(row_id: str | None, settings: dict[str, Any]) -> dict[str, Any]:
    client = directus.client()
    if row_id is None:
        return await client.create_one(SITE_SETTINGS_COLLECTION, {SITE_SETTINGS_FIELD: settings})
    return await client.update_one(SITE_SETTINGS_COLLECTION, row_id, {SITE_SETTINGS_FIELD: settings})

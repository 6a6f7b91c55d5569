"""
Asset reference queries against the content store.
"""

from __future__ import annotations

from typing import Any

from core import directus

from .registry import (
    SITE_SETTINGS_COLLECTION,
    SITE_SETTINGS_FIELD,
    SITE_SETTINGS_ROW_LIMIT,
    ReferenceTarget,
)


async def read_field_values(
    collection: str,
    field: str,
    *,
    filter: dict[str, Any],
    limit: int = 2000,
) -> list[Any]:
    rows = await directus.client().read_many(collection, filter=filter, fields=[field], limit=limit)
    return [row.get(field) for row in rows]


async def read_ids(collection: str, *, filter: dict[str, Any], limit: int = 2000) -> list[str]:
    rows = await directus.client().read_many(collection, filter=filter, fields=["id"], limit=limit)
    return [str(row["id"]).strip() for row in rows if str(row.get("id") or "").strip()]


async def read_reference_page(
    target: ReferenceTarget,
    file_ids: list[str],
    *,
    limit: int,
    offset: int,
) -> list[Any]:
    """
    One page of `target.field` values that match any of `file_ids`.
    """
    rows = await directus.client().read_many(
        target.collection,
        filter={target.field: {"_in": file_ids}},
        fields=[target.field],
        limit=limit,
        offset=offset,
    )
    return [row.get(target.field) for row in rows]


async def read_site_settings_documents() -> list[Any]:
    rows = await directus.client().read_many(
        SITE_SETTINGS_COLLECTION,
        fields=[SITE_SETTINGS_FIELD],
        limit=SITE_SETTINGS_ROW_LIMIT,
    )
    return [row.get(SITE_SETTINGS_FIELD) for row in rows]


async def list_uploaded_file_ids(owner_id: str) -> list[Any]:
    rows = await directus.client().list_files_uploaded_by(owner_id)
    return [row.get("id") for row in rows]


async def delete_file(file_id: str) -> None:
    await directus.client().delete_file(file_id)

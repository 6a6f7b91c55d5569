"""
Account lookups for request authentication.
"""

from __future__ import annotations

from core import directus


async def get_user_by_id(user_id: str) -> dict | None:
    return await directus.client().read_one(
        "directus_users",
        user_id,
        fields=["id", "status"],
    )

"""
Reference-target registry.

Every (collection, field) pair that may hold an asset file id as a scalar
value. The structured scanner only looks here, so a new asset-bearing field
that is not registered is invisible to it and its files will be swept.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ReferenceTarget:
    collection: str
    field: str


REFERENCE_TARGETS: tuple[ReferenceTarget, ...] = (
    ReferenceTarget("app_user_profiles", "avatar_file"),
    ReferenceTarget("app_articles", "cover_file"),
    ReferenceTarget("app_anime_entries", "cover_file"),
    ReferenceTarget("app_albums", "cover_file"),
    ReferenceTarget("app_album_photos", "file_id"),
    ReferenceTarget("app_diary_images", "file_id"),
    ReferenceTarget("app_user_registration_requests", "avatar_file"),
    # account-level avatar, distinct from the profile avatar
    ReferenceTarget("directus_users", "avatar"),
)

SITE_SETTINGS_COLLECTION = "app_site_settings"
SITE_SETTINGS_FIELD = "settings"
SITE_SETTINGS_ROW_LIMIT = 20

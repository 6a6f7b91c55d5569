"""
Site settings API endpoints (administrators only).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from auth import dependencies as auth_dependencies
from core.cache import CachePort, get_cache

from . import service

router = APIRouter()


@router.get("/admin/settings/site")
async def get_site_settings(
    _: dict = Depends(auth_dependencies.require_admin),
    cache: CachePort = Depends(get_cache),
) -> dict:
    return await service.get_site_settings(cache=cache)


@router.patch("/admin/settings/site")
async def patch_site_settings(
    patch: dict[str, Any] = Body(...),
    _: dict = Depends(auth_dependencies.require_admin),
    cache: CachePort = Depends(get_cache),
) -> dict:
    return await service.patch_site_settings(patch, cache=cache)

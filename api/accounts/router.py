"""
Account administration API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.cache import CachePort, get_cache

from . import service

router = APIRouter()


@router.delete("/admin/users/{user_id}")
async def delete_user(
    user_id: str,
    current_user: dict = Depends(auth_dependencies.require_admin),
    cache: CachePort = Depends(get_cache),
) -> dict:
    result = await service.delete_account(user_id, actor_id=current_user["id"], cache=cache)
    return {
        "ok": True,
        "id": result.user_id,
        "state": result.state.value,
        "candidate_count": len(result.candidates),
        "nullified": result.nullified,
        "skipped": result.skipped,
        "deleted_files": result.deleted_files,
    }

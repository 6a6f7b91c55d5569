"""
Content mutation API endpoints for the signed-in author.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.cache import CachePort, get_cache

from . import schemas, service

router = APIRouter()


@router.patch("/me/profile/avatar")
async def update_avatar(
    request: schemas.AvatarUpdateRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    cache: CachePort = Depends(get_cache),
) -> dict:
    return await service.update_profile_avatar(current_user["id"], request.avatar_file, cache=cache)


@router.patch("/me/{kind}/{item_id}/cover")
async def update_cover(
    kind: str,
    item_id: str,
    request: schemas.CoverUpdateRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    cache: CachePort = Depends(get_cache),
) -> dict:
    return await service.update_cover(
        kind,
        item_id,
        request.cover_file,
        user_id=current_user["id"],
        cache=cache,
    )


@router.patch("/me/albums/{album_id}/photos/{photo_id}")
async def update_album_photo(
    album_id: str,
    photo_id: str,
    request: schemas.AttachmentFileUpdateRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    cache: CachePort = Depends(get_cache),
) -> dict:
    return await service.update_child_file(
        "albums",
        album_id,
        photo_id,
        request.file_id,
        user_id=current_user["id"],
        cache=cache,
    )


@router.patch("/me/diaries/{diary_id}/images/{image_id}")
async def update_diary_image(
    diary_id: str,
    image_id: str,
    request: schemas.AttachmentFileUpdateRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    cache: CachePort = Depends(get_cache),
) -> dict:
    return await service.update_child_file(
        "diaries",
        diary_id,
        image_id,
        request.file_id,
        user_id=current_user["id"],
        cache=cache,
    )


@router.delete("/me/albums/{album_id}/photos/{photo_id}")
async def delete_album_photo(
    album_id: str,
    photo_id: str,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    cache: CachePort = Depends(get_cache),
) -> dict:
    return await service.delete_child_file("albums", album_id, photo_id, user_id=current_user["id"], cache=cache)


@router.delete("/me/diaries/{diary_id}/images/{image_id}")
async def delete_diary_image(
    diary_id: str,
    image_id: str,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    cache: CachePort = Depends(get_cache),
) -> dict:
    return await service.delete_child_file("diaries", diary_id, image_id, user_id=current_user["id"], cache=cache)


@router.delete("/me/{kind}/{item_id}")
async def delete_item(
    kind: str,
    item_id: str,
    current_user: dict = Depends(auth_dependencies.get_current_user),
    cache: CachePort = Depends(get_cache),
) -> dict:
    """
    Delete an article, anime entry, album or diary owned by the current user.
    """
    return await service.delete_item(kind, item_id, user_id=current_user["id"], cache=cache)

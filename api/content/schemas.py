"""
Pydantic schemas for content mutation endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class AvatarUpdateRequest(BaseModel):
    # None (or empty) clears the avatar.
    avatar_file: str | None = Field(default=None, max_length=2000)


class CoverUpdateRequest(BaseModel):
    cover_file: str | None = Field(default=None, max_length=2000)


class AttachmentFileUpdateRequest(BaseModel):
    file_id: str = Field(..., min_length=1, max_length=2000)

"""
Pydantic schemas for asset maintenance endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SweepRequest(BaseModel):
    file_ids: list[str] = Field(..., min_length=1, max_length=500)
    dry_run: bool = True

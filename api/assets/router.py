"""
Asset maintenance API endpoints (administrators only).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies

from . import schemas, sweeper

router = APIRouter()


@router.post("/admin/assets/sweep")
async def sweep_assets(
    request: schemas.SweepRequest,
    _: dict = Depends(auth_dependencies.require_admin),
) -> dict:
    """
    Run the orphan check for the given file ids.

    Defaults to a dry run that only reports which ids are unreferenced.
    """
    report = await sweeper.sweep(request.file_ids, dry_run=request.dry_run)
    return {
        "dry_run": report.dry_run,
        "aborted": report.aborted,
        "candidate_count": len(report.candidates),
        "referenced": sorted(report.referenced),
        "orphans": list(report.orphans),
        "deleted": list(report.deleted),
        "failed": list(report.failed),
    }

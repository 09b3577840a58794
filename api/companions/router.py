"""
Companionship and compatible-crop API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core.scheduler import scheduler

from . import schemas, service

router = APIRouter()


@router.get("/api/crops/compatible")
async def compatible_crops(ids: list[str] = Query(default=[])) -> dict:
    """
    Rank crops by how well they grow next to every crop in `ids`.
    """
    return await scheduler.submit(lambda: service.compatible_crops(ids), exclusive=False, family="crops")


@router.post("/api/companionships", status_code=201)
async def create_companionship(
    request: schemas.CompanionshipCreateRequest,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await scheduler.submit(
        lambda: service.create_companionship(
            crop1=request.crop1,
            crop2=request.crop2,
            compatibility=request.compatibility,
        ),
        exclusive=True,
        family="crops",
    )


@router.get("/api/companionships/id/{companionship_id}")
async def get_companionship(companionship_id: str) -> dict:
    return await scheduler.submit(
        lambda: service.get_companionship(companionship_id),
        exclusive=False,
        family="crops",
    )

"""
Bed API endpoints. All routes require the bed (or location) to belong to the caller.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from auth import dependencies as auth_dependencies
from core.scheduler import scheduler

from . import schemas, service

router = APIRouter(prefix="/api/beds")


@router.post("", status_code=201)
async def create_bed(
    request: Request,
    payload: schemas.BedCreateRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await scheduler.submit(
        lambda: service.create_bed(request.state, payload, current_user),
        exclusive=True,
        family="beds",
    )


@router.get("/id/{bed_id}")
async def get_bed(
    bed_id: str,
    request: Request,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await scheduler.submit(
        lambda: service.load_owned_bed(request.state, bed_id, current_user),
        exclusive=False,
        family="beds",
    )


@router.put("/id/{bed_id}")
async def update_bed(
    bed_id: str,
    request: Request,
    payload: schemas.BedUpdateRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await scheduler.submit(
        lambda: service.update_bed(request.state, bed_id, payload, current_user),
        exclusive=True,
        family="beds",
    )


@router.delete("/id/{bed_id}")
async def delete_bed(
    bed_id: str,
    request: Request,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    await scheduler.submit(
        lambda: service.delete_bed(request.state, bed_id, current_user),
        exclusive=True,
        family="beds",
    )
    return {"ok": True, "bed_id": bed_id}


@router.get("/id/{bed_id}/compatible")
async def compatible_crops(
    bed_id: str,
    request: Request,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    return await scheduler.submit(
        lambda: service.compatible_for_bed(request.state, bed_id, current_user),
        exclusive=False,
        family="beds",
    )

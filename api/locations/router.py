"""
Location API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from core.ids import new_id
from core.scheduler import scheduler
from resolution import service as resolution
from store.registry import ResourceKind, registry

from . import schemas

router = APIRouter(prefix="/api/locations")


@router.post("", status_code=201)
async def create_location(
    payload: schemas.LocationCreateRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    store = registry.get(ResourceKind.LOCATION)
    record = {"id": new_id(), "user_id": current_user["id"], "name": payload.name.strip()}
    return await scheduler.submit(lambda: store.save(record), exclusive=True, family="beds")


@router.get("/id/{location_id}")
async def get_location(
    location_id: str,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    location = await scheduler.submit(
        lambda: resolution.fetch_document_by_id(ResourceKind.LOCATION, location_id, "beds"),
        exclusive=False,
        family="beds",
    )
    return auth_dependencies.ensure_owner(location, current_user, "You don't have access to this location")

"""
User API endpoints. All routes have the base url /api/users.
"""

from __future__ import annotations

from fastapi import APIRouter

from core.scheduler import scheduler

from . import schemas, service

router = APIRouter(prefix="/api/users")


@router.post("", status_code=201)
async def create_user(payload: schemas.UserCreateRequest) -> dict:
    return await scheduler.submit(lambda: service.create_user(payload), exclusive=True, family="users")


@router.get("/{user_id}", response_model=schemas.UserResponse)
async def get_user(user_id: str) -> schemas.UserResponse:
    return await scheduler.submit(lambda: service.get_user(user_id), exclusive=False, family="users")


@router.get("/{user_id}/locations")
async def get_user_locations(user_id: str) -> list[dict]:
    return await scheduler.submit(
        lambda: service.get_user_locations(user_id),
        exclusive=False,
        family="users",
    )

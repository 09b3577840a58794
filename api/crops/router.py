"""
Crop catalog API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Query

from core import config
from core.scheduler import scheduler
from resolution import service as resolution
from store.registry import ResourceKind

from . import repository

router = APIRouter()


@router.get("/api/crops")
async def list_crops(
    q: str = Query(default="", max_length=200),
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> dict:
    page_size = limit or config.crop_search_limit()
    crops = await scheduler.submit(
        lambda: repository.search_crops(q, limit=page_size, offset=offset),
        exclusive=False,
        family="crops",
    )
    return {"crops": crops, "count": len(crops), "limit": page_size, "offset": offset}


@router.get("/api/crops/id/{crop_id}")
async def get_crop(crop_id: str) -> dict:
    return await scheduler.submit(
        lambda: resolution.fetch_document_by_id(ResourceKind.CROP, crop_id, "companionships"),
        exclusive=False,
        family="crops",
    )

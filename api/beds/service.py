"""
Bed business logic.

Every bed route runs the same chain first: validate the bed id, resolve the
bed, check the current user owns it. Writes also require every referenced
crop to exist.
"""

from __future__ import annotations

import logging
from typing import Any

from auth.dependencies import ensure_owner
from companions import service as companions_service
from core.errors import InternalFetchError, NotFound
from core.ids import new_id, normalize_id
from resolution import handlers
from store.registry import ResourceKind, registry

from . import schemas

logger = logging.getLogger(__name__)


async def _checked_crop_ids(state: Any, crop_ids: list[str]) -> list[str]:
    await handlers.run_steps(state, crop_ids, handlers.id_validator, handlers.check_crops)
    return [normalize_id(crop_id) for crop_id in crop_ids]


async def load_owned_bed(state: Any, bed_id: str, user: dict[str, Any]) -> dict[str, Any]:
    await handlers.run_steps(state, [bed_id], handlers.id_validator, handlers.fetch_beds)
    beds = getattr(state, "beds", None) or []
    if not beds:
        raise InternalFetchError("Error fetching beds")
    return ensure_owner(beds[0], user, "You don't have access to this bed")


async def create_bed(state: Any, payload: schemas.BedCreateRequest, user: dict[str, Any]) -> dict[str, Any]:
    await handlers.run_steps(state, [payload.location], handlers.id_validator, handlers.fetch_locations)
    [location] = state.locations
    ensure_owner(location, user, "You don't have access to this location")

    crop_ids = await _checked_crop_ids(state, payload.crops)
    bed = await registry.get(ResourceKind.BED).save(
        {
            "id": new_id(),
            "user_id": user["id"],
            "location_id": location["id"],
            "name": payload.name,
            "crops": crop_ids,
        }
    )
    logger.info("bed_created bed_id=%s location_id=%s crops=%s", bed["id"], location["id"], len(crop_ids))
    return bed


async def update_bed(
    state: Any,
    bed_id: str,
    payload: schemas.BedUpdateRequest,
    user: dict[str, Any],
) -> dict[str, Any]:
    bed = dict(await load_owned_bed(state, bed_id, user))
    if payload.name is not None:
        bed["name"] = payload.name
    if payload.crops is not None:
        bed["crops"] = await _checked_crop_ids(state, payload.crops)
    return await registry.get(ResourceKind.BED).save(bed)


async def delete_bed(state: Any, bed_id: str, user: dict[str, Any]) -> None:
    bed = await load_owned_bed(state, bed_id, user)
    if not await registry.get(ResourceKind.BED).delete(bed["id"]):
        # Removed by a concurrent request between the fetch and the delete.
        raise NotFound(str(ResourceKind.BED), [bed["id"]])
    logger.info("bed_deleted bed_id=%s", bed["id"])


async def compatible_for_bed(state: Any, bed_id: str, user: dict[str, Any]) -> dict[str, Any]:
    bed = await load_owned_bed(state, bed_id, user)
    result = await companions_service.compatible_crops(list(bed.get("crops") or []))
    return {"bed_id": bed["id"], **result}

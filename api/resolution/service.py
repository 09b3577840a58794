"""
Batch lookups against the document stores.

Every call fans out one lookup per requested id, joins all of them, then
scans the joined results in requested order. The outcome is all-or-nothing:
either every record comes back (in requested order) or `NotFound` is raised.
Lookups already in flight when a miss is known are not cancelled; their
results are simply dropped with the rest of the batch.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from typing import Any

from core.errors import InternalFetchError, NotFound
from core.ids import normalize_id, validate_ids
from store.registry import ResourceKind, StoreRegistry, registry

logger = logging.getLogger(__name__)

Populate = str | Sequence[str] | None


def normalize_populate(populate: Populate) -> tuple[str, ...]:
    """
    Accept "crop1 crop2", ["crop1", "crop2"] or nothing.
    """
    if not populate:
        return ()
    if isinstance(populate, str):
        return tuple(populate.split())
    return tuple(name for name in populate if name)


def _missing(requested: list[str], found: Iterable[bool]) -> list[str]:
    return [record_id for record_id, ok in zip(requested, found) if not ok]


async def resolve(
    kind: ResourceKind,
    ids: Iterable[str],
    populate: Populate = None,
    *,
    stores: StoreRegistry | None = None,
) -> list[dict[str, Any]]:
    """
    Fetch the full record for every id in `ids`, optionally loading relations.

    Ids are matched case-insensitively. Raises `NotFound(kind)` if any id has
    no record; its `missing` attribute lists every miss, in requested order.
    """
    requested = [normalize_id(record_id) for record_id in ids]
    if not requested:
        return []

    store = (stores or registry).get(kind)
    relations = normalize_populate(populate)
    results = await asyncio.gather(*(store.find_by_id(record_id, relations) for record_id in requested))

    missing = _missing(requested, (record is not None for record in results))
    if missing:
        logger.info("lookup_miss kind=%s requested=%s missing=%s", kind, len(requested), ",".join(missing))
        raise NotFound(str(kind), missing)
    return list(results)


async def check_exists(
    kind: ResourceKind,
    ids: Iterable[str],
    *,
    stores: StoreRegistry | None = None,
) -> None:
    """
    Confirm every id exists without materializing the records.
    """
    requested = [normalize_id(record_id) for record_id in ids]
    if not requested:
        return None

    store = (stores or registry).get(kind)
    counts = await asyncio.gather(*(store.count({"id": record_id}) for record_id in requested))

    missing = _missing(requested, (count > 0 for count in counts))
    if missing:
        logger.info("exists_miss kind=%s requested=%s missing=%s", kind, len(requested), ",".join(missing))
        raise NotFound(str(kind), missing)
    return None


async def fetch_document_by_id(
    kind: ResourceKind,
    record_id: str,
    populate: Populate = None,
    *,
    stores: StoreRegistry | None = None,
) -> dict[str, Any]:
    """
    Validate and fetch a single record.
    """
    validate_ids([record_id])
    records = await resolve(kind, [record_id], populate, stores=stores)
    if not records:
        raise InternalFetchError(f"Error fetching {kind}")
    return records[0]

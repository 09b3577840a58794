"""
Compatible-crop suggestions for a set of placed crops.

Flow:
1) Validate and resolve the placed (query) crops with their companionships
2) Build the companionship table aligned with the query ids
3) Aggregate scores, rank, resolve the candidate crops
4) Return placed crops merged with ranked candidates for display
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from core import config
from core.errors import ValidationFailure
from core.ids import new_id, normalize_id, validate_ids
from resolution import service as resolution
from store.registry import ResourceKind, registry
from store.postgres import check_compatibility

from . import scoring

logger = logging.getLogger(__name__)


def _unique(ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for value in ids:
        key = normalize_id(value)
        if key not in seen:
            seen.add(key)
            out.append(key)
    return out


def _plain_crop(crop: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in crop.items() if k != "companionships"}


async def companionship_table(query_ids: list[str]) -> tuple[list[dict[str, Any]], list[list[dict[str, Any]]]]:
    """
    Resolve the query crops and return them with `table[i]` = edges of `query_ids[i]`.
    """
    crops = await resolution.resolve(ResourceKind.CROP, query_ids, "companionships")
    return crops, [list(crop.get("companionships") or []) for crop in crops]


async def compatible_crops(crop_ids: list[str]) -> dict[str, Any]:
    validate_ids(crop_ids)
    query_ids = _unique(crop_ids)
    max_score = config.max_compatibility()

    placed, table = await companionship_table(query_ids)
    scores = scoring.aggregate(table, query_ids, max_score)
    covered = scoring.coverage(table, query_ids)
    ranked = scoring.rank_candidates(scores, exclude=query_ids)

    candidate_rows = await resolution.resolve(ResourceKind.CROP, [crop_id for crop_id, _ in ranked])
    candidates = [
        {
            "crop": row,
            "score": score,
            "coverage": covered.get(crop_id, 0),
            "full_coverage": covered.get(crop_id, 0) == len(query_ids),
        }
        for (crop_id, score), row in zip(ranked, candidate_rows)
    ]
    incompatible = sorted(
        crop_id for crop_id, score in scores.items() if score is scoring.INCOMPATIBLE and crop_id not in query_ids
    )

    logger.info(
        "compatible_crops query=%s candidates=%s incompatible=%s",
        len(query_ids),
        len(candidates),
        len(incompatible),
    )
    placed_crops = [_plain_crop(crop) for crop in placed]
    return {
        "max_score": max_score,
        "placed": placed_crops,
        "candidates": candidates,
        "incompatible": incompatible,
        "options": placed_crops + [item["crop"] for item in candidates],
    }


async def create_companionship(*, crop1: str, crop2: str, compatibility: float) -> dict[str, Any]:
    validate_ids([crop1, crop2])
    crop1, crop2 = normalize_id(crop1), normalize_id(crop2)

    errors: dict[str, str] = {}
    message = check_compatibility(compatibility, max_score=config.max_compatibility())
    if message:
        errors["compatibility"] = message
    if crop1 == crop2:
        errors["crops"] = "A crop cannot be its own companion"
    if errors:
        raise ValidationFailure(errors, message="Invalid companionship data")

    await resolution.check_exists(ResourceKind.CROP, [crop1, crop2])

    # Undirected edge: stored once with the smaller id first.
    crop1, crop2 = sorted((crop1, crop2))
    store = registry.get(ResourceKind.COMPANIONSHIP)
    return await store.save(
        {"id": new_id(), "crop1": crop1, "crop2": crop2, "compatibility": compatibility}
    )


async def get_companionship(companionship_id: str) -> dict[str, Any]:
    return await resolution.fetch_document_by_id(
        ResourceKind.COMPANIONSHIP, companionship_id, "crop1 crop2"
    )

"""
Crop catalog queries (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core import db
from core.text import escape_pattern


async def search_crops(query: str, *, limit: int, offset: int = 0) -> list[dict[str, Any]]:
    """
    Case-insensitive match on common or binomial name. Empty query lists everything.
    """
    pattern = escape_pattern((query or "").strip())
    return await db.fetch_all(
        """
        SELECT id, common_name, binomial_name
        FROM crops
        WHERE $1 = ''
           OR common_name ~* $1
           OR binomial_name ~* $1
        ORDER BY coalesce(common_name, binomial_name) ASC, id ASC
        LIMIT $2
        OFFSET $3
        """,
        pattern,
        limit,
        offset,
    )

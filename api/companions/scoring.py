"""
Companionship score aggregation.

Input is a companionship table aligned with a list of query crop ids:
`table[i]` holds every companionship edge touching `query_ids[i]`. Each edge
is a dict with `crop1`, `crop2` (ids, or populated crop dicts) and
`compatibility` (-1 for strictly incompatible, otherwise 0..max_score).

The score of a candidate is the sum of its edge scores divided by
`max_score * len(query_ids)`, so a candidate that relates to every query crop
with the maximum score gets 1.0. A candidate that relates to only some of the
query crops is scored against the full total and therefore ranks lower than
one with full coverage; `coverage()` reports how many query crops each
candidate actually relates to, for callers that need to tell the two apart.

Everything here is pure: no I/O and no state shared between calls.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

INCOMPATIBLE_SCORE = -1


class Verdict(enum.Enum):
    INCOMPATIBLE = "incompatible"

    def __repr__(self) -> str:
        return "INCOMPATIBLE"


INCOMPATIBLE = Verdict.INCOMPATIBLE

Score = float | Verdict
Edge = Mapping[str, Any]


def _endpoint_id(value: Any) -> str:
    if isinstance(value, Mapping):
        return str(value["id"])
    return str(value)


def other_endpoint(edge: Edge, query_id: str) -> str:
    """
    Return the id on the far side of `edge` as seen from `query_id`.
    """
    first = _endpoint_id(edge["crop1"])
    second = _endpoint_id(edge["crop2"])
    return first if second == query_id else second


def aggregate(
    table: Sequence[Iterable[Edge]],
    query_ids: Sequence[str],
    max_score: float,
) -> dict[str, Score]:
    """
    Map every candidate crop id to its normalized score, or INCOMPATIBLE.

    An incompatible edge anywhere marks its candidate INCOMPATIBLE for the
    rest of the call, whatever order the edges arrive in.
    """
    if max_score <= 0:
        raise ValueError("max_score must be positive.")

    scores: dict[str, Score] = {}
    total = max_score * len(query_ids)
    for query_id, edges in zip(query_ids, table):
        for edge in edges:
            candidate = other_endpoint(edge, query_id)
            compatibility = edge["compatibility"]
            current = scores.get(candidate)

            if compatibility == INCOMPATIBLE_SCORE:
                scores[candidate] = INCOMPATIBLE
            elif current is INCOMPATIBLE:
                continue
            elif current is None:
                scores[candidate] = compatibility / total
            else:
                scores[candidate] = current + compatibility / total
    return scores


def coverage(table: Sequence[Iterable[Edge]], query_ids: Sequence[str]) -> dict[str, int]:
    """
    Count, per candidate, how many distinct query crops it has an edge with.
    """
    seen: dict[str, set[str]] = {}
    for query_id, edges in zip(query_ids, table):
        for edge in edges:
            seen.setdefault(other_endpoint(edge, query_id), set()).add(query_id)
    return {candidate: len(queries) for candidate, queries in seen.items()}


def rank_candidates(
    scores: Mapping[str, Score],
    *,
    exclude: Iterable[str] = (),
) -> list[tuple[str, float]]:
    """
    Order scored candidates best first (ties by id), dropping INCOMPATIBLE and `exclude`.
    """
    skip = set(exclude)
    ranked = [
        (candidate, float(score))
        for candidate, score in scores.items()
        if score is not INCOMPATIBLE and candidate not in skip
    ]
    ranked.sort(key=lambda item: (-item[1], item[0]))
    return ranked

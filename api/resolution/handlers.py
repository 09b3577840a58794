"""
Request-scoped lookup steps.

A step is an async callable taking a state object (FastAPI's
`request.state`, or any attribute bag) that carries the id batch in
`state.ids`. Steps are built by plain constructor functions and hold no
state of their own, so one step object serves any number of concurrent
requests.

Typical use inside a route:

    await run_steps(request.state, [bed_id], id_validator, fetch_beds)
    [bed] = request.state.beds
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from core.ids import validate_ids
from store.registry import ResourceKind, StoreRegistry

from . import service

Step = Callable[[Any], Awaitable[None]]


async def id_validator(state: Any) -> None:
    validate_ids(getattr(state, "ids", None))


def make_resolver(
    kind: ResourceKind,
    result_name: str,
    populate: service.Populate = None,
    *,
    stores: StoreRegistry | None = None,
) -> Step:
    """
    Build a step that resolves `state.ids` and stores the records on `state.<result_name>`.

    With no batch attached (`state.ids` is None) the step does nothing.
    """
    relations = service.normalize_populate(populate)

    async def fetch(state: Any) -> None:
        ids = getattr(state, "ids", None)
        if ids is None:
            return None
        records = await service.resolve(kind, ids, relations, stores=stores)
        setattr(state, result_name, records)

    fetch.__name__ = f"fetch_{result_name}"
    return fetch


def make_checker(kind: ResourceKind, *, stores: StoreRegistry | None = None) -> Step:
    async def check(state: Any) -> None:
        ids = getattr(state, "ids", None)
        if ids is None:
            return None
        await service.check_exists(kind, ids, stores=stores)

    check.__name__ = f"check_{kind}"
    return check


async def run_steps(state: Any, ids: Iterable[str] | None, *steps: Step) -> Any:
    """
    Attach `ids` to `state` and run `steps` in order. The first error stops the chain.
    """
    state.ids = list(ids) if ids is not None else None
    for step in steps:
        await step(state)
    return state


check_crops = make_checker(ResourceKind.CROP)
fetch_locations = make_resolver(ResourceKind.LOCATION, "locations")
fetch_beds = make_resolver(ResourceKind.BED, "beds")

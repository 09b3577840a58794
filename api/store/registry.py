"""
Store-kind registry.

Each resource kind (crops, beds, ...) is served by one `DocumentStore`. The
lookup code only ever asks the registry for a kind's store, so tests and
alternative backends swap stores without touching callers.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Protocol


class ResourceKind(str, Enum):
    CROP = "crops"
    COMPANIONSHIP = "companionships"
    USER = "users"
    LOCATION = "locations"
    BED = "beds"

    def __str__(self) -> str:
        return self.value


class DocumentStore(Protocol):
    async def find_by_id(self, record_id: str, populate: Sequence[str] = ()) -> dict[str, Any] | None:
        ...

    async def count(self, filters: Mapping[str, Any]) -> int:
        ...

    async def save(self, record: dict[str, Any]) -> dict[str, Any]:
        """
        Insert or update `record`, returning the persisted form.

        Raises `ValidationFailure` when the store rejects the write.
        """
        ...

    async def delete(self, record_id: str) -> bool:
        ...


class StoreRegistry:
    def __init__(self) -> None:
        self._stores: dict[ResourceKind, DocumentStore] = {}

    def register(self, kind: ResourceKind, store: DocumentStore) -> None:
        self._stores[ResourceKind(kind)] = store

    def get(self, kind: ResourceKind) -> DocumentStore:
        store = self._stores.get(ResourceKind(kind))
        if store is None:
            raise RuntimeError(f"No store registered for kind '{kind}'.")
        return store

    def kinds(self) -> list[ResourceKind]:
        return list(self._stores)

    def clear(self) -> None:
        self._stores.clear()


registry = StoreRegistry()

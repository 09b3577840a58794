"""
PostgreSQL-backed document stores (raw SQL over `core.db`).

One store per table. Relations named in `populate` are loaded with one extra
query each and attached to the returned dict under the relation name.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

import asyncpg

from core import config, db
from core.errors import DuplicateField, ValidationFailure
from core.ids import new_id

from .registry import ResourceKind, StoreRegistry

logger = logging.getLogger(__name__)

Loader = Callable[[dict[str, Any]], Awaitable[Any]]

CROP_COLUMNS = ("id", "common_name", "binomial_name")
COMPANIONSHIP_COLUMNS = ("id", "crop1", "crop2", "compatibility")


def build_where(filters: Mapping[str, Any], *, allowed: Sequence[str]) -> tuple[str, list[Any]]:
    """
    Turn `{"id": x, "user_id": [a, b]}` into `" WHERE id = $1 AND user_id = ANY($2)"`.

    Only column names in `allowed` are accepted; values are always bound.
    """
    clauses: list[str] = []
    args: list[Any] = []
    for column, value in filters.items():
        if column not in allowed:
            raise ValueError(f"Unknown filter column: {column}")
        args.append(list(value) if isinstance(value, (list, tuple, set)) else value)
        if isinstance(value, (list, tuple, set)):
            clauses.append(f"{column} = ANY(${len(args)})")
        else:
            clauses.append(f"{column} = ${len(args)}")
    if not clauses:
        return "", args
    return " WHERE " + " AND ".join(clauses), args


class TableStore:
    kind: ResourceKind
    table: str
    columns: tuple[str, ...]
    # Columns written by save(); anything else is left to DB defaults.
    writable: tuple[str, ...]
    # Unique constraint name -> field reported back to the client.
    unique_fields: dict[str, str] = {}

    def relations(self) -> dict[str, Loader]:
        return {}

    def prepare(self, record: dict[str, Any]) -> dict[str, Any]:
        """
        Validate and normalize a record before writing. Raise ValidationFailure to reject.
        """
        return record

    @property
    def _select_list(self) -> str:
        return ", ".join(self.columns)

    async def find_by_id(self, record_id: str, populate: Sequence[str] = ()) -> dict[str, Any] | None:
        row = await db.fetch_one(
            f"SELECT {self._select_list} FROM {self.table} WHERE id = $1",
            record_id,
        )
        if row is None:
            return None

        loaders = self.relations()
        for name in populate:
            loader = loaders.get(name)
            if loader is None:
                raise ValueError(f"{self.kind} has no relation named '{name}'.")
            row[name] = await loader(row)
        return row

    async def count(self, filters: Mapping[str, Any]) -> int:
        where, args = build_where(filters, allowed=self.columns)
        value = await db.fetch_value(f"SELECT count(*) FROM {self.table}{where}", *args)
        return int(value or 0)

    async def save(self, record: dict[str, Any]) -> dict[str, Any]:
        data = self.prepare(dict(record))
        if not data.get("id"):
            data["id"] = new_id()

        columns = [c for c in self.writable if c in data]
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in columns if c != "id") or "id = EXCLUDED.id"
        sql = f"""
            INSERT INTO {self.table} ({", ".join(columns)})
            VALUES ({placeholders})
            ON CONFLICT (id) DO UPDATE
            SET {updates}
            RETURNING {self._select_list}
        """
        try:
            row = await db.fetch_one(sql, *[data[c] for c in columns])
        except asyncpg.UniqueViolationError as exc:
            field = self.unique_fields.get(exc.constraint_name or "", "id")
            logger.info("store_duplicate kind=%s field=%s", self.kind, field)
            raise DuplicateField({field: f"This {field} is taken"}) from exc
        except asyncpg.ForeignKeyViolationError as exc:
            raise ValidationFailure(
                {"reference": "Referenced record does not exist"},
                message=f"Invalid {self.kind} data",
            ) from exc
        except asyncpg.CheckViolationError as exc:
            raise ValidationFailure(
                {exc.constraint_name or "record": "Value out of range"},
                message=f"Invalid {self.kind} data",
            ) from exc
        if row is None:
            raise RuntimeError(f"Failed to save {self.kind} record.")
        return row

    async def delete(self, record_id: str) -> bool:
        status = await db.execute(f"DELETE FROM {self.table} WHERE id = $1", record_id)
        return status.endswith(" 1")


class CropStore(TableStore):
    kind = ResourceKind.CROP
    table = "crops"
    columns = CROP_COLUMNS
    writable = CROP_COLUMNS
    unique_fields = {"crops_binomial_name_key": "binomial_name"}

    def relations(self) -> dict[str, Loader]:
        return {"companionships": self._companionships}

    async def _companionships(self, row: dict[str, Any]) -> list[dict[str, Any]]:
        return await db.fetch_all(
            f"""
            SELECT {", ".join(COMPANIONSHIP_COLUMNS)}
            FROM companionships
            WHERE crop1 = $1 OR crop2 = $1
            ORDER BY id
            """,
            row["id"],
        )

    def prepare(self, record: dict[str, Any]) -> dict[str, Any]:
        if not str(record.get("binomial_name") or "").strip():
            raise ValidationFailure({"binomial_name": "Binomial name is required"}, message="Invalid crop data")
        return record


async def _crop_by_id(crop_id: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"SELECT {', '.join(CROP_COLUMNS)} FROM crops WHERE id = $1",
        crop_id,
    )


def check_compatibility(value: Any, *, max_score: float) -> str | None:
    """
    Return an error message when `value` is not -1 and not within [0, max_score].
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "Compatibility must be a number"
    if value == -1 or 0 <= value <= max_score:
        return None
    return f"Compatibility must be -1 or between 0 and {max_score:g}"


class CompanionshipStore(TableStore):
    kind = ResourceKind.COMPANIONSHIP
    table = "companionships"
    columns = COMPANIONSHIP_COLUMNS
    writable = COMPANIONSHIP_COLUMNS
    unique_fields = {"companionships_crop1_crop2_key": "crops"}

    def relations(self) -> dict[str, Loader]:
        return {
            "crop1": lambda row: _crop_by_id(row["crop1"]),
            "crop2": lambda row: _crop_by_id(row["crop2"]),
        }

    def prepare(self, record: dict[str, Any]) -> dict[str, Any]:
        errors: dict[str, str] = {}
        message = check_compatibility(record.get("compatibility"), max_score=config.max_compatibility())
        if message:
            errors["compatibility"] = message
        if record.get("crop1") == record.get("crop2"):
            errors["crops"] = "A crop cannot be its own companion"
        if errors:
            raise ValidationFailure(errors, message="Invalid companionship data")

        # Undirected edge: stored once with the smaller id first.
        first, second = sorted((record["crop1"], record["crop2"]))
        record["crop1"], record["crop2"] = first, second
        return record


class UserStore(TableStore):
    kind = ResourceKind.USER
    table = "users"
    columns = ("id", "username", "email", "password_hash", "created_at")
    writable = ("id", "username", "email", "password_hash")
    unique_fields = {"users_username_key": "username", "users_email_key": "email"}

    def relations(self) -> dict[str, Loader]:
        return {"locations": self._locations}

    async def _locations(self, row: dict[str, Any]) -> list[dict[str, Any]]:
        return await db.fetch_all(
            """
            SELECT id, user_id, name, created_at
            FROM locations
            WHERE user_id = $1
            ORDER BY created_at, id
            """,
            row["id"],
        )


class LocationStore(TableStore):
    kind = ResourceKind.LOCATION
    table = "locations"
    columns = ("id", "user_id", "name", "created_at")
    writable = ("id", "user_id", "name")

    def relations(self) -> dict[str, Loader]:
        return {"beds": self._beds}

    async def _beds(self, row: dict[str, Any]) -> list[dict[str, Any]]:
        return await db.fetch_all(
            """
            SELECT id, user_id, location_id, name, crops, created_at
            FROM beds
            WHERE location_id = $1
            ORDER BY created_at, id
            """,
            row["id"],
        )


class BedStore(TableStore):
    kind = ResourceKind.BED
    table = "beds"
    columns = ("id", "user_id", "location_id", "name", "crops", "created_at")
    writable = ("id", "user_id", "location_id", "name", "crops")

    def relations(self) -> dict[str, Loader]:
        return {"crops": self._crops}

    async def _crops(self, row: dict[str, Any]) -> list[dict[str, Any]]:
        crop_ids = list(row.get("crops") or [])
        if not crop_ids:
            return []
        rows = await db.fetch_all(
            f"SELECT {', '.join(CROP_COLUMNS)} FROM crops WHERE id = ANY($1)",
            crop_ids,
        )
        by_id = {r["id"]: r for r in rows}
        return [by_id[crop_id] for crop_id in crop_ids if crop_id in by_id]

    def prepare(self, record: dict[str, Any]) -> dict[str, Any]:
        record["crops"] = list(record.get("crops") or [])
        return record


def register_postgres_stores(target: StoreRegistry) -> None:
    for store in (CropStore(), CompanionshipStore(), UserStore(), LocationStore(), BedStore()):
        target.register(store.kind, store)

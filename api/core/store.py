"""
Soft-delete resource persistence (raw SQL).

Every resource kind shares one lifecycle:

    created -> active <-> soft-deleted -> (destroyed)

`ResourceStore` implements it once; each kind supplies a `ResourceKind`
describing its table, columns and entity model. Every operation is a single
SQL statement, so the lifecycle guards (`deleted_at IS NULL` /
`deleted_at IS NOT NULL`) and the write happen atomically in Postgres.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from .db import Database
from .errors import ConflictError, NotFound

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseModel)

LIFECYCLE_COLUMNS = ("created_at", "updated_at", "deleted_at")


@dataclass(frozen=True)
class ResourceKind(Generic[E]):
    """
    Static description of one resource kind.

    `writable` lists table columns set by create/update. `prepare` maps caller
    input (field name -> value) onto those columns, e.g. hashing a password
    into `password_hash`; it must pass None through for untouched fields.
    `id_type` may be an `Annotated` type carrying the column's bounds.
    """

    name: str
    plural: str
    table: str
    id_type: Any
    fields: tuple[str, ...]
    writable: tuple[str, ...]
    entity: type[E]
    unique: tuple[str, ...] = ()
    prepare: Callable[[dict[str, Any]], dict[str, Any]] | None = None

    @property
    def columns(self) -> tuple[str, ...]:
        return ("id", *self.fields, *LIFECYCLE_COLUMNS)


def _input_values(data: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return dict(data)


class ResourceStore(Generic[E]):
    def __init__(self, kind: ResourceKind[E], db: Database) -> None:
        self.kind = kind
        self._db = db
        self._returning = ", ".join(kind.columns)

    def _entity(self, row: dict[str, Any]) -> E:
        return self.kind.entity.model_validate(row)

    def _not_found(self, id: Any, state: str = "active") -> NotFound:
        return NotFound(f"No {state} {self.kind.name} with id {id}.")

    def _column_values(self, data: BaseModel | Mapping[str, Any]) -> list[Any]:
        values = _input_values(data)
        if self.kind.prepare is not None:
            values = self.kind.prepare(values)
        return [values.get(column) for column in self.kind.writable]

    def _conflict(self) -> ConflictError:
        fields = ", ".join(self.kind.unique) or "a unique field"
        return ConflictError(f"A {self.kind.name} with this {fields} already exists.")

    async def list(self) -> list[E]:
        """
        Return active rows, newest first.
        """
        rows = await self._db.fetch_all(
            f"""
            SELECT {self._returning}
            FROM {self.kind.table}
            WHERE deleted_at IS NULL
            ORDER BY created_at DESC, id DESC
            """
        )
        return [self._entity(row) for row in rows]

    async def get(self, id: Any) -> E:
        row = await self._db.fetch_one(
            f"""
            SELECT {self._returning}
            FROM {self.kind.table}
            WHERE id = $1
              AND deleted_at IS NULL
            """,
            id,
        )
        if row is None:
            raise self._not_found(id)
        return self._entity(row)

    async def create(self, data: BaseModel | Mapping[str, Any]) -> E:
        values = self._column_values(data)
        columns = ", ".join(self.kind.writable)
        placeholders = ", ".join(f"${i}" for i in range(1, len(values) + 1))
        try:
            row = await self._db.fetch_one(
                f"""
                INSERT INTO {self.kind.table} ({columns}, created_at, updated_at)
                VALUES ({placeholders}, now(), now())
                RETURNING {self._returning}
                """,
                *values,
            )
        except ConflictError as exc:
            raise self._conflict() from exc
        if row is None:
            raise RuntimeError(f"Failed to create {self.kind.name}.")
        logger.info("%s_created id=%s", self.kind.name, row["id"])
        return self._entity(row)

    async def update(self, id: Any, data: BaseModel | Mapping[str, Any]) -> E:
        """
        Merge the provided fields into an active row.

        A None value keeps the stored column (COALESCE), so callers never have
        to send fields they do not change.
        """
        values = self._column_values(data)
        assignments = ",\n                  ".join(
            f"{column} = COALESCE(${i}, {column})" for i, column in enumerate(self.kind.writable, start=2)
        )
        try:
            row = await self._db.fetch_one(
                f"""
                UPDATE {self.kind.table}
                SET {assignments},
                    updated_at = now()
                WHERE id = $1
                  AND deleted_at IS NULL
                RETURNING {self._returning}
                """,
                id,
                *values,
            )
        except ConflictError as exc:
            raise self._conflict() from exc
        if row is None:
            raise self._not_found(id)
        logger.info("%s_updated id=%s", self.kind.name, id)
        return self._entity(row)

    async def soft_delete(self, id: Any) -> E:
        row = await self._db.fetch_one(
            f"""
            UPDATE {self.kind.table}
            SET deleted_at = now(),
                updated_at = now()
            WHERE id = $1
              AND deleted_at IS NULL
            RETURNING {self._returning}
            """,
            id,
        )
        if row is None:
            raise self._not_found(id)
        logger.info("%s_soft_deleted id=%s", self.kind.name, id)
        return self._entity(row)

    async def restore(self, id: Any) -> E:
        row = await self._db.fetch_one(
            f"""
            UPDATE {self.kind.table}
            SET deleted_at = NULL,
                updated_at = now()
            WHERE id = $1
              AND deleted_at IS NOT NULL
            RETURNING {self._returning}
            """,
            id,
        )
        if row is None:
            raise self._not_found(id, state="deleted")
        logger.info("%s_restored id=%s", self.kind.name, id)
        return self._entity(row)

    async def destroy(self, id: Any) -> bool:
        """
        Remove the row whatever its lifecycle state. Destroying an identity
        that does not exist raises NotFound.
        """
        row = await self._db.fetch_one(
            f"""
            DELETE FROM {self.kind.table}
            WHERE id = $1
            RETURNING id
            """,
            id,
        )
        if row is None:
            raise NotFound(f"No {self.kind.name} with id {id}.")
        logger.info("%s_destroyed id=%s", self.kind.name, id)
        return True

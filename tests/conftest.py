"""Test fixtures: recording database, in-memory stores and a stub generator."""

from __future__ import annotations

import itertools
import re
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID, uuid4

import pytest

from accounts.repository import ACCOUNTS
from core.errors import ConflictError, NotFound
from core.generator import PoemDraft
from core.store import ResourceKind
from dispatch.surface import compose_registry
from poems.repository import POEMS
from prompts.repository import PROMPTS


def squash(sql: str) -> str:
    """Collapse whitespace so SQL can be compared as one line."""
    return re.sub(r"\s+", " ", sql).strip()


class RecordingDatabase:
    """Stands in for core.db.Database: records SQL and replays queued rows."""

    def __init__(self, *responses: Any) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._responses = list(responses)

    def queue(self, *responses: Any) -> None:
        self._responses.extend(responses)

    def _next(self) -> Any:
        response = self._responses.pop(0) if self._responses else None
        if isinstance(response, Exception):
            raise response
        return response

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        self.calls.append((squash(sql), args))
        return self._next()

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        self.calls.append((squash(sql), args))
        return self._next() or []

    @property
    def last_sql(self) -> str:
        return self.calls[-1][0]

    @property
    def last_args(self) -> tuple[Any, ...]:
        return self.calls[-1][1]


class InMemoryStore:
    """Same lifecycle rules as core.store.ResourceStore, kept in a dict."""

    def __init__(self, kind: ResourceKind) -> None:
        self.kind = kind
        self.rows: dict[Any, dict[str, Any]] = {}
        self.calls: list[str] = []
        self._sequence = itertools.count(1)
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _now(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def _new_id(self) -> Any:
        return uuid4() if self.kind.id_type is UUID else next(self._sequence)

    def _values(self, data: Any) -> dict[str, Any]:
        values = data.model_dump() if hasattr(data, "model_dump") else dict(data)
        if self.kind.prepare is not None:
            values = self.kind.prepare(values)
        return {column: values.get(column) for column in self.kind.writable}

    def _entity(self, row: dict[str, Any]) -> Any:
        return self.kind.entity.model_validate(row)

    def _active(self, id: Any) -> dict[str, Any]:
        row = self.rows.get(id)
        if row is None or row["deleted_at"] is not None:
            raise NotFound(f"No active {self.kind.name} with id {id}.")
        return row

    def _check_unique(self, values: dict[str, Any], skip: Any = None) -> None:
        for field in self.kind.unique:
            if values.get(field) is None:
                continue
            for id, row in self.rows.items():
                if id != skip and row.get(field) == values[field]:
                    raise ConflictError(f"A {self.kind.name} with this {field} already exists.")

    async def list(self) -> list[Any]:
        self.calls.append("list")
        return [self._entity(r) for r in self.rows.values() if r["deleted_at"] is None]

    async def get(self, id: Any) -> Any:
        self.calls.append("get")
        return self._entity(self._active(id))

    async def create(self, data: Any) -> Any:
        self.calls.append("create")
        values = self._values(data)
        self._check_unique(values)
        now = self._now()
        row = {"id": self._new_id(), **values, "created_at": now, "updated_at": now, "deleted_at": None}
        self.rows[row["id"]] = row
        return self._entity(row)

    async def update(self, id: Any, data: Any) -> Any:
        self.calls.append("update")
        row = self._active(id)
        values = {k: v for k, v in self._values(data).items() if v is not None}
        self._check_unique(values, skip=id)
        row.update(values, updated_at=self._now())
        return self._entity(row)

    async def soft_delete(self, id: Any) -> Any:
        self.calls.append("soft_delete")
        row = self._active(id)
        now = self._now()
        row.update(deleted_at=now, updated_at=now)
        return self._entity(row)

    async def restore(self, id: Any) -> Any:
        self.calls.append("restore")
        row = self.rows.get(id)
        if row is None or row["deleted_at"] is None:
            raise NotFound(f"No deleted {self.kind.name} with id {id}.")
        row.update(deleted_at=None, updated_at=self._now())
        return self._entity(row)

    async def destroy(self, id: Any) -> bool:
        self.calls.append("destroy")
        if self.rows.pop(id, None) is None:
            raise NotFound(f"No {self.kind.name} with id {id}.")
        return True


class StubGenerator:
    """Records generate() calls and returns a fixed draft (or raises)."""

    def __init__(self, draft: PoemDraft | None = None, error: Exception | None = None) -> None:
        self.draft = draft or PoemDraft(text="old pond / a frog jumps in / splash", is_funny=False)
        self.error = error
        self.calls: list[tuple[str, int, float]] = []

    async def generate(self, prompt_content: str, max_tokens: int, temperature: float) -> PoemDraft:
        self.calls.append((prompt_content, max_tokens, temperature))
        if self.error is not None:
            raise self.error
        return self.draft


@pytest.fixture
def recording_db() -> RecordingDatabase:
    return RecordingDatabase()


@pytest.fixture
def account_store() -> InMemoryStore:
    return InMemoryStore(ACCOUNTS)


@pytest.fixture
def prompt_store() -> InMemoryStore:
    return InMemoryStore(PROMPTS)


@pytest.fixture
def poem_store() -> InMemoryStore:
    return InMemoryStore(POEMS)


@pytest.fixture
def generator() -> StubGenerator:
    return StubGenerator()


@pytest.fixture
def registry(account_store, prompt_store, poem_store, generator):
    return compose_registry(
        accounts=account_store,
        prompts=prompt_store,
        poems=poem_store,
        generator=generator,
    )


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """bcrypt at full cost is slow; tests only need a real, verifiable hash."""
    import bcrypt

    real_gensalt = bcrypt.gensalt
    monkeypatch.setattr(bcrypt, "gensalt", lambda rounds=4, prefix=b"2b": real_gensalt(rounds=4, prefix=prefix))

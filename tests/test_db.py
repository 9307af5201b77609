"""Tests for the pooled Database handle."""

from __future__ import annotations

import asyncio

import asyncpg
import pytest

from core.db import Database, _sanitize_database_url
from core.errors import ConflictError, ResourceExhausted


class FakeConnection:
    def __init__(self, row=None, error: Exception | None = None):
        self.row = row
        self.error = error
        self.queries: list[tuple[str, tuple]] = []

    async def fetchrow(self, sql, *args):
        self.queries.append((sql, args))
        if self.error is not None:
            raise self.error
        return self.row

    async def fetch(self, sql, *args):
        self.queries.append((sql, args))
        return [self.row] if self.row is not None else []


class FakePool:
    def __init__(self, conn: FakeConnection | None = None, exhausted: bool = False):
        self.conn = conn or FakeConnection()
        self.exhausted = exhausted
        self.acquire_timeouts: list[float] = []
        self.released = 0

    async def acquire(self, *, timeout=None):
        self.acquire_timeouts.append(timeout)
        if self.exhausted:
            raise asyncio.TimeoutError()
        return self.conn

    async def release(self, conn):
        self.released += 1


@pytest.mark.asyncio
async def test_fetch_one_returns_dict_and_releases_connection():
    pool = FakePool(FakeConnection(row={"id": 1, "content": "x"}))
    db = Database(pool, acquire_timeout_s=2.5)

    row = await db.fetch_one("SELECT 1 WHERE id = $1", 1)

    assert row == {"id": 1, "content": "x"}
    assert pool.acquire_timeouts == [2.5]
    assert pool.released == 1


@pytest.mark.asyncio
async def test_fetch_one_without_row_returns_none():
    db = Database(FakePool(FakeConnection(row=None)))
    assert await db.fetch_one("SELECT 1") is None


@pytest.mark.asyncio
async def test_saturated_pool_raises_resource_exhausted():
    pool = FakePool(exhausted=True)
    db = Database(pool, acquire_timeout_s=0.1)

    with pytest.raises(ResourceExhausted):
        await db.fetch_all("SELECT 1")
    assert pool.released == 0


@pytest.mark.asyncio
async def test_unique_violation_becomes_conflict():
    conn = FakeConnection(error=asyncpg.exceptions.UniqueViolationError("duplicate key"))
    pool = FakePool(conn)
    db = Database(pool)

    with pytest.raises(ConflictError):
        await db.fetch_one("INSERT INTO accounts (email) VALUES ($1) RETURNING id", "a@b.c")
    assert pool.released == 1


def test_sanitize_database_url_drops_sslmode():
    url = "postgres://u:p@db:5432/app?sslmode=require&application_name=poems"
    assert _sanitize_database_url(url) == "postgres://u:p@db:5432/app?application_name=poems"

"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns one connection pool. FastAPI opens it in the lifespan hook and
closes it on shutdown (see `api/main.py`); stores receive it explicitly.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from .config import Settings
from .errors import ConflictError, ResourceExhausted


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    def __init__(self, pool: asyncpg.Pool, *, acquire_timeout_s: float = 10.0) -> None:
        self._pool = pool
        self._acquire_timeout_s = acquire_timeout_s

    @classmethod
    async def connect(cls, settings: Settings) -> Database:
        pool = await asyncpg.create_pool(
            dsn=_sanitize_database_url(settings.database_url),
            min_size=settings.db_pool_min_size,
            max_size=max(settings.db_pool_min_size, settings.db_pool_max_size),
            command_timeout=settings.db_command_timeout_s,
        )
        return cls(pool, acquire_timeout_s=settings.db_acquire_timeout_s)

    async def close(self) -> None:
        await self._pool.close()

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Borrow a pooled connection, waiting at most `acquire_timeout_s`.
        """
        try:
            conn = await self._pool.acquire(timeout=self._acquire_timeout_s)
        except asyncio.TimeoutError as exc:
            raise ResourceExhausted(
                f"No database connection available within {self._acquire_timeout_s:g}s."
            ) from exc

        try:
            yield conn
        except asyncpg.exceptions.UniqueViolationError as exc:
            raise ConflictError(getattr(exc, "detail", None) or str(exc)) from exc
        finally:
            await self._pool.release(conn)

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        async with self.connection() as conn:
            row = await conn.fetchrow(sql, *args)
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        async with self.connection() as conn:
            rows = await conn.fetch(sql, *args)
        return [_record_to_dict(r) for r in rows]

"""
Postgres access for the form tables (raw SQL over asyncpg).

jsonb columns (`form_submissions.responses`, `financial_insights.data`) hold
submitted documents verbatim:
- writes go through `json_arg()` and a `$n::jsonb` cast in SQL; NaN and
  Infinity are refused because jsonb cannot store them
- reads go through `json_value()`, since asyncpg returns json/jsonb as text
  (this includes `json_agg(...)` results)
- multi-statement writes use `transaction()` so they commit or roll back as one

The pool is created on startup and closed on shutdown (see `api/main.py`).
asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import settings

_pool: asyncpg.Pool | None = None


def database_url() -> str:
    """
    DATABASE_URL with any `sslmode` query parameter removed.
    """
    url = settings.database_url()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")

    parts = urlsplit(url)
    if not parts.query:
        return url
    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(params), parts.fragment))


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return None
    max_size = settings.db_pool_max_size()
    _pool = await asyncpg.create_pool(
        dsn=database_url(),
        min_size=min(settings.db_pool_min_size(), max_size),
        max_size=max_size,
        command_timeout=settings.db_command_timeout_s(),
    )


async def close_pool() -> None:
    global _pool
    if _pool is None:
        return None
    await _pool.close()
    _pool = None


def pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("DB pool is not initialized. Call init_pool() on startup.")
    return _pool


def json_arg(value: Any) -> str | None:
    """
    Serialize a document for a `$n::jsonb` parameter (None stays SQL NULL).

    Raises ValueError for NaN/Infinity, which jsonb rejects.
    """
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False, allow_nan=False)


def json_value(value: Any) -> Any:
    """
    Decode a json/jsonb column. Already-decoded values pass through.
    """
    if isinstance(value, (str, bytes, bytearray)):
        return json.loads(value)
    return value


async def fetch_one(sql: str, *args: Any) -> dict[str, Any] | None:
    row = await pool().fetchrow(sql, *args)
    return dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any) -> list[dict[str, Any]]:
    return [dict(r) for r in await pool().fetch(sql, *args)]


@asynccontextmanager
async def transaction() -> AsyncIterator[asyncpg.Connection]:
    """
    Yield a pooled connection inside an open transaction.

    Statements run on it commit together when the block exits, or roll back
    if it raises. Repositories pass this connection to their per-statement
    helpers instead of going through the pool.
    """
    async with pool().acquire() as conn:  # type: asyncpg.Connection
        async with conn.transaction():
            yield conn

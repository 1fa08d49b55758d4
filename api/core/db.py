"""
Async PostgreSQL access (raw SQL) on top of asyncpg.

The pool is created in the FastAPI lifespan (see `api/main.py`) and closed on
shutdown. Repositories call the helpers below; when several statements must
commit together they open `transaction()` and pass the connection through the
`conn=` keyword.

SQL parameter style: positional placeholders $1, $2, ...
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

_pool: asyncpg.Pool | None = None

Executor = asyncpg.Pool | asyncpg.Connection


def _strip_sslmode(url: str) -> str:
    # asyncpg rejects libpq's sslmode query parameter.
    parts = urlsplit(url)
    if not parts.query:
        return url
    kept = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(kept), parts.fragment))


def database_url() -> str:
    url = os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _strip_sslmode(url)


async def init_pool(dsn: str | None = None) -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        dsn=dsn or database_url(),
        min_size=1,
        max_size=5,
        command_timeout=30,
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


@asynccontextmanager
async def transaction() -> AsyncIterator[asyncpg.Connection]:
    """
    Acquire one pooled connection and run the block inside a transaction.

    The transaction commits when the block exits normally and rolls back when
    it raises.
    """
    async with pool().acquire() as conn:
        async with conn.transaction():
            yield conn


def _executor(conn: asyncpg.Connection | None) -> Executor:
    return conn if conn is not None else pool()


async def fetch_one(sql: str, *args: Any, conn: asyncpg.Connection | None = None) -> dict[str, Any] | None:
    """
    Run a query and return the first row as a dict (or None).
    """
    row = await _executor(conn).fetchrow(sql, *args)
    return dict(row) if row is not None else None


async def fetch_all(sql: str, *args: Any, conn: asyncpg.Connection | None = None) -> list[dict[str, Any]]:
    rows = await _executor(conn).fetch(sql, *args)
    return [dict(r) for r in rows]


async def fetch_value(sql: str, *args: Any, conn: asyncpg.Connection | None = None) -> Any:
    return await _executor(conn).fetchval(sql, *args)


async def execute(sql: str, *args: Any, conn: asyncpg.Connection | None = None) -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL) and return asyncpg's status tag.
    """
    return await _executor(conn).execute(sql, *args)


def conflicting_id(exc: asyncpg.UniqueViolationError) -> int | None:
    """
    Primary-key value named by a uniqueness violation, when it is one.
    """
    # detail looks like: Key (id)=(4) already exists.
    detail = getattr(exc, "detail", None) or ""
    if not detail.startswith("Key (id)=("):
        return None
    raw = detail[len("Key (id)=(") :].split(")", 1)[0]
    return int(raw) if raw.isdigit() else None

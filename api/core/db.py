"""
Async database access helpers (raw SQL) using asyncpg.

The pool is an explicit handle: `create_pool()` returns it and callers keep it
(the app stores it on `app.state` through the user store). Nothing here is a
process-wide singleton.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg

from . import config

logger = logging.getLogger(__name__)


async def create_pool(dsn: str | None = None) -> asyncpg.Pool:
    dsn = dsn or config.database_url()
    if dsn == config.MEMORY_DATABASE_URL:
        raise RuntimeError("DATABASE_URL points at the in-memory store; no pool to create.")
    pool = await asyncpg.create_pool(
        dsn=dsn,
        min_size=config.pool_min_size(),
        max_size=config.pool_max_size(),
        command_timeout=config.command_timeout_s(),
    )
    logger.info(
        "db_pool_ready min_size=%s max_size=%s",
        config.pool_min_size(),
        config.pool_max_size(),
    )
    return pool


async def close_pool(pool: asyncpg.Pool | None) -> None:
    if pool is None:
        return None
    await pool.close()
    logger.info("db_pool_closed")


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(pool: asyncpg.Pool, sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query and return a single row as a dict (or None).
    """
    # Borrow one connection for exactly this statement.
    async with pool.acquire() as conn:
        row = await conn.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None


async def fetch_all(pool: asyncpg.Pool, sql: str, *args: Any) -> list[dict[str, Any]]:
    """
    Run a query and return all rows as a list of dicts.
    """
    async with pool.acquire() as conn:
        rows = await conn.fetch(sql, *args)
    return [_record_to_dict(r) for r in rows]


async def execute(pool: asyncpg.Pool, sql: str, *args: Any) -> str:
    """
    Run a statement (INSERT/UPDATE/DELETE/DDL). Returns asyncpg's status tag, e.g. "DELETE 1".
    """
    async with pool.acquire() as conn:
        return await conn.execute(sql, *args)

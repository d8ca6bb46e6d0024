"""
Async database access helpers (raw SQL) using asyncpg.

This module owns the connection pool. FastAPI initializes it on startup and
closes it on shutdown (see `api/main.py`).

The pool is created with `min_size=0`, so no connection is opened until the
first request needs one. An unreachable database therefore shows up per
request (connection acquisition failure), not as a startup crash.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg

from .config import DatabaseConfig

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None


# Acquisition and query failures are reported differently to clients.
class PoolAcquireError(RuntimeError):
    pass


class QueryError(RuntimeError):
    pass


async def init_pool(config: DatabaseConfig) -> None:
    global _pool
    if _pool is not None:
        return None
    _pool = await asyncpg.create_pool(
        host=config.host,
        port=config.port,
        user=config.user,
        password=config.password,
        database=config.database,
        min_size=0,
        max_size=config.connection_limit,
    )
    logger.info(
        "db_pool_ready host=%s database=%s max_size=%s",
        config.host,
        config.database,
        config.connection_limit,
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


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


async def fetch_one(connection: asyncpg.Connection, sql: str, *args: Any) -> dict[str, Any] | None:
    """
    Run a query on an already-acquired connection and return one row as a dict (or None).
    """
    row = await connection.fetchrow(sql, *args)
    return _record_to_dict(row) if row is not None else None

"""
Lookup persistence (raw SQL).

The id from the URL is always bound as text and cast to the `id` column's own
type, so the lookup can use the index on `id` and `042` matches an integer 42.
The column type is read from the catalog on first use and cached per table.
"""

from __future__ import annotations

from typing import Any

import asyncpg

from core import db

ID_TYPE_SQL = """
    SELECT format_type(atttypid, atttypmod) AS id_type
    FROM pg_attribute
    WHERE attrelid = $1::regclass
      AND attname = 'id'
      AND NOT attisdropped
"""

_id_types: dict[str, str] = {}


def lookup_sql(table: str, id_type: str) -> str:
    return f"SELECT data FROM {table} WHERE id = $1::text::{id_type}"


def _is_bad_id(exc: asyncpg.PostgresError) -> bool:
    # SQLSTATE class 22 (data exception): the id does not cast to the column type.
    return str(getattr(exc, "sqlstate", "") or "").startswith("22")


async def id_column_type(connection: asyncpg.Connection, table: str) -> str:
    cached = _id_types.get(table)
    if cached is not None:
        return cached

    row = await db.fetch_one(connection, ID_TYPE_SQL, table)
    if row is None or not row.get("id_type"):
        raise db.QueryError(f"Table {table} has no id column.")
    _id_types[table] = str(row["id_type"])
    return _id_types[table]


async def fetch_data_by_id(record_id: str, *, table: str) -> dict[str, Any] | None:
    """
    Return `{"data": ...}` for the row keyed by `record_id`, or None.

    An id that cannot be cast to the column type is "not found", not an error.
    Raises `db.PoolAcquireError` when no connection could be checked out and
    `db.QueryError` when the query itself fails. The connection goes back to
    the pool on every path.
    """
    try:
        pool = db.pool()
        connection = await pool.acquire()
    except Exception as exc:
        raise db.PoolAcquireError(str(exc)) from exc

    try:
        id_type = await id_column_type(connection, table)
        return await db.fetch_one(connection, lookup_sql(table, id_type), record_id)
    except db.QueryError:
        raise
    except asyncpg.PostgresError as exc:
        if _is_bad_id(exc):
            return None
        raise db.QueryError(str(exc)) from exc
    except Exception as exc:
        raise db.QueryError(str(exc)) from exc
    finally:
        await pool.release(connection)

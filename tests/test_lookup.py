from __future__ import annotations

from datetime import datetime

import asyncpg
import pytest

from core import db
from public import repository


def test_get_by_id_returns_row_data(client, fake_pool):
    resp = client.get("/public/res/getByID/42")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "OK"
    assert body["apiVersion"] == "1.0.0"
    assert body["message"] == {"id": "42", "data": "hello"}
    assert fake_pool.acquired == fake_pool.released == 1


def test_get_by_id_binds_raw_path_segment(client, fake_pool):
    resp = client.get("/public/res/getByID/1%20OR%201=1")

    assert resp.status_code == 404
    sql, args = fake_pool.connection.queries[-1]
    assert sql == "SELECT data FROM resources WHERE id = $1::text::integer"
    assert args == ("1 OR 1=1",)


def test_get_by_id_passes_structured_data_through(client):
    resp = client.get("/public/res/getByID/7")

    assert resp.status_code == 200
    assert resp.json()["message"] == {"id": "7", "data": {"nested": [1, 2]}}


def test_get_by_id_encodes_non_json_values(client, fake_pool):
    fake_pool.connection.rows["ts"] = datetime(2024, 3, 1, 12, 30)

    resp = client.get("/public/res/getByID/ts")

    assert resp.json()["message"]["data"] == "2024-03-01T12:30:00"


def test_get_by_id_not_found(client, fake_pool):
    resp = client.get("/public/res/getByID/999")

    assert resp.status_code == 404
    body = resp.json()
    assert body["status"] == "Error"
    assert body["message"] == "No data found with given ID"
    assert fake_pool.released == 1


def test_get_by_id_connection_failure(client, fake_pool):
    fake_pool.acquire_error = OSError("connection refused")

    resp = client.get("/public/res/getByID/42")

    assert resp.status_code == 404
    assert resp.json()["message"] == "Error getting connection"
    assert fake_pool.released == 0


def test_get_by_id_query_failure_releases_connection(client, fake_pool):
    fake_pool.connection.query_error = RuntimeError("relation does not exist")

    resp = client.get("/public/res/getByID/42")

    assert resp.status_code == 404
    assert resp.json()["message"] == "Error executing query"
    assert fake_pool.acquired == fake_pool.released == 1


def test_db_error_status_can_be_500(make_client, settings, fake_pool):
    client = make_client(settings, db_error_status=500)
    fake_pool.acquire_error = OSError("connection refused")

    resp = client.get("/public/res/getByID/42")

    assert resp.status_code == 500
    assert resp.json()["message"] == "Error getting connection"


def test_not_found_stays_404_when_db_errors_are_500(make_client, settings):
    client = make_client(settings, db_error_status=500)

    resp = client.get("/public/res/getByID/missing")

    assert resp.status_code == 404


def test_pool_not_initialized_is_a_connection_failure(client, monkeypatch):
    monkeypatch.setattr(db, "_pool", None)

    resp = client.get("/public/res/getByID/42")

    assert resp.status_code == 404
    assert resp.json()["message"] == "Error getting connection"


@pytest.mark.asyncio
async def test_repository_raises_query_error(fake_pool):
    fake_pool.connection.query_error = ValueError("invalid input for query argument $1")

    with pytest.raises(db.QueryError):
        await repository.fetch_data_by_id("42", table="resources")

    assert fake_pool.released == 1


@pytest.mark.asyncio
async def test_repository_uses_configured_table(fake_pool):
    row = await repository.fetch_data_by_id("42", table="archive.items")

    assert row == {"data": "hello"}
    assert fake_pool.connection.queries[-1][0] == "SELECT data FROM archive.items WHERE id = $1::text::integer"


@pytest.mark.asyncio
async def test_repository_casts_parameter_to_column_type(fake_pool):
    fake_pool.connection.id_type = "character varying(32)"

    await repository.fetch_data_by_id("42", table="resources")

    catalog_sql, catalog_args = fake_pool.connection.queries[0]
    assert "pg_attribute" in catalog_sql
    assert catalog_args == ("resources",)
    assert fake_pool.connection.queries[-1][0] == (
        "SELECT data FROM resources WHERE id = $1::text::character varying(32)"
    )


@pytest.mark.asyncio
async def test_repository_reads_column_type_once_per_table(fake_pool):
    await repository.fetch_data_by_id("42", table="resources")
    await repository.fetch_data_by_id("7", table="resources")

    catalog_queries = [q for q in fake_pool.connection.queries if "pg_attribute" in q[0]]
    assert len(catalog_queries) == 1
    assert fake_pool.acquired == fake_pool.released == 2


@pytest.mark.asyncio
async def test_repository_missing_id_column_is_query_error(fake_pool):
    fake_pool.connection.id_type = None

    with pytest.raises(db.QueryError):
        await repository.fetch_data_by_id("42", table="resources")

    assert fake_pool.released == 1


@pytest.mark.asyncio
async def test_repository_uncastable_id_is_not_found(fake_pool):
    fake_pool.connection.query_error = asyncpg.exceptions.InvalidTextRepresentationError(
        'invalid input syntax for type integer: "abc"'
    )

    assert await repository.fetch_data_by_id("abc", table="resources") is None
    assert fake_pool.released == 1


def test_uncastable_id_returns_not_found(client, fake_pool):
    fake_pool.connection.query_error = asyncpg.exceptions.InvalidTextRepresentationError(
        'invalid input syntax for type integer: "abc"'
    )

    resp = client.get("/public/res/getByID/abc")

    assert resp.status_code == 404
    assert resp.json()["message"] == "No data found with given ID"


def test_other_database_errors_are_query_failures(client, fake_pool):
    fake_pool.connection.query_error = asyncpg.exceptions.UndefinedTableError(
        'relation "resources" does not exist'
    )

    resp = client.get("/public/res/getByID/42")

    assert resp.status_code == 404
    assert resp.json()["message"] == "Error executing query"


def test_bytes_data_is_base64_encoded(client, fake_pool):
    fake_pool.connection.rows["blob"] = b"\xff\x00"

    resp = client.get("/public/res/getByID/blob")

    assert resp.status_code == 200
    assert resp.json()["message"] == {"id": "blob", "data": "/wA="}

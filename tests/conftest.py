from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from core import db
from public import repository
from core.config import DatabaseConfig, Settings
from main import create_app


class FakeConnection:
    def __init__(self, rows: dict[str, Any], query_error: Exception | None = None):
        self.rows = rows
        self.query_error = query_error
        self.id_type: str | None = "integer"
        self.queries: list[tuple[str, tuple]] = []

    async def fetchrow(self, sql: str, *args: Any):
        self.queries.append((sql, args))
        if "pg_attribute" in sql:
            return {"id_type": self.id_type} if self.id_type else None
        if self.query_error is not None:
            raise self.query_error
        key = args[0]
        if key not in self.rows:
            return None
        return {"data": self.rows[key]}


class FakePool:
    """
    Stand-in for `asyncpg.Pool`: only `acquire()` / `release()` are used.
    """

    def __init__(self, rows: dict[str, Any] | None = None):
        self.connection = FakeConnection(rows or {})
        self.acquire_error: Exception | None = None
        self.acquired = 0
        self.released = 0

    async def acquire(self):
        if self.acquire_error is not None:
            raise self.acquire_error
        self.acquired += 1
        return self.connection

    async def release(self, connection):
        assert connection is self.connection
        self.released += 1


def write_json(path: Path, payload: Any) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    write_json(
        tmp_path / "sql.json",
        {
            "connectionLimit": 5,
            "host": "db",
            "user": "api",
            "password": "secret",
            "database": "api",
            "table": "resources",
        },
    )
    write_json(tmp_path / "apikeys.json", {"validApiKeys": ["abc123", "Key-2"]})
    write_json(tmp_path / "data.json", {"message": "hello from file"})
    return tmp_path


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    return Settings(
        database=DatabaseConfig(user="api", database="api", table="resources"),
        data_dir=data_dir,
        log_marker_path=data_dir / "nolog",
    )


@pytest.fixture
def fake_pool(monkeypatch) -> FakePool:
    pool = FakePool({"42": "hello", "7": {"nested": [1, 2]}})
    monkeypatch.setattr(db, "_pool", pool)
    monkeypatch.setattr(repository, "_id_types", {})
    return pool


@pytest.fixture
def make_client(fake_pool):
    """
    Build a TestClient for the given settings. The lifespan (real asyncpg pool)
    is not entered; the fake pool is already installed.
    """

    def _make(settings: Settings, **overrides: Any) -> TestClient:
        if overrides:
            settings = replace(settings, **overrides)
        return TestClient(create_app(settings))

    return _make


@pytest.fixture
def client(make_client, settings) -> TestClient:
    return make_client(settings)

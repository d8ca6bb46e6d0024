"""
Process configuration.

Everything here is read exactly once, when the app is created:
- `sql.json` in the data directory -> `DatabaseConfig`
- environment variables -> paths, API version, feature flags

The resulting `Settings` object is frozen and lives on `app.state.settings`.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

DEFAULT_DATA_DIR = "data"
DEFAULT_API_VERSION = "1.0.0"
DEFAULT_PORT = 8080

# Plain or schema-qualified identifier; the table name is interpolated into SQL.
_TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(RuntimeError):
    pass


class DatabaseConfig(BaseModel):
    """
    Shape of `sql.json`. Keys follow the file (camelCase `connectionLimit`).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    connection_limit: int = Field(default=10, alias="connectionLimit", ge=1)
    host: str = "localhost"
    port: int = Field(default=5432, ge=1, le=65535)
    user: str
    password: str = ""
    database: str
    table: str = Field(..., min_length=1)


@dataclass(frozen=True)
class Settings:
    database: DatabaseConfig
    data_dir: Path
    log_marker_path: Path
    api_version: str = DEFAULT_API_VERSION
    request_logging: bool = True
    strict_key_check: bool = True
    time_with_seconds: bool = False
    dev_routes: bool = False
    db_error_status: int = 404

    @property
    def api_keys_path(self) -> Path:
        return self.data_dir / "apikeys.json"

    @property
    def message_path(self) -> Path:
        return self.data_dir / "data.json"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    return default


def data_dir() -> Path:
    return Path(os.environ.get("API_DATA_DIR", DEFAULT_DATA_DIR).strip() or DEFAULT_DATA_DIR)


def listen_port() -> int:
    return _env_int("PORT", DEFAULT_PORT)


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"


def validate_table_name(table: str) -> str:
    name = (table or "").strip()
    if not _TABLE_NAME_RE.match(name):
        raise ConfigError(f"Invalid table name in sql.json: {table!r}")
    return name


def load_database_config(path: Path) -> DatabaseConfig:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read database config {path}: {exc}") from exc

    try:
        config = DatabaseConfig.model_validate_json(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid database config {path}: {exc}") from exc

    validate_table_name(config.table)
    return config


def load_settings() -> Settings:
    base = data_dir()
    marker = os.environ.get("API_LOG_MARKER", "").strip()

    db_error_status = _env_int("API_DB_ERROR_STATUS", 404)
    if db_error_status not in (404, 500):
        raise ConfigError("API_DB_ERROR_STATUS must be 404 or 500.")

    return Settings(
        database=load_database_config(base / "sql.json"),
        data_dir=base,
        log_marker_path=Path(marker) if marker else base / "nolog",
        api_version=os.environ.get("API_VERSION", DEFAULT_API_VERSION).strip() or DEFAULT_API_VERSION,
        request_logging=_env_bool("API_REQUEST_LOGGING", True),
        strict_key_check=_env_bool("API_STRICT_KEY_CHECK", True),
        time_with_seconds=_env_bool("API_TIME_SECONDS", False),
        dev_routes=_env_bool("API_DEV_ROUTES", False),
        db_error_status=db_error_status,
    )

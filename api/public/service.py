"""
Public endpoint logic: greeting, visitor IP, time and lookup by id.

Every function returns `(Envelope, http_status)`; the router only renders.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from core import db, envelope
from core.config import Settings
from core.envelope import STATUS_ERROR, STATUS_OK, Envelope

from . import repository

DEFAULT_MESSAGE = "Default message"

MSG_CONNECTION_FAILED = "Error getting connection"
MSG_QUERY_FAILED = "Error executing query"
MSG_NOT_FOUND = "No data found with given ID"

logger = logging.getLogger(__name__)


def read_greeting(path: Path) -> Any:
    """
    Return `message` from `data.json`, or a fixed default if the file is unusable.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("greeting_read_failed path=%s error=%s", path, exc)
        return DEFAULT_MESSAGE

    if not isinstance(data, dict) or "message" not in data:
        logger.warning("greeting_missing path=%s", path)
        return DEFAULT_MESSAGE
    return data["message"]


def greeting(*, settings: Settings) -> tuple[Envelope, int]:
    message = read_greeting(settings.message_path)
    return envelope.build(STATUS_OK, message, settings=settings), 200


def visitor_ip(ip: str, *, settings: Settings) -> tuple[Envelope, int]:
    message = read_greeting(settings.message_path)
    return envelope.build(STATUS_OK, message, settings=settings, visitorIP=ip), 200


def current_time(*, settings: Settings) -> tuple[Envelope, int]:
    return envelope.build(STATUS_OK, settings=settings), 200


async def get_by_id(record_id: str, *, settings: Settings) -> tuple[Envelope, int]:
    table = settings.database.table
    try:
        row = await repository.fetch_data_by_id(record_id, table=table)
    except db.PoolAcquireError as exc:
        logger.error("lookup_connection_failed id=%s error=%s", record_id, exc)
        return envelope.build(STATUS_ERROR, MSG_CONNECTION_FAILED, settings=settings), settings.db_error_status
    except db.QueryError as exc:
        logger.error("lookup_query_failed id=%s table=%s error=%s", record_id, table, exc)
        return envelope.build(STATUS_ERROR, MSG_QUERY_FAILED, settings=settings), settings.db_error_status

    if row is None:
        return envelope.build(STATUS_ERROR, MSG_NOT_FOUND, settings=settings), 404

    message = {"id": record_id, "data": row.get("data")}
    return envelope.build(STATUS_OK, message, settings=settings), 200

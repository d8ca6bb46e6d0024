"""
Logging setup and the per-request access log.

Request lines go to the `access` logger:

    request visitor_ip=203.0.113.7 time=2024-05-01 09:03 path=/public/time

Dropping an (empty) marker file at `Settings.log_marker_path` silences them.
The marker is checked on every request, so the switch needs no restart.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

from fastapi import Request

from .clock import format_time

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("access")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    # No-op for handlers if the root logger is already configured (e.g. under pytest).
    logging.basicConfig(stream=sys.stdout, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.strip():
        return forwarded.split(",", 1)[0].strip()
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


def logging_disabled(marker_path: Path) -> bool:
    # Fail open: if we cannot tell whether the marker exists, keep logging.
    try:
        return marker_path.exists()
    except OSError as exc:
        logger.debug("log_marker_check_failed path=%s error=%s", marker_path, exc)
        return False


def log_request(
    request: Request,
    *,
    marker_path: Path,
    with_seconds: bool = False,
    moment: datetime | None = None,
) -> bool:
    """
    Emit one access line for `request`. Returns False when the marker suppressed it.
    """
    if logging_disabled(marker_path):
        return False

    access_logger.info(
        "request visitor_ip=%s time=%s path=%s",
        client_ip(request),
        format_time(moment, with_seconds=with_seconds),
        request.url.path,
    )
    return True

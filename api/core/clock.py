"""
Human-readable timestamps used in every response envelope and request log line.
"""

from __future__ import annotations

from datetime import datetime


def format_time(moment: datetime | None = None, *, with_seconds: bool = False) -> str:
    """
    `YYYY-MM-DD HH:MM` (or `YYYY-MM-DD HH:MM:SS`) in local wall-clock time.
    """
    moment = moment or datetime.now()
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d} "
        f"{moment.hour:02d}:{moment.minute:02d}"
    )
    if with_seconds:
        text += f":{moment.second:02d}"
    return text

"""
Uniform response envelope.

Every response body, success or failure, has this shape:

    {"status": ..., "currentTime": ..., "apiVersion": ..., "message": ...}

`message` is omitted when the caller does not pass one (e.g. `/public/time`).
"""

from __future__ import annotations

import base64
from datetime import datetime
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .clock import format_time
from .config import Settings

STATUS_OK = "OK"
STATUS_ERROR = "Error"
STATUS_KEY_REQUIRED = "Api Tokens Are Required"

POWERED_BY = "NyaC API Supprot"

_OMITTED: Any = object()


class Envelope(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    status: str
    current_time: str = Field(..., alias="currentTime")
    api_version: str = Field(..., alias="apiVersion")
    message: Any = None


def build(
    status: str,
    message: Any = _OMITTED,
    *,
    settings: Settings,
    moment: datetime | None = None,
    **extra: Any,
) -> Envelope:
    fields: dict[str, Any] = {
        "status": status,
        "currentTime": format_time(moment, with_seconds=settings.time_with_seconds),
        "apiVersion": settings.api_version,
    }
    if message is not _OMITTED:
        fields["message"] = message
    fields.update(extra)
    return Envelope(**fields)


def _encode_bytes(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def respond(envelope: Envelope, status_code: int = 200) -> JSONResponse:
    body = envelope.model_dump(by_alias=True, exclude_unset=True)
    # `bytea` values may not be valid UTF-8; send them as base64.
    content = jsonable_encoder(body, custom_encoder={bytes: _encode_bytes})
    return JSONResponse(status_code=status_code, content=content)

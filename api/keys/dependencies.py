"""
Dependencies for the key-check endpoint.
"""

from __future__ import annotations

import json
import logging

from fastapi import Request

from . import schemas
from .store import ApiKeyStore

logger = logging.getLogger(__name__)


def get_key_store(request: Request) -> ApiKeyStore:
    return request.app.state.key_store


async def parse_key_request(request: Request) -> schemas.KeyCheckRequest | None:
    """
    Lenient JSON body parsing: an empty, non-JSON or non-object body is "no body".
    """
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        logger.info("key_request_unparseable path=%s", request.url.path)
        return None
    if not isinstance(data, dict):
        return None
    return schemas.KeyCheckRequest.model_validate(data)

"""
API key validation.
"""

from __future__ import annotations

from core import envelope
from core.config import Settings
from core.envelope import STATUS_ERROR, STATUS_KEY_REQUIRED, STATUS_OK, Envelope

from . import schemas
from .store import ApiKeyStore

MSG_MISSING_KEY = "Missing API Key."
MSG_KEY_PASSED = "API Key Passed."
MSG_KEY_REJECTED = "API Key is not correct."


def check_key(
    payload: schemas.KeyCheckRequest | None,
    *,
    settings: Settings,
    store: ApiKeyStore,
) -> tuple[Envelope, int]:
    apikey = payload.apikey if payload is not None else None

    if settings.strict_key_check and (apikey is None or apikey == ""):
        return envelope.build(STATUS_KEY_REQUIRED, MSG_MISSING_KEY, settings=settings), 400

    if store.contains(apikey):
        return envelope.build(STATUS_OK, MSG_KEY_PASSED, settings=settings), 200
    return envelope.build(STATUS_ERROR, MSG_KEY_REJECTED, settings=settings), 401

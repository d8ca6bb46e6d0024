"""
Private API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core import envelope
from core.config import Settings
from core.dependencies import get_settings

from . import dependencies, schemas, service
from .store import ApiKeyStore

router = APIRouter()


@router.post("/private/testkey")
def test_key(
    payload: schemas.KeyCheckRequest | None = Depends(dependencies.parse_key_request),
    settings: Settings = Depends(get_settings),
    store: ApiKeyStore = Depends(dependencies.get_key_store),
) -> JSONResponse:
    body, status_code = service.check_key(payload, settings=settings, store=store)
    return envelope.respond(body, status_code)

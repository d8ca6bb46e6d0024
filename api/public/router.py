"""
Public (read-only) API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from core import envelope
from core.config import Settings
from core.dependencies import get_settings
from core.logs import client_ip

from . import service

router = APIRouter()

# Un-prefixed aliases served by the dev build (`API_DEV_ROUTES`).
dev_router = APIRouter()


@router.get("/")
def root(settings: Settings = Depends(get_settings)) -> JSONResponse:
    body, status_code = service.greeting(settings=settings)
    return envelope.respond(body, status_code)


@router.get("/public/getIP")
def get_ip(request: Request, settings: Settings = Depends(get_settings)) -> JSONResponse:
    body, status_code = service.visitor_ip(client_ip(request), settings=settings)
    return envelope.respond(body, status_code)


@router.get("/public/time")
def get_time(settings: Settings = Depends(get_settings)) -> JSONResponse:
    body, status_code = service.current_time(settings=settings)
    return envelope.respond(body, status_code)


@router.get("/public/res/getByID/{record_id}")
async def get_by_id(
    record_id: str,
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """
    Return the `data` column of the row whose id equals the raw path segment.
    """
    body, status_code = await service.get_by_id(record_id, settings=settings)
    return envelope.respond(body, status_code)


dev_router.add_api_route("/time", get_time, methods=["GET"])
dev_router.add_api_route("/res/getByID/{record_id}", get_by_id, methods=["GET"])

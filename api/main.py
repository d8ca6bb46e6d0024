from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from core import config, db, envelope
from core.config import Settings
from core.envelope import POWERED_BY, STATUS_ERROR
from core.logs import configure_logging, log_request
from keys import router as keys_router
from keys.store import ApiKeyStore
from public import router as public_router

MSG_NOT_FOUND = "API endpoint not found"
MSG_INTERNAL_ERROR = "Internal server error"

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the app. Settings are loaded from disk/env once, unless given.
    """
    configure_logging(config.log_level())
    settings = settings or config.load_settings()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        # Initialize the DB pool once per process.
        await db.init_pool(settings.database)
        try:
            yield
        finally:
            await db.close_pool()

    # Only the fixed route set is served; docs endpoints would bypass the catch-all.
    app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings
    app.state.key_store = ApiKeyStore(settings.api_keys_path)

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        if settings.request_logging:
            # The marker check stats a file; keep it off the event loop.
            await run_in_threadpool(
                log_request,
                request,
                marker_path=settings.log_marker_path,
                with_seconds=settings.time_with_seconds,
            )
        return await call_next(request)

    # Registered last, so it wraps everything else.
    @app.middleware("http")
    async def powered_by(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Powered-By"] = POWERED_BY
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Unknown path and known path with the wrong method look the same to callers.
        if exc.status_code in (404, 405):
            body = envelope.build(STATUS_ERROR, MSG_NOT_FOUND, settings=settings)
            return envelope.respond(body, 404)
        body = envelope.build(STATUS_ERROR, str(exc.detail), settings=settings)
        return envelope.respond(body, exc.status_code)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        # Runs outside the middleware stack, so the header is set here too.
        logger.exception("unhandled_error path=%s", request.url.path)
        body = envelope.build(STATUS_ERROR, MSG_INTERNAL_ERROR, settings=settings)
        response = envelope.respond(body, 500)
        response.headers["X-Powered-By"] = POWERED_BY
        return response

    app.include_router(public_router.router, tags=["public"])
    if settings.dev_routes:
        app.include_router(public_router.dev_router, tags=["dev"])
    app.include_router(keys_router.router, tags=["keys"])

    return app


def run() -> None:
    configure_logging(config.log_level())
    port = config.listen_port()
    logger.info("Server is listening on port %s", port)
    # Request lines come from the `access` logger only.
    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=port, access_log=False)


if __name__ == "__main__":
    run()

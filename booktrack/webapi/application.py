"""FastAPI application factory for the BookTrack backend."""

from __future__ import annotations

import re
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .. import logging_manager as log_mgr
from ..database import create_schema, dispose_engine
from ..settings import get_settings
from .errors import register_exception_handlers
from .routers import (
    auth_router,
    bookmarks_router,
    books_router,
    borrowings_router,
    dashboard_router,
    logs_router,
    notifications_router,
    reservations_router,
    users_router,
)

LOGGER = log_mgr.get_logger().getChild("webapi")

_CORRELATION_HEADERS = ("x-request-id", "x-correlation-id")


def _parse_cors_origins(raw_value: str | None) -> tuple[list[str], bool]:
    """Return the allowed origins and whether credentials are supported."""

    if raw_value is None:
        return [], False

    tokens = [token.strip() for token in re.split(r"[\s,]+", raw_value) if token.strip()]
    if not tokens:
        return [], False
    if "*" in tokens:
        return ["*"], False
    return tokens, True


def _configure_cors(app: FastAPI) -> None:
    allowed_origins, allow_credentials = _parse_cors_origins(get_settings().cors_origins)
    if not allowed_origins:
        LOGGER.info("CORS middleware disabled; no allowed origins configured.")
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _resolve_correlation_id(request: Request) -> str:
    for header in _CORRELATION_HEADERS:
        value = (request.headers.get(header) or "").strip()
        if value:
            return value
    return uuid4().hex


@asynccontextmanager
async def _lifespan(_app: FastAPI) -> AsyncIterator[None]:
    create_schema()
    try:
        yield
    finally:
        dispose_engine()


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    app = FastAPI(title="BookTrack API", version="1.0.0", lifespan=_lifespan)

    register_exception_handlers(app)

    @app.middleware("http")
    async def _bind_request_context(request: Request, call_next):
        correlation_id = _resolve_correlation_id(request)
        started = time.perf_counter()
        with log_mgr.log_context(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
        ):
            try:
                response = await call_next(request)
            except Exception:
                LOGGER.exception(
                    "Unhandled error while processing request",
                    extra={"event": "http.request.failed", "status": 500},
                )
                raise
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            LOGGER.info(
                "Request completed",
                extra={
                    "event": "http.request.completed",
                    "status": response.status_code,
                    "duration_ms": duration_ms,
                },
            )
        response.headers["X-Request-ID"] = correlation_id
        return response

    _configure_cors(app)

    @app.get("/_health", tags=["health"])
    def healthcheck() -> dict[str, str]:
        """Simple healthcheck endpoint for smoke-testing the server."""

        return {"status": "ok"}

    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(books_router, prefix="/api/books", tags=["books"])
    app.include_router(borrowings_router, prefix="/api/borrowings", tags=["borrowings"])
    app.include_router(reservations_router, prefix="/api/reservations", tags=["reservations"])
    app.include_router(bookmarks_router, prefix="/api/bookmarks", tags=["bookmarks"])
    app.include_router(notifications_router, prefix="/api/notifications", tags=["notifications"])
    app.include_router(dashboard_router, prefix="/api/dashboard", tags=["dashboard"])
    app.include_router(logs_router, prefix="/api/logs", tags=["logs"])
    app.include_router(users_router, prefix="/api/users", tags=["users"])

    return app

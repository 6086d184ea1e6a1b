"""Exception handlers that render every failure as a ``{success, message}`` envelope."""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import logging_manager as log_mgr
from ..errors import BookTrackError
from ..settings import get_settings

logger = log_mgr.get_logger().getChild("webapi.errors")

_STATUS_MESSAGES = {
    status.HTTP_404_NOT_FOUND: "Not found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method not allowed",
}


def error_envelope(status_code: int, message: str) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "message": message}
    return JSONResponse(status_code=status_code, content=content)


def _describe_validation_error(errors: Any) -> str:
    for error in errors or ():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query"))
        message = error.get("msg") or "Invalid value"
        return f"{location}: {message}" if location else message
    return "Invalid request"


async def _handle_booktrack_error(request: Request, exc: BookTrackError) -> JSONResponse:
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(
        level,
        exc.message,
        extra={
            "event": "http.error",
            "status": exc.status_code,
            "method": request.method,
            "path": request.url.path,
            "error_type": type(exc).__name__,
        },
    )
    return error_envelope(exc.status_code, exc.message)


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, str) and exc.detail:
        message = exc.detail
    else:
        message = _STATUS_MESSAGES.get(exc.status_code, "Request failed")
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        message = _STATUS_MESSAGES[exc.status_code]
    logger.info(
        message,
        extra={
            "event": "http.error",
            "status": exc.status_code,
            "method": request.method,
            "path": request.url.path,
        },
    )
    return error_envelope(exc.status_code, message)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _describe_validation_error(exc.errors())
    logger.info(
        "Rejected malformed request",
        extra={
            "event": "http.validation_error",
            "status": status.HTTP_400_BAD_REQUEST,
            "method": request.method,
            "path": request.url.path,
            "detail": message,
        },
    )
    return error_envelope(status.HTTP_400_BAD_REQUEST, message)


async def _handle_pydantic_validation(request: Request, exc: PydanticValidationError) -> JSONResponse:
    message = _describe_validation_error(exc.errors())
    logger.info(
        "Rejected invalid payload",
        extra={
            "event": "http.validation_error",
            "status": status.HTTP_400_BAD_REQUEST,
            "method": request.method,
            "path": request.url.path,
            "detail": message,
        },
    )
    return error_envelope(status.HTTP_400_BAD_REQUEST, message)


async def _handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Database error while handling request",
        exc_info=exc,
        extra={
            "event": "http.database_error",
            "status": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "method": request.method,
            "path": request.url.path,
        },
    )
    if get_settings().is_production:
        message = "Database error"
    else:
        message = f"Database error: {exc}"
    return error_envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-producing handlers on ``app``."""

    app.add_exception_handler(BookTrackError, _handle_booktrack_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_exception)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(PydanticValidationError, _handle_pydantic_validation)
    app.add_exception_handler(SQLAlchemyError, _handle_database_error)


__all__ = ["error_envelope", "register_exception_handlers"]

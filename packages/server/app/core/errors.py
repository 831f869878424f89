"""
Typed API errors and the handlers that render them as error envelopes.

Every failure leaves the API as:

    {"statusCode": <int>, "message": <str>, "success": false, "errors": [...]}
"""

from __future__ import annotations

import functools
from typing import Any, Optional

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tubehub_shared.schemas.common import ApiErrorResponse

log = structlog.get_logger()


class ApiError(HTTPException):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(
        self,
        message: str = "Something went wrong",
        errors: Optional[list[Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(status_code=status_code or self.status_code, detail=message)
        self.message = message
        self.errors = errors or []


class InvalidInput(ApiError):
    status_code = 400


class Unauthorized(ApiError):
    status_code = 401


class NotFound(ApiError):
    status_code = 404


class InternalError(ApiError):
    status_code = 500


def translate_store_errors(fallback_message: str):
    """Re-raise database failures inside a service call as ``InternalError``.

    The original driver message is kept when there is one. ``ApiError``s
    raised by the wrapped function pass through unchanged.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as exc:
                log.error("store.error", operation=func.__name__, error=str(exc))
                raise InternalError(str(exc) or fallback_message) from exc

        return wrapper

    return decorator


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

def _envelope(status_code: int, message: str, errors: Optional[list[Any]] = None) -> JSONResponse:
    body = ApiErrorResponse(status_code=status_code, message=message, errors=errors or [])
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(by_alias=True)),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc, ApiError):
        return _envelope(exc.status_code, exc.message, exc.errors)
    return _envelope(exc.status_code, str(exc.detail))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return _envelope(400, "Invalid request parameters.", errors)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("request.unhandled_error", path=request.url.path)
    return _envelope(500, "Something went wrong")


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error-envelope handlers on an application."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

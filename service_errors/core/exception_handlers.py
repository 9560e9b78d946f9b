"""Global exception handlers rendering application errors over HTTP.

Design:
- BaseError (any kind) → ``to_response()`` with ``error.status`` as HTTP status
- RequestValidationError → ValidationError with one detail per issue
- Unexpected Exception → classified by ``to_app_error`` (upstream shapes
  are mapped, anything else becomes a non-exposed InternalError)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from service_errors.adapters import to_app_error
from service_errors.adapters.pydantic_validation import REQUEST_LOCATIONS, from_pydantic_error
from service_errors.core.errors import BaseError
from service_errors.core.logging import log_error

logger = logging.getLogger(__name__)


def _encode(value: Any) -> Any:
    """JSON-encode a payload value, stringifying anything the encoder rejects.

    Development-mode contexts hold raw upstream objects (slotted SDK errors,
    clients) that have no JSON form.
    """

    if isinstance(value, Mapping):
        return {str(key): _encode(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    try:
        return jsonable_encoder(value)
    except (TypeError, ValueError):
        return str(value)


def render_error(error: BaseError) -> JSONResponse:
    """Build the JSON response for an application error.

    The payload is ``to_response()`` as-is; details keep whatever shape the
    caller gave them.
    """

    return JSONResponse(status_code=error.status, content=_encode(error.to_response()))


async def app_error_handler(request: Request, exc: BaseError) -> JSONResponse:
    """Handle application errors of every kind.

    Args:
        request: FastAPI request object.
        exc: BaseError instance (or subclass).

    Returns:
        JSONResponse carrying the client-safe rendering of ``exc``.
    """
    log_error(
        logger,
        exc,
        "app_error_handled",
        request_path=request.url.path,
        request_method=request.method,
    )
    return render_error(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI request validation errors into a ValidationError."""

    error = from_pydantic_error(exc, "Request validation failed", drop_prefixes=REQUEST_LOCATIONS)
    return await app_error_handler(request, error)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Recognised upstream errors keep their classification; anything else is
    rendered as a generic 500 without leaking the original message.
    """
    error = to_app_error(exc)
    log_error(
        logger,
        error,
        "unhandled_exception",
        error_type=type(exc).__name__,
        request_path=request.url.path,
        request_method=request.method,
    )
    return render_error(error)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with a FastAPI app.

    Example:
        >>> from fastapi import FastAPI
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(BaseError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)

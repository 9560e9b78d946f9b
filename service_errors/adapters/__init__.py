"""External-error classifiers.

Each upstream system gets a predicate (``is_*``) that only inspects shape and
a mapper (``from_*``) that builds the matching application error.
``to_app_error`` chains them for call sites that catch arbitrary exceptions.
"""

from __future__ import annotations

from typing import Any

from service_errors.adapters.cognito import from_cognito_error, is_cognito_error
from service_errors.adapters.pydantic_validation import from_pydantic_error, is_pydantic_error
from service_errors.adapters.zod import from_zod_error, is_zod_error
from service_errors.core.errors import BaseError, InternalError

VALIDATION_FAILED_MESSAGE = "Validation failed"


def to_app_error(exc: Any) -> BaseError:
    """Coerce any caught value into an application error.

    Application errors pass through unchanged; Zod and identity-provider
    shapes are mapped; anything else becomes an InternalError chained to
    ``exc``. A bare pydantic error is a server-side parsing fault here, so it
    is hidden too; request validation goes through ``from_pydantic_error``
    explicitly.
    """

    if isinstance(exc, BaseError):
        return exc
    if is_zod_error(exc):
        return from_zod_error(exc, VALIDATION_FAILED_MESSAGE)
    if is_cognito_error(exc):
        return from_cognito_error(exc)
    cause = exc if isinstance(exc, BaseException) else None
    return InternalError(cause=cause, log_context={"errorType": type(exc).__name__})


__all__ = [
    "from_cognito_error",
    "from_pydantic_error",
    "from_zod_error",
    "is_cognito_error",
    "is_pydantic_error",
    "is_zod_error",
    "to_app_error",
]

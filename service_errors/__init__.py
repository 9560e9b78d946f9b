"""Typed application errors with HTTP semantics and upstream-error classifiers."""

from service_errors.adapters import (
    from_cognito_error,
    from_pydantic_error,
    from_zod_error,
    is_cognito_error,
    is_pydantic_error,
    is_zod_error,
    to_app_error,
)
from service_errors.core.config import ErrorConfig
from service_errors.core.errors import (
    BadRequestError,
    BaseError,
    ConflictError,
    CustomError,
    ErrorDetail,
    ErrorKind,
    ErrorOptions,
    ErrorResponse,
    ForbiddenError,
    InternalError,
    NotFoundError,
    RateLimitError,
    ServiceError,
    UnauthorizedError,
    ValidationError,
    status_phrase,
)

__all__ = [
    "BadRequestError",
    "BaseError",
    "ConflictError",
    "CustomError",
    "ErrorConfig",
    "ErrorDetail",
    "ErrorKind",
    "ErrorOptions",
    "ErrorResponse",
    "ForbiddenError",
    "InternalError",
    "NotFoundError",
    "RateLimitError",
    "ServiceError",
    "UnauthorizedError",
    "ValidationError",
    "from_cognito_error",
    "from_pydantic_error",
    "from_zod_error",
    "is_cognito_error",
    "is_pydantic_error",
    "is_zod_error",
    "status_phrase",
    "to_app_error",
]

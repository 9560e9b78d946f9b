"""Classifier for identity-provider (Cognito) errors.

Two upstream shapes are recognised:

- SDK v3 style: ``{"name", "message", "code"?, "$metadata": {"httpStatusCode"}}``
- botocore ``ClientError`` style: an object whose ``response`` mapping holds
  ``Error.Code``/``Error.Message`` and ``ResponseMetadata.HTTPStatusCode``

Mapping is a priority-ordered cascade: known error codes first, then the
HTTP status, then a generic internal error that does not repeat the upstream
message.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from service_errors.adapters.base import get_field
from service_errors.core.errors import (
    BadRequestError,
    BaseError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    RateLimitError,
    UnauthorizedError,
    ValidationError,
)

LOG_CONTEXT_KEY = "cognitoError"
FALLBACK_MESSAGE = "An error occurred with the authentication service"


@dataclass(frozen=True)
class CodeRule:
    """Maps a group of upstream error codes onto one error kind.

    Attributes:
        codes: Upstream ``code`` values handled by this rule.
        error_cls: Kind produced on a match.
        default_message: Used when the upstream message is empty.
        input_detail: Attach a synthetic ``input`` detail carrying the message.
    """

    codes: frozenset[str]
    error_cls: type[BaseError]
    default_message: str
    input_detail: bool = False


# Evaluated in order; first match wins.
CODE_RULES: tuple[CodeRule, ...] = (
    CodeRule(frozenset({"NotAuthorizedException"}), UnauthorizedError, "Invalid credentials or user not authorized"),
    CodeRule(frozenset({"UserNotConfirmedException"}), UnauthorizedError, "User account is not confirmed"),
    CodeRule(frozenset({"PasswordResetRequiredException"}), UnauthorizedError, "Password reset is required"),
    CodeRule(frozenset({"UserNotFoundException", "ResourceNotFoundException"}), NotFoundError, "Resource not found"),
    CodeRule(frozenset({"AccessDeniedException"}), ForbiddenError, "Access denied"),
    CodeRule(
        frozenset({"UsernameExistsException", "AliasExistsException", "GroupExistsException"}),
        ConflictError,
        "Resource already exists",
    ),
    CodeRule(
        frozenset(
            {
                "InvalidParameterException",
                "InvalidPasswordException",
                "CodeMismatchException",
                "ExpiredCodeException",
                "CodeDeliveryFailureException",
            }
        ),
        ValidationError,
        "Validation error",
        input_detail=True,
    ),
    CodeRule(frozenset({"LimitExceededException", "TooManyRequestsException"}), RateLimitError, "Too many requests"),
)

STATUS_RULES: dict[int, tuple[type[BaseError], str]] = {
    400: (BadRequestError, "Bad request"),
    401: (UnauthorizedError, "Unauthorized"),
    403: (ForbiddenError, "Forbidden"),
    404: (NotFoundError, "Not found"),
    409: (ConflictError, "Conflict"),
    429: (RateLimitError, "Too many requests"),
}


@dataclass(frozen=True)
class CognitoFault:
    """Normalized view of an upstream identity-provider error."""

    name: Any
    message: Any
    code: Any
    http_status: Any


def _is_status(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    # JSON decoders may hand back 404.0
    return isinstance(value, float) and value.is_integer()


def _read_fault(value: Any) -> CognitoFault:
    response = get_field(value, "response")
    if isinstance(response, Mapping) and isinstance(response.get("Error"), Mapping):
        error = response["Error"]
        metadata = response.get("ResponseMetadata")
        code = error.get("Code")
        return CognitoFault(
            name=get_field(value, "name", code),
            message=error.get("Message"),
            code=code,
            http_status=get_field(metadata, "HTTPStatusCode"),
        )

    return CognitoFault(
        name=get_field(value, "name"),
        message=get_field(value, "message"),
        code=get_field(value, "code"),
        http_status=get_field(get_field(value, "$metadata"), "httpStatusCode"),
    )


def is_cognito_error(value: Any) -> bool:
    """Check whether ``value`` looks like an identity-provider error.

    Requires string ``name`` and ``message`` plus either a numeric HTTP
    status in the metadata or a string ``code``. Never raises.
    """

    if value is None or isinstance(value, (str, bytes, int, float, bool)):
        return False
    fault = _read_fault(value)
    if not isinstance(fault.name, str) or not isinstance(fault.message, str):
        return False
    return _is_status(fault.http_status) or isinstance(fault.code, str)


def from_cognito_error(error: Any) -> BaseError:
    """Map an identity-provider error onto the application error kinds.

    The original value is kept under ``log_context["cognitoError"]`` on every
    branch. Unrecognised input degrades to an InternalError.

    Args:
        error: Value accepted by ``is_cognito_error``.

    Returns:
        Error instance of the matching kind.
    """

    fault = _read_fault(error)
    code = fault.code if isinstance(fault.code, str) else None
    message = fault.message if isinstance(fault.message, str) and fault.message else None
    log_context = {LOG_CONTEXT_KEY: error}

    for rule in CODE_RULES:
        if code in rule.codes:
            resolved = message or rule.default_message
            details = [{"path": "input", "message": message or "Invalid input"}] if rule.input_detail else None
            return rule.error_cls(resolved, details=details, log_context=log_context)

    if _is_status(fault.http_status):
        status = int(fault.http_status)
        if status in STATUS_RULES:
            error_cls, default_message = STATUS_RULES[status]
            return error_cls(message or default_message, log_context=log_context)
        if 400 <= status < 500:
            return BadRequestError(message or "Client error", log_context=log_context)
        if 500 <= status < 600:
            return InternalError(message or "Server error", log_context=log_context)

    return InternalError(FALLBACK_MESSAGE, log_context=log_context)

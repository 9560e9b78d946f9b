"""Application-level exception types.

Every error carries HTTP-semantic classification (status, exposure policy and
a kind tag) and renders two views of itself:

- ``to_response()``: the client-facing payload, filtered by exposure
- ``to_json()``: the internal record handed to the logging layer

Kinds are a closed set. Each subclass fixes its tag, default status and, for
server faults, pins ``expose`` to False.
"""

from __future__ import annotations

import traceback
import uuid
from collections.abc import Mapping, Sequence
from enum import Enum
from http import HTTPStatus
from typing import Any, Callable, ClassVar, NotRequired, Self, TypedDict

from service_errors.core.config import ErrorConfig

DEFAULT_STATUS = 500
UNKNOWN_ERROR_MESSAGE = "Unknown Error"
HIDDEN_ERROR_MESSAGE = "Internal Server Error"


class ErrorKind(str, Enum):
    """Classification tag rendered as ``type`` in both views."""

    BASE = "base"
    NOT_FOUND = "notfound"
    BAD_REQUEST = "badrequest"
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    RATE_LIMIT = "ratelimit"
    SERVICE = "service"
    INTERNAL = "internal"
    CUSTOM = "custom"


class ErrorDetail(TypedDict):
    """One structured field-level complaint.

    ``path`` is a dot-joined string or a list of segments; an empty string
    targets the whole payload. Upstream-specific keys may be added freely.
    """

    path: str | list[str]
    message: str
    code: NotRequired[str]


class ErrorResponse(TypedDict):
    """Client-facing rendering of an error."""

    status: int
    type: str
    message: str
    errorId: NotRequired[str]
    details: NotRequired[list[ErrorDetail]]
    stack: NotRequired[str]
    context: NotRequired[dict[str, Any]]


class ErrorOptions(TypedDict, total=False):
    """Keyword configuration accepted by ``BaseError.from_options``."""

    message: str
    status: int
    cause: BaseException
    details: Sequence[ErrorDetail]
    log_context: Mapping[str, Any]
    expose: bool


def status_phrase(status: int) -> str | None:
    """Return the standard reason phrase for ``status``, if it has one."""

    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return None


def _uuid4() -> str:
    return str(uuid.uuid4())


def _copy_details(details: Sequence[Mapping[str, Any]] | None) -> list[ErrorDetail]:
    if not details:
        return []
    return [dict(item) if isinstance(item, Mapping) else item for item in details]  # type: ignore[misc]


class BaseError(Exception):
    """Base error for application/domain failures.

    Accepts a bare message or keyword options. Missing fields are defaulted
    and nothing is validated, so construction never raises.

    Attributes:
        message: Human-readable message; defaults to the status phrase.
        status: HTTP status code; defaults to 500.
        error_id: Unique identifier generated once per instance.
        cause: Originating error, never serialized to clients.
        details: Ordered list of ErrorDetail entries.
        log_context: Operational diagnostics, only shown in development mode.
        expose: Whether message and details may be shown to clients.
        type: Kind tag derived from the class, not settable by callers.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.BASE
    default_status: ClassVar[int | None] = None
    pinned_expose: ClassVar[bool | None] = None
    generate_id: ClassVar[Callable[[], str]] = staticmethod(_uuid4)
    _option_keys: ClassVar[frozenset[str]] = frozenset(ErrorOptions.__optional_keys__)

    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: str | None = None,
        *,
        status: int | None = None,
        cause: BaseException | None = None,
        details: Sequence[ErrorDetail] | None = None,
        log_context: Mapping[str, Any] | None = None,
        expose: bool | None = None,
    ) -> None:
        status = self._resolve_status(status)
        message = message or status_phrase(status) or UNKNOWN_ERROR_MESSAGE
        super().__init__(message)

        self.message = message
        self.status = status
        self.error_id = self.generate_id()
        self.cause = cause
        if isinstance(cause, BaseException):
            self.__cause__ = cause
        self.details = _copy_details(details)
        self.log_context: dict[str, Any] = dict(log_context or {})
        self.expose = self._resolve_expose(expose, status)
        self.type = self.kind.value

    @classmethod
    def from_options(cls, options: ErrorOptions | str | None = None) -> Self:
        """Build an error from a message string or an options mapping.

        Unknown keys are ignored.
        """

        if isinstance(options, str):
            return cls(options)
        kwargs = {key: value for key, value in (options or {}).items() if key in cls._option_keys}
        return cls(**kwargs)

    @classmethod
    def _resolve_status(cls, status: int | None) -> int:
        if cls.default_status is not None:
            return cls.default_status
        return status or DEFAULT_STATUS

    @classmethod
    def _resolve_expose(cls, expose: bool | None, status: int) -> bool:
        if cls.pinned_expose is not None:
            return cls.pinned_expose
        if expose is not None:
            return expose
        return status < 500

    @property
    def stack(self) -> str:
        """Formatted traceback, or just the header if never raised."""

        return "".join(traceback.format_exception(type(self), self, self.__traceback__))

    def to_response(self, *, development: bool | None = None) -> ErrorResponse:
        """Render the client-safe payload.

        Args:
            development: Override for the process-wide development flag.

        Returns:
            ErrorResponse with ``errorId`` for server faults, ``details`` only
            when exposed, and ``stack``/``context`` only in development mode.
        """

        if development is None:
            development = ErrorConfig.is_development()

        response: ErrorResponse = {
            "status": self.status,
            "type": self.type,
            "message": self.message
            if self.expose
            else status_phrase(self.status) or HIDDEN_ERROR_MESSAGE,
        }

        # Correlation handle for out-of-band log lookup
        if self.status >= 500:
            response["errorId"] = self.error_id

        if self.expose and self.details:
            response["details"] = _copy_details(self.details)

        if development:
            response["stack"] = self.stack
            response["context"] = dict(self.log_context)

        return response

    def to_json(self, *, development: bool | None = None) -> dict[str, Any]:
        """Render the internal record, never filtered by exposure."""

        if development is None:
            development = ErrorConfig.is_development()

        data: dict[str, Any] = {
            "name": type(self).__name__,
            "message": self.message,
            "status": self.status,
            "errorId": self.error_id,
            "type": self.type,
            "code": self.code,
            "details": _copy_details(self.details),
        }

        if development:
            data["stack"] = self.stack
            data["context"] = dict(self.log_context)

        return data

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status!r}, message={self.message!r})"


class NotFoundError(BaseError):
    """Raised when a requested resource does not exist."""

    kind = ErrorKind.NOT_FOUND
    default_status = 404
    code = "NOT_FOUND"

    def __init__(self, message: str | None = None, *, resource: str | None = None, **options: Any) -> None:
        super().__init__(message, **options)
        if resource:
            self.code = f"{resource.upper()}_NOT_FOUND"


class BadRequestError(BaseError):
    """Raised when a request is malformed."""

    kind = ErrorKind.BAD_REQUEST
    default_status = 400
    code = "BAD_REQUEST"


class ValidationError(BaseError):
    """Raised when input validation fails."""

    kind = ErrorKind.VALIDATION
    default_status = 422
    code = "VALIDATION_ERROR"

    @property
    def errors(self) -> list[ErrorDetail]:
        return self.details


class UnauthorizedError(BaseError):
    """Raised when the caller is not authenticated."""

    kind = ErrorKind.UNAUTHORIZED
    default_status = 401
    code = "UNAUTHORIZED"


class ForbiddenError(BaseError):
    """Raised when the caller is authenticated but not allowed."""

    kind = ErrorKind.FORBIDDEN
    default_status = 403
    code = "FORBIDDEN"


class ConflictError(BaseError):
    """Raised when a request conflicts with current state."""

    kind = ErrorKind.CONFLICT
    default_status = 409
    code = "CONFLICT"


class RateLimitError(BaseError):
    """Raised when the caller is throttled."""

    kind = ErrorKind.RATE_LIMIT
    default_status = 429
    code = "RATE_LIMITED"


class ServiceError(BaseError):
    """Raised when a dependency is unavailable. Never exposed."""

    kind = ErrorKind.SERVICE
    default_status = 503
    pinned_expose = False
    code = "SERVICE_UNAVAILABLE"


class InternalError(BaseError):
    """Raised for unexpected server faults. Never exposed."""

    kind = ErrorKind.INTERNAL
    default_status = 500
    pinned_expose = False
    code = "INTERNAL_SERVER_ERROR"


class CustomError(BaseError):
    """Error with a caller-chosen status and machine-readable code.

    ``is_operational`` marks expected failures and drives ``expose``.
    """

    kind = ErrorKind.CUSTOM
    _option_keys = (BaseError._option_keys - {"expose"}) | {"code", "is_operational"}

    def __init__(
        self,
        message: str | None = None,
        *,
        status: int | None = None,
        code: str | None = None,
        is_operational: bool = True,
        cause: BaseException | None = None,
        details: Sequence[ErrorDetail] | None = None,
        log_context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            status=status,
            cause=cause,
            details=details,
            log_context=log_context,
            expose=is_operational,
        )
        self.code = code or "INTERNAL_SERVER_ERROR"
        self.is_operational = is_operational

"""Classifier for pydantic validation errors.

Also handles FastAPI's ``RequestValidationError``, which exposes the same
``errors()`` issue list.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any

import pydantic

from service_errors.adapters.base import get_field, is_sequence
from service_errors.core.errors import ErrorDetail, ValidationError

REQUEST_LOCATIONS = frozenset({"body", "query", "path", "header", "cookie"})


def is_pydantic_error(value: Any) -> bool:
    """Check whether ``value`` is a pydantic ValidationError."""

    return isinstance(value, pydantic.ValidationError)


def _format_location(location: Any, drop_prefixes: Collection[str]) -> str:
    if not is_sequence(location):
        return "" if location is None else str(location)
    return ".".join(str(part) for part in location if part not in drop_prefixes)


def from_pydantic_error(
    error: Any,
    message: str = "Validation failed",
    *,
    drop_prefixes: Collection[str] = (),
) -> ValidationError:
    """Transform pydantic issues into a ValidationError.

    Args:
        error: Object with an ``errors()`` method returning pydantic issues.
        message: Top-level message for the resulting error.
        drop_prefixes: Location segments to strip, e.g. ``REQUEST_LOCATIONS``.

    Returns:
        ValidationError with ``path`` from ``loc``, ``message`` from ``msg``
        and ``code`` from ``type``.
    """

    details: list[ErrorDetail] = []
    for issue in error.errors():
        if not isinstance(issue, Mapping):
            continue
        detail: ErrorDetail = {
            "path": _format_location(get_field(issue, "loc"), drop_prefixes),
            "message": str(get_field(issue, "msg", "Invalid value")),
        }
        if get_field(issue, "type"):
            detail["code"] = str(issue["type"])
        details.append(detail)

    return ValidationError(message, details=details, cause=error if isinstance(error, BaseException) else None)

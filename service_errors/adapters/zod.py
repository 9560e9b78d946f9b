"""Classifier for Zod-shaped validation errors.

Recognises ``{"name": "ZodError", "errors": [{"message", "path", "code"}, ...]}``
and flattens every issue into an ErrorDetail on a ValidationError.
"""

from __future__ import annotations

from typing import Any

from service_errors.adapters.base import get_field, has_field, is_sequence
from service_errors.core.errors import ErrorDetail, ValidationError

ZOD_ERROR_NAME = "ZodError"
_ISSUE_FIELDS = ("message", "path", "code")


def _is_issue(issue: Any) -> bool:
    return all(has_field(issue, field) for field in _ISSUE_FIELDS)


def is_zod_error(value: Any) -> bool:
    """Check whether ``value`` has the shape of a Zod error.

    Every element of ``errors`` must carry ``message``, ``path`` and ``code``.
    Safe on arbitrary values: returns False instead of raising.
    """

    if get_field(value, "name") != ZOD_ERROR_NAME:
        return False
    issues = get_field(value, "errors")
    if not is_sequence(issues):
        return False
    return all(_is_issue(issue) for issue in issues)


def _join_path(path: Any) -> str:
    if is_sequence(path):
        return ".".join(str(segment) for segment in path)
    if path is None:
        return ""
    return str(path)


def from_zod_error(error: Any, message: str) -> ValidationError:
    """Transform a Zod error into a ValidationError.

    Args:
        error: Value accepted by ``is_zod_error``.
        message: Top-level message for the resulting error.

    Returns:
        ValidationError with one detail per issue, in issue order.
    """

    issues = get_field(error, "errors") or []
    details: list[ErrorDetail] = [
        {"path": _join_path(get_field(issue, "path")), "message": str(get_field(issue, "message"))}
        for issue in issues
    ]
    return ValidationError(message, details=details)

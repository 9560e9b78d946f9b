"""Structural access helpers shared by the external-error classifiers.

Upstream errors arrive as plain mappings (decoded JSON, SDK dict payloads) or
as objects exposing the same fields as attributes. Classifiers read them
through ``get_field`` so both shapes are recognised the same way.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_MISSING = object()


def get_field(value: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping key or an attribute.

    Never raises: properties that fail on access are treated as absent.
    """

    if value is None:
        return default
    if isinstance(value, Mapping):
        return value.get(name, default)
    try:
        found = getattr(value, name, _MISSING)
    except Exception:  # noqa: BLE001 - foreign objects may raise from properties
        return default
    return default if found is _MISSING else found


def has_field(value: Any, name: str) -> bool:
    """Return True when ``name`` is present as a key or attribute."""

    return get_field(value, name, _MISSING) is not _MISSING


def is_sequence(value: Any) -> bool:
    """True for list-like values, excluding strings and bytes."""

    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))

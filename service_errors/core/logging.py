"""Logging utilities for error records.

This module centralizes logging configuration, including:
- Sensitive data redaction on log records (error log contexts often carry
  raw upstream payloads such as identity-provider requests)
- JSON formatter that surfaces the error id for log lookup
- ``log_error`` to emit an error's internal record at a status-driven level
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from service_errors.core.config import LogSettings, settings
from service_errors.core.errors import BaseError

REDACTED = "[REDACTED]"

# Credential-bearing keys seen in identity-provider payloads, compared lowercased
SENSITIVE_KEYS_DEFAULT: frozenset[str] = frozenset(
    {
        "authorization",
        "password",
        "proposedpassword",
        "previouspassword",
        "secret",
        "secrethash",
        "client_secret",
        "token",
        "accesstoken",
        "idtoken",
        "refreshtoken",
        "session",
        "api_key",
        "x-api-key",
        "cookie",
        "set-cookie",
    }
)

# Attributes every LogRecord carries; anything else arrived through ``extra``
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def _is_sensitive_key(key: Any, sensitive_keys: frozenset[str]) -> bool:
    return isinstance(key, str) and key.lower() in sensitive_keys


def _redact_value(value: Any, sensitive_keys: frozenset[str]) -> Any:
    """Recursively replace sensitive entries within mappings and sequences."""

    if isinstance(value, Mapping):
        return {
            key: REDACTED if _is_sensitive_key(key, sensitive_keys) else _redact_value(item, sensitive_keys)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact_value(item, sensitive_keys) for item in value]
    return value


def _record_extras(record: LogRecord, sensitive_keys: frozenset[str]) -> dict[str, Any]:
    """Collect the ``extra`` fields of a record with sensitive values redacted."""

    return {
        key: REDACTED if _is_sensitive_key(key, sensitive_keys) else _redact_value(value, sensitive_keys)
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class SensitiveDataFilter(logging.Filter):
    """Redact sensitive extras in place so every formatter sees clean values."""

    def __init__(self, sensitive_keys: Iterable[str] | None = None) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(key.lower() for key in (sensitive_keys or SENSITIVE_KEYS_DEFAULT))

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        for key, value in _record_extras(record, self.sensitive_keys).items():
            setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON object per line.

    When the record carries an ``error`` extra produced by ``log_error`` its
    ``errorId`` is repeated at the top level as ``error_id``, matching the
    id clients see in 5xx responses.
    """

    def __init__(
        self,
        *,
        sensitive_keys: Iterable[str] | None = None,
        ensure_ascii: bool = True,
    ) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(key.lower() for key in (sensitive_keys or SENSITIVE_KEYS_DEFAULT))
        self.ensure_ascii = ensure_ascii

    def format(self, record: LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = _record_extras(record, self.sensitive_keys)
        error = extras.get("error")
        if isinstance(error, Mapping) and error.get("errorId"):
            payload["error_id"] = error["errorId"]
        payload.update(extras)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=self.ensure_ascii)


def log_error(
    logger: logging.Logger,
    error: BaseError,
    event: str = "app_error",
    **extra: Any,
) -> None:
    """Log an error's internal record.

    Server faults (status >= 500) are logged at ERROR with the traceback
    attached; client faults at WARNING without one. The record travels
    under ``extra["error"]``.
    """

    if error.status >= 500:
        logger.error(event, exc_info=error, extra={"error": error.to_json(), **extra})
    else:
        logger.warning(event, extra={"error": error.to_json(), **extra})


def _build_handler(log_settings: LogSettings) -> logging.Handler:
    """Construct the logging handler based on configuration.

    Args:
        log_settings: Resolved logging settings from environment.

    Returns:
        Configured logging handler (stdout or rotating file).
    """

    if log_settings.output.lower() == "file":
        file_path = Path(log_settings.file_path or "logs/errors.log")
        file_path.parent.mkdir(parents=True, exist_ok=True)
        if log_settings.max_bytes:
            return RotatingFileHandler(
                file_path,
                maxBytes=log_settings.max_bytes,
                backupCount=log_settings.backup_count,
                encoding="utf-8",
            )
        return logging.FileHandler(file_path, encoding="utf-8")

    return logging.StreamHandler(sys.stdout)


def configure_logging(log_settings: LogSettings | None = None) -> None:
    """Install a single root handler with redaction and the configured format.

    Args:
        log_settings: Optional log settings; defaults to global settings if omitted.
    """

    cfg = log_settings or settings.log

    handler = _build_handler(cfg)
    handler.addFilter(SensitiveDataFilter())
    if cfg.format.lower() == "plain":
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, cfg.level.upper(), logging.INFO))

"""Error-model configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file is read, relative to the host
  application's working directory; real environment variables win over it
- Supports: development, testing, staging, production
- ErrorConfig holds the process-wide development-mode flag read on every
  serialization
"""

from __future__ import annotations

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: production)
APP_ENV = os.getenv("APP_ENV", "production")

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Read by pydantic-settings (via python-dotenv) only if the file exists
ENV_FILE = ENV_FILE_MAP.get(APP_ENV, ".env.production")


def _build_error_settings() -> "ErrorSettings":
    """Build error settings from environment."""

    return ErrorSettings()


def _build_log_settings() -> "LogSettings":
    """Build log settings from environment."""

    return LogSettings()


class ErrorSettings(BaseSettings):
    """Error serialization configuration."""

    development: bool = Field(
        APP_ENV == "development",
        description="Include stack traces and log context in serialized errors",
    )

    model_config = SettingsConfigDict(
        env_prefix="ERRORS_",
        case_sensitive=False,
        env_file=ENV_FILE,
        extra="ignore",
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated log files to keep", ge=0)

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
        env_file=ENV_FILE,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Main settings container."""

    app_env: str = APP_ENV
    errors: ErrorSettings = Field(default_factory=_build_error_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()


class ErrorConfig:
    """Process-wide development-mode toggle.

    Set once at startup from ``settings.errors.development``. Tests toggle it
    through ``set_development_mode`` and restore it with ``reset``.
    """

    _is_development: bool = settings.errors.development

    @classmethod
    def is_development(cls) -> bool:
        return cls._is_development

    @classmethod
    def set_development_mode(cls, is_dev: bool) -> None:
        cls._is_development = bool(is_dev)

    @classmethod
    def reset(cls) -> None:
        """Restore the flag to the value derived from settings."""

        cls._is_development = settings.errors.development

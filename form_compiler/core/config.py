"""Compiler configuration using Pydantic Settings.

Configuration is loaded from environment variables prefixed with
``FORM_COMPILER_``. Optionally, point `ENV_FILE` at a local env file (for
development); it is only read when explicitly requested.
"""

import logging
import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from form_compiler.core.messages import DEFAULT_LOCALE, SUPPORTED_LOCALES

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Compiler settings with type validation.

    The compilation cache capacity and default message locale are read from
    here when a caller does not pass them explicitly.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None,
        env_prefix="FORM_COMPILER_",
        extra="ignore",
    )

    # Compilation cache
    cache_capacity: int = Field(default=100, ge=1)

    # Validation messages
    locale: str = DEFAULT_LOCALE

    # Observability
    log_level: str = "INFO"
    structured_logs: bool = True
    metrics_enabled: bool = True

    @field_validator("locale")
    @classmethod
    def validate_locale(cls, v: str) -> str:
        """Only locales with a message catalog are accepted."""
        if v not in SUPPORTED_LOCALES:
            raise ValueError(f"locale must be one of {sorted(SUPPORTED_LOCALES)}, got '{v}'")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level to upper case."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {list(_LOG_LEVELS)}, got '{v}'")
        return level

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)


settings = Settings()

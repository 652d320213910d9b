"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthorizerSettings(BaseSettings):
    """Authorizer runtime settings.

    Environment variables:
        AUTHORIZER_LOG_LEVEL: Minimum log level (default: INFO)
        AUTHORIZER_LOG_JSON: Force JSON (true) or console (false) log output.
            Unset chooses console output on a TTY or when FORCE_COLOR is set.
        AUTHORIZER_DEFAULT_PAYLOAD_VERSION: Payload version assumed for events
            without a "version" field (default: 1.0)
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTHORIZER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Minimum log level")
    log_json: bool | None = Field(
        default=None,
        description="Force JSON log output (None = auto-detect)",
    )
    default_payload_version: Literal["1.0", "2.0"] = Field(
        default="1.0",
        description="Payload version assumed for unversioned events",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize and validate the log level name."""
        normalized = value.strip().upper()
        if normalized not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return normalized

    @property
    def log_level_number(self) -> int:
        """Numeric logging level for structlog's filtering logger."""
        return logging.getLevelNamesMapping()[self.log_level]


@lru_cache
def get_authorizer_settings() -> AuthorizerSettings:
    """Get cached authorizer settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return AuthorizerSettings()

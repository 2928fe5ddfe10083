"""Service configuration.

Uses pydantic-settings; every field can be overridden with an ``EA_``
prefixed environment variable (``EA_SERVER_PORT``, ``EA_LOG_LEVEL``, ...).
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from entropy_assessment.errors import ConfigError
from entropy_assessment.log import LOG_LEVELS


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    server_host: str = Field(default="0.0.0.0", description="Bind address of the HTTP service")
    server_port: int = Field(default=9091, ge=1, le=65535)
    log_level: str = Field(default="info", description="debug, info, warn or error")
    max_upload_size: int = Field(
        default=100 * 1024 * 1024,
        ge=1024,
        description="Largest accepted request body in bytes",
    )
    timeout: float = Field(default=300.0, gt=0, description="Socket timeout in seconds")
    metrics_enabled: bool = True
    backend: str | None = Field(
        default=None,
        description="Estimator backend: entry-point name or package.module:attribute",
    )
    parallel: bool = Field(default=False, description="Run estimators on a thread pool")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in LOG_LEVELS:
            raise ValueError(f"invalid log level: {v} (must be debug, info, warn, or error)")
        return v


def load_settings(**overrides) -> Settings:
    """Build validated settings from the environment plus *overrides*."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(str(e)) from e

"""Configuration management using pydantic-settings.

This module provides configuration management for orchd using Pydantic
settings, with support for environment variables and .env files.

Configuration Sources (in order of precedence):
    1. Direct instantiation parameters
    2. Environment variables (prefixed with ORCHD_)
    3. .env file in project root

Available Settings:
    - Deadlines: default_timeout_seconds, http_timeout_seconds
    - Logging: log_level, log_file_level, log_dir, log_file_name, log_json_format, log_max_bytes, log_backup_count
    - Tracing: enable_tracing, otel_exporter_endpoint, otel_service_name

Provider credentials are not settings: they are read per call from the
provider's own environment variable (OPENAI_API_KEY, ANTHROPIC_API_KEY) unless
the model configuration carries an explicit api_key.

Example:
    >>> from orchd.config import settings, reload_settings
    >>>
    >>> settings.default_timeout_seconds
    30
    >>>
    >>> # Reload after changing .env
    >>> settings = reload_settings()
"""

from pathlib import Path
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_project_root = Path(__file__).parent.parent
_env_file = _project_root / ".env"


class OrchdSettings(BaseSettings):
    """Global settings for orchd.

    Configuration values can be set via:
    1. Environment variables (e.g., ORCHD_DEFAULT_TIMEOUT_SECONDS)
    2. .env file in the project root
    3. Direct instantiation with parameters
    """

    model_config = SettingsConfigDict(
        env_prefix="ORCHD_",
        env_file=_env_file,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Deadline applied when a request carries timeout_seconds <= 0
    default_timeout_seconds: Annotated[int, Field(gt=0)] = 30
    # Transport backstop for a single provider call
    http_timeout_seconds: Annotated[float, Field(gt=0)] = 30.0

    # Logging settings. The console handler writes to stderr; stdout is the
    # response channel.
    log_level: str = "WARNING"
    log_file_level: str = "DEBUG"
    log_dir: Path | None = None  # None disables the file handler
    log_file_name: str = "orchd.log"
    log_json_format: bool = False
    log_max_bytes: int = 10485760  # 10MB
    log_backup_count: int = 5

    # OpenTelemetry tracing settings
    enable_tracing: bool = False
    otel_exporter_endpoint: str | None = None
    otel_service_name: str = "orchd"


# Global settings instance
settings = OrchdSettings()


def get_settings() -> OrchdSettings:
    """Get the global settings instance.

    Returns:
        OrchdSettings: The global settings instance
    """
    return settings


def reload_settings() -> OrchdSettings:
    """Reload settings from environment and .env file.

    Returns:
        OrchdSettings: A new settings instance
    """
    global settings
    settings = OrchdSettings()
    return settings

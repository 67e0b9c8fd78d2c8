"""errchain settings, read from ERRCHAIN_* environment variables (and .env).

Settings are loaded once and cached; frame capture and rendering consult
them on every call, so tests clear the cache after changing the environment.

Example:
    >>> from errchain.foundation.config import get_settings
    >>> get_settings().json_indent
    4
    >>> get_settings().logging.format
    'console'

    # ERRCHAIN_CAPTURE_FRAMES=false  -> every frame renders as "#k n/a"
    # ERRCHAIN_LOG_LEVEL=DEBUG       -> registry events become visible
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Renderer and threshold for errchain's structured loggers."""

    model_config = SettingsConfigDict(
        env_prefix="ERRCHAIN_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"


class ErrchainSettings(BaseSettings):
    """Root settings for errchain.

    Environment:
        ERRCHAIN_CAPTURE_FRAMES=false
        ERRCHAIN_FULL_PATHS=true
        ERRCHAIN_JSON_INDENT=2
        ERRCHAIN_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="ERRCHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    capture_frames: bool = Field(default=True, description="Record call-site frames on new nodes")
    full_paths: bool = Field(default=False, description="Render full file paths in caller annotations")
    json_indent: Annotated[int, Field(ge=1, le=8, description="Indent width for pretty JSON")] = 4

    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> ErrchainSettings:
    """Process-wide settings, loaded on first use."""
    return ErrchainSettings()


def clear_settings_cache() -> None:
    """Drop the cached settings; the next get_settings() re-reads the environment."""
    get_settings.cache_clear()

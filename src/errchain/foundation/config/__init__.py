"""Configuration management using pydantic-settings."""

from .settings import ErrchainSettings, LoggingSettings, clear_settings_cache, get_settings

__all__ = [
    "ErrchainSettings",
    "LoggingSettings",
    "clear_settings_cache",
    "get_settings",
]

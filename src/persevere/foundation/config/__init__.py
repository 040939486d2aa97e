"""Configuration management using pydantic-settings."""

from .settings import (
    LoggingSettings,
    PersevereSettings,
    StrategySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "LoggingSettings",
    "PersevereSettings",
    "StrategySettings",
    "clear_settings_cache",
    "get_settings",
]

"""Environment-based configuration using pydantic-settings.

Supplies the defaults ``retry()`` falls back to when no strategy is given, and
the logging setup applied by ``configure_logging_from_settings()``.

Example:
    >>> from persevere.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.strategy.initial_delay
    0.5
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # PERSEVERE_STRATEGY_INITIAL_DELAY=1.0
    # PERSEVERE_STRATEGY_MAX_COUNT=8
    # PERSEVERE_LOG_FORMAT=json
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, NonNegativeFloat, NonNegativeInt, PositiveFloat
from pydantic_settings import BaseSettings, SettingsConfigDict


class StrategySettings(BaseSettings):
    """Parameters of the default progressive strategy."""

    model_config = SettingsConfigDict(
        env_prefix="PERSEVERE_STRATEGY_",
        extra="ignore",
    )

    initial_delay: NonNegativeFloat = Field(default=0.5, description="Delay in seconds for the stable phase")
    stable_length: NonNegativeInt = Field(default=3, description="Attempts that keep the initial delay")
    multiplier: PositiveFloat = Field(default=2.0, description="Growth factor after the stable phase")
    max_delay: NonNegativeFloat = Field(default=60.0, description="Delay ceiling in seconds (applied only with clamp)")
    max_count: NonNegativeInt | None = Field(default=None, description="Stop after this many attempts")
    clamp: bool = False


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PERSEVERE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"
    colors: bool | None = None


class PersevereSettings(BaseSettings):
    """Root settings for persevere.

    Loads configuration from environment variables with the PERSEVERE_ prefix.

    Example environment variables:
        PERSEVERE_STRATEGY_STABLE_LENGTH=5
        PERSEVERE_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="PERSEVERE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    strategy: StrategySettings = Field(default_factory=StrategySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> PersevereSettings:
    """Get the global settings instance (cached)."""
    return PersevereSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()

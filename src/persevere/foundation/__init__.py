"""Foundation - building blocks shared by the retry runtime.

Contains: the failure envelope and site tokens, configuration.
"""

from __future__ import annotations

__all__ = [
    # Errors
    "RetriableError", "SiteToken", "Wrapper", "wrap_failure", "original_error",
    # Config
    "PersevereSettings", "StrategySettings", "LoggingSettings", "get_settings", "clear_settings_cache",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("RetriableError", "SiteToken", "Wrapper", "wrap_failure", "original_error"):
        from . import errors
        return getattr(errors, name)
    if name in ("PersevereSettings", "StrategySettings", "LoggingSettings", "get_settings", "clear_settings_cache"):
        from . import config
        return getattr(config, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

"""Persevere - scoped retries for unreliable operations.

Marking code as retriable and deciding how to retry it are separate concerns.
Low-level code says which failures *may* be retried; the caller, further up
the stack, says which of them *should* be and how long to wait in between.

Quick Start:
    >>> from persevere import retriable, retry, ConstantStrategy
    >>>
    >>> @retriable                       # OSError is retriable
    ... def download(url: str) -> bytes:
    ...     return urlopen(url).read()
    >>>
    >>> download(url)                    # no scope: errors propagate unchanged
    >>>
    >>> with retry():                    # progressive backoff, claim everything
    ...     download(url)

Routing by tag:
    >>> @retriable(tag="s3", catch=(OSError, TimeoutError))
    ... def put_object(key: str, body: bytes) -> None: ...
    >>>
    >>> with retry(strategy=ConstantStrategy(2.0, max_count=10), selector="s3"):
    ...     with retry(selector="db"):
    ...         sync()                   # s3 failures skip the inner scope
    ...                                  # and are handled by the outer one

Exhaustion:
    >>> try:
    ...     with retry(strategy=ConstantStrategy(0.1, max_count=3)):
    ...         download(url)
    ... except RetriableError as e:
    ...     print(e.error, e.attempt)    # original OSError, 4

Configuration:
    PERSEVERE_STRATEGY_INITIAL_DELAY, PERSEVERE_STRATEGY_MAX_COUNT, ... set the
    default strategy; PERSEVERE_LOG_LEVEL and PERSEVERE_LOG_FORMAT the logging.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Errors
from .foundation.errors import RetriableError, SiteToken, original_error, wrap_failure

# Config
from .foundation.config import PersevereSettings, clear_settings_cache, get_settings

# Retry
from .runtime.retry import (
    DEFAULT_CATCH,
    ConstantStrategy,
    LogFn,
    PredicateSelector,
    ProgressiveStrategy,
    RetryScope,
    Strategy,
    TagSelector,
    acall_retriable,
    call_retriable,
    default_log_fn,
    get_scopes,
    retriable,
    retry,
    silent_log_fn,
)

# Observability
from .runtime.observability import configure_logging, configure_logging_from_settings, get_logger, log_context

__all__ = [
    # Version
    "__version__",
    # Errors
    "RetriableError",
    "SiteToken",
    "original_error",
    "wrap_failure",
    # Config
    "PersevereSettings",
    "get_settings",
    "clear_settings_cache",
    # Strategies
    "Strategy",
    "ConstantStrategy",
    "ProgressiveStrategy",
    # Selectors
    "TagSelector",
    "PredicateSelector",
    # Scopes
    "retry",
    "RetryScope",
    "get_scopes",
    # Retriable blocks
    "retriable",
    "call_retriable",
    "acall_retriable",
    "DEFAULT_CATCH",
    # Log hooks
    "LogFn",
    "default_log_fn",
    "silent_log_fn",
    # Observability
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "log_context",
]

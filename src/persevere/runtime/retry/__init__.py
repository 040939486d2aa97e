"""Scoped retries for unreliable operations.

Two independent pieces cooperate at runtime:

- ``retriable`` marks an operation whose failures may be retried
- ``retry`` establishes a scope deciding which failures to retry and how long
  to wait, for every retriable operation running inside it

Example:
    >>> from persevere import ConstantStrategy, retriable, retry
    >>>
    >>> @retriable(tag="feed")
    ... def fetch_page(n: int) -> bytes:
    ...     return http_get(f"/feed?page={n}")
    >>>
    >>> with retry(strategy=ConstantStrategy(1.0, max_count=5), selector="feed"):
    ...     pages = [fetch_page(n) for n in range(10)]
"""

from .context import RetryScope, get_scopes, retry
from .handler import RETRY, ahandle_failure, handle_failure
from .hooks import LogFn, default_log_fn, silent_log_fn
from .retriable import DEFAULT_CATCH, acall_retriable, call_retriable, retriable
from .selector import PredicateSelector, Selector, TagSelector, as_selector
from .strategy import ConstantStrategy, ProgressiveStrategy, Strategy

__all__ = [
    # Strategies
    "Strategy",
    "ConstantStrategy",
    "ProgressiveStrategy",
    # Selectors
    "Selector",
    "TagSelector",
    "PredicateSelector",
    "as_selector",
    # Scopes
    "retry",
    "RetryScope",
    "get_scopes",
    # Retriable blocks
    "retriable",
    "call_retriable",
    "acall_retriable",
    "DEFAULT_CATCH",
    # Raise-site handling
    "handle_failure",
    "ahandle_failure",
    "RETRY",
    # Log hooks
    "LogFn",
    "default_log_fn",
    "silent_log_fn",
]

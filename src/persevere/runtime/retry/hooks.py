"""Log hooks invoked on every retry decision."""

from __future__ import annotations

from typing import Callable

from persevere.foundation.errors import original_error
from persevere.runtime.observability import get_logger

LogFn = Callable[[BaseException, int, float], None]
"""Hook called as ``log_fn(wrapped, attempt, delay)`` before each backoff sleep."""

_log = get_logger("persevere.retry")


def default_log_fn(wrapped: BaseException, attempt: int, delay: float) -> None:
    """Log the underlying error and the upcoming delay in seconds."""
    error = original_error(wrapped)
    tag = getattr(wrapped, "tag", None)
    _log.warning(
        f"{error}, retrying in {delay:.1f} seconds...",
        attempt=attempt,
        delay=delay,
        error_type=type(error).__name__,
        tag=None if tag is None else str(tag),
    )


def silent_log_fn(wrapped: BaseException, attempt: int, delay: float) -> None:
    """Discard retry notifications."""

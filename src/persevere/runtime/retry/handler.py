"""Raise-site handling of failures from retriable code.

Called from the retry loop of a retriable block each time its guarded
operation raises a catchable error. The handler either waits and returns
RETRY, or raises:

1. Wrap the error (RetriableError, or the block's custom wrapper).
2. Find the innermost active scope whose selector claims the wrapper. If none
   does, re-raise the original error untouched.
3. Bind the scope's strategy to the block's site token on first use, so one
   retry loop keeps one strategy even if scopes change between attempts.
4. Ask the strategy for a delay. None means give up: raise the wrapper,
   chained from the original error.
5. Call the scope's log hook, sleep, return RETRY.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Final, Hashable

from persevere.foundation.errors import RetriableError, SiteToken, Wrapper, wrap_failure
from persevere.runtime.observability import get_logger

from .context import get_scopes

if TYPE_CHECKING:
    from .context import RetryScope

log = get_logger("persevere.retry")


class _RetrySignal:
    __slots__ = ()

    def __repr__(self) -> str:
        return "RETRY"


RETRY: Final = _RetrySignal()


def _find_scope(wrapped: BaseException) -> RetryScope | None:
    return next((scope for scope in get_scopes() if scope.claims(wrapped)), None)


def _decide(
    error: BaseException,
    attempt: int,
    token: SiteToken,
    tag: Hashable | None,
    wrapper: Wrapper | None,
) -> float:
    """Pick the scope and delay for a failure, raising when it must propagate."""
    wrapped = wrap_failure(error, token, tag=tag, wrapper=wrapper)
    if (scope := _find_scope(wrapped)) is None:
        log.debug("failure not claimed by any retry scope", error_type=type(error).__name__, attempt=attempt)
        raise error

    if (delay := scope.strategy_for(token)(attempt)) is None:
        if isinstance(wrapped, RetriableError):
            wrapped.attempt = attempt
        log.error("retries exhausted", error=str(error), error_type=type(error).__name__, attempt=attempt)
        raise wrapped from error

    scope.retries += 1
    scope.log_fn(wrapped, attempt, delay)
    return delay


def handle_failure(
    error: BaseException,
    attempt: int,
    token: SiteToken,
    *,
    tag: Hashable | None = None,
    wrapper: Wrapper | None = None,
) -> _RetrySignal:
    """Handle a failure from a synchronous retriable block, blocking for the delay."""
    time.sleep(_decide(error, attempt, token, tag, wrapper))
    return RETRY


async def ahandle_failure(
    error: BaseException,
    attempt: int,
    token: SiteToken,
    *,
    tag: Hashable | None = None,
    wrapper: Wrapper | None = None,
) -> _RetrySignal:
    """Handle a failure from a coroutine retriable block, suspending for the delay."""
    await asyncio.sleep(_decide(error, attempt, token, tag, wrapper))
    return RETRY

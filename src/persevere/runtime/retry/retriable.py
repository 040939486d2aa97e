"""Retriable blocks: operations that cooperate with enclosing retry scopes.

A retriable operation runs in a loop. When it raises one of its catchable
errors, the failure is handed to the enclosing retry scopes; the loop tries
again if a scope decides to wait, and otherwise the raise propagates. Errors
outside ``catch`` pass straight through.

Example:
    >>> @retriable(tag="db")
    ... def load_rows(query: str) -> list[Row]:
    ...     return conn.execute(query).fetchall()
    >>>
    >>> load_rows("select 1")            # no scope: first OSError propagates as is
    >>> with retry(selector="db"):
    ...     load_rows("select 1")        # OSErrors are retried with backoff
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable
from functools import wraps
from typing import Callable, Hashable, ParamSpec, TypeVar, overload

from persevere.foundation.errors import SiteToken, Wrapper

from .handler import ahandle_failure, handle_failure

P = ParamSpec("P")
T = TypeVar("T")

Catch = type[BaseException] | tuple[type[BaseException], ...]

# OSError covers I/O failures: sockets, files, timeouts, connection resets
DEFAULT_CATCH: tuple[type[BaseException], ...] = (OSError,)


def _normalize_catch(catch: Catch) -> tuple[type[BaseException], ...]:
    kinds = catch if isinstance(catch, tuple) else (catch,)
    if not kinds:
        raise TypeError("catch must name at least one exception class")
    for kind in kinds:
        if not (isinstance(kind, type) and issubclass(kind, BaseException)):
            raise TypeError(f"catch expects exception classes, got {kind!r}")
    return kinds


def _run(operation: Callable[[], T], kinds: tuple[type[BaseException], ...],
         tag: Hashable | None, wrapper: Wrapper | None) -> T:
    token, attempt = SiteToken(), 1
    while True:
        try:
            return operation()
        except kinds as e:
            handle_failure(e, attempt, token, tag=tag, wrapper=wrapper)
        attempt += 1


async def _arun(operation: Callable[[], Awaitable[T]], kinds: tuple[type[BaseException], ...],
                tag: Hashable | None, wrapper: Wrapper | None) -> T:
    token, attempt = SiteToken(), 1
    while True:
        try:
            return await operation()
        except kinds as e:
            await ahandle_failure(e, attempt, token, tag=tag, wrapper=wrapper)
        attempt += 1


def call_retriable(
    operation: Callable[P, T],
    /,
    *args: P.args,
    catch: Catch = DEFAULT_CATCH,
    tag: Hashable | None = None,
    wrapper: Wrapper | None = None,
    **kwargs: P.kwargs,
) -> T:
    """Call ``operation(*args, **kwargs)`` as a retriable block.

    Args:
        operation: The guarded callable
        catch: Exception classes handed to retry scopes (default: OSError)
        tag: Classification attached to the wrapped failure for selectors
        wrapper: Builds a custom wrapped failure from the error; overrides tag

    Returns:
        The operation's result from the first successful attempt

    Raises:
        The original error when no scope claims it, the wrapped failure when
        the claiming scope's strategy gives up, anything outside ``catch`` as is.
    """
    return _run(lambda: operation(*args, **kwargs), _normalize_catch(catch), tag, wrapper)


async def acall_retriable(
    operation: Callable[P, Awaitable[T]],
    /,
    *args: P.args,
    catch: Catch = DEFAULT_CATCH,
    tag: Hashable | None = None,
    wrapper: Wrapper | None = None,
    **kwargs: P.kwargs,
) -> T:
    """Async version of call_retriable; backoff uses asyncio.sleep."""
    return await _arun(lambda: operation(*args, **kwargs), _normalize_catch(catch), tag, wrapper)


@overload
def retriable(func: Callable[P, T]) -> Callable[P, T]: ...

@overload
def retriable(
    *,
    catch: Catch = DEFAULT_CATCH,
    tag: Hashable | None = None,
    wrapper: Wrapper | None = None,
) -> Callable[[Callable[P, T]], Callable[P, T]]: ...


def retriable(
    func: Callable[P, T] | None = None,
    *,
    catch: Catch = DEFAULT_CATCH,
    tag: Hashable | None = None,
    wrapper: Wrapper | None = None,
) -> Callable[P, T] | Callable[[Callable[P, T]], Callable[P, T]]:
    """Mark a function as retriable.

    Each call is one activation with its own site token and attempt counter.
    Works on plain and ``async def`` functions; with or without arguments.

    Args:
        catch: Exception classes handed to retry scopes (default: OSError)
        tag: Classification attached to the wrapped failure for selectors
        wrapper: Builds a custom wrapped failure from the error; overrides tag
    """
    kinds = _normalize_catch(catch)

    def decorator(fn: Callable[P, T]) -> Callable[P, T]:
        if inspect.iscoroutinefunction(fn):
            @wraps(fn)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                return await _arun(lambda: fn(*args, **kwargs), kinds, tag, wrapper)
            return async_wrapper  # type: ignore[return-value]

        @wraps(fn)
        def wrapper_fn(*args: P.args, **kwargs: P.kwargs) -> T:
            return _run(lambda: fn(*args, **kwargs), kinds, tag, wrapper)
        return wrapper_fn

    return decorator(func) if func is not None else decorator

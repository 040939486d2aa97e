"""Retry scopes and the call-chain-local scope stack.

``retry`` pushes a RetryScope for the duration of a block. Retriable code that
fails anywhere inside the block, however deep in the call chain, consults the
stack innermost-first to find a scope willing to handle the failure.

The stack lives in a ContextVar holding an immutable tuple, so each thread and
each asyncio task sees only the scopes of its own call chain. Tasks start with
a copy of their creator's context: scopes entered before ``create_task`` apply
inside the task, scopes entered inside a task never leak back out.

Example:
    >>> with retry(strategy=ConstantStrategy(1.0, max_count=5), selector="db"):
    ...     rows = load_rows()  # retriable(tag="db") failures inside are retried
"""

from __future__ import annotations

import inspect
from contextvars import ContextVar
from dataclasses import dataclass, field
from functools import wraps
from typing import TYPE_CHECKING, Callable, Hashable, ParamSpec, TypeVar
from weakref import WeakKeyDictionary

from persevere.foundation.errors import SiteToken
from persevere.runtime.observability import get_logger

from .hooks import LogFn, default_log_fn
from .selector import Selector, as_selector
from .strategy import ProgressiveStrategy, Strategy

if TYPE_CHECKING:
    from contextvars import Token
    from types import TracebackType

P = ParamSpec("P")
T = TypeVar("T")

log = get_logger("persevere.scope")

# Innermost scope first
_scopes: ContextVar[tuple[RetryScope, ...]] = ContextVar("retry_scopes", default=())
# Reset tokens of the scopes entered in this call chain, matching _scopes
_resets: ContextVar[tuple[Token[tuple[RetryScope, ...]], ...]] = ContextVar("retry_scope_resets", default=())


@dataclass(slots=True, eq=False)
class RetryScope:
    """One active ``retry`` block.

    Attributes:
        strategy: Strategy given to sites that first fail inside this scope
        selector: Predicate over wrapped failures (None claims everything)
        log_fn: Hook called with (wrapped, attempt, delay) on each retry
        strategies: Strategy bound to each live failure site, filled on first use;
            entries go away with the activation that owns the site token
        retries: Retry decisions made by this scope so far
    """

    strategy: Strategy
    selector: Selector | None = None
    log_fn: LogFn = default_log_fn
    strategies: WeakKeyDictionary[SiteToken, Strategy] = field(default_factory=WeakKeyDictionary)
    retries: int = 0

    def claims(self, wrapped: BaseException) -> bool:
        return self.selector is None or self.selector(wrapped)

    def strategy_for(self, token: SiteToken) -> Strategy:
        """Strategy for a failure site, bound to the site on first use."""
        return self.strategies.setdefault(token, self.strategy)


def get_scopes() -> tuple[RetryScope, ...]:
    """Active scopes of the current call chain, innermost first."""
    return _scopes.get()


class retry:
    """Establish a retry scope around a block or function.

    Args:
        strategy: Delay strategy (default: ProgressiveStrategy from settings)
        selector: Tag to match by equality, or predicate over the wrapped failure
            (default: claim every failure)
        log_fn: Hook ``(wrapped, attempt, delay)`` called before each sleep
            (default: log a warning line)

    Usable as ``with``/``async with`` or as a decorator. Every entry pushes a
    fresh scope, so one instance can be shared by many threads and tasks, and a
    decorated function gets its own scope per call.

    Example:
        >>> with retry(strategy=ConstantStrategy(0.2), selector=lambda e: "503" in str(e)):
        ...     sync_inventory()
        >>>
        >>> @retry(selector="payments")
        ... async def settle(batch): ...
    """

    __slots__ = ("_strategy", "_selector", "_log_fn")

    def __init__(
        self,
        strategy: Strategy | None = None,
        selector: Hashable | Callable[[BaseException], object] | None = None,
        log_fn: LogFn | None = None,
    ) -> None:
        self._strategy, self._selector, self._log_fn = strategy, as_selector(selector), log_fn

    def _new_scope(self) -> RetryScope:
        return RetryScope(
            strategy=self._strategy if self._strategy is not None else ProgressiveStrategy.from_settings(),
            selector=self._selector,
            log_fn=self._log_fn or default_log_fn,
        )

    def __enter__(self) -> RetryScope:
        scope = self._new_scope()
        stack = _scopes.get()
        _resets.set((_scopes.set((scope, *stack)), *_resets.get()))
        log.debug("retry scope entered", depth=len(stack) + 1)
        return scope

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        token, *rest = _resets.get()
        _resets.set(tuple(rest))
        _scopes.reset(token)
        log.debug("retry scope exited", depth=len(_scopes.get()), error=exc_type and exc_type.__name__)

    async def __aenter__(self) -> RetryScope:
        return self.__enter__()

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                        exc_tb: TracebackType | None) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)

    def __call__(self, func: Callable[P, T]) -> Callable[P, T]:
        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
                async with self:
                    return await func(*args, **kwargs)  # type: ignore[misc]
            return async_wrapper  # type: ignore[return-value]

        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with self:
                return func(*args, **kwargs)
        return wrapper

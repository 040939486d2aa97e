"""Failure envelope for retriable code.

Every failure handed to a retry scope is wrapped into a RetriableError so that
selectors and log hooks can inspect it uniformly, whatever the underlying
exception type. The same object is raised when a scope's strategy gives up.
"""

from __future__ import annotations

from itertools import count
from typing import Callable, Hashable

from .types import JsonDict

_token_ids = count(1)


class SiteToken:
    """Identity of one activation of a retriable block.

    Minted once before the first attempt and reused for every retry of that
    activation. Two activations never share a token, even for the same function.
    """

    __slots__ = ("id", "__weakref__")

    def __init__(self) -> None:
        self.id = next(_token_ids)

    def __repr__(self) -> str:
        return f"SiteToken(#{self.id})"


class RetriableError(Exception):
    """Wrapped failure from a retriable block.

    Attributes:
        error: The exception originally raised by the guarded operation
        tag: Classification value given to ``retriable`` (None if untagged)
        token: Site token of the block activation that failed
        attempt: Attempt at which the strategy gave up (None until raised as exhausted)
    """

    __slots__ = ("error", "tag", "token", "attempt")

    def __init__(
        self,
        error: BaseException,
        *,
        tag: Hashable | None = None,
        token: SiteToken | None = None,
    ) -> None:
        self.error, self.tag, self.token = error, tag, token
        self.attempt: int | None = None
        super().__init__(f"Retriable code failed: {error}")

    def to_dict(self) -> JsonDict:
        """Flatten for structured logging."""
        return {
            "error": str(self.error),
            "error_type": type(self.error).__name__,
            "tag": None if self.tag is None else str(self.tag),
            "token": None if self.token is None else self.token.id,
            "attempt": self.attempt,
        }


Wrapper = Callable[[BaseException], BaseException]


def wrap_failure(
    error: BaseException,
    token: SiteToken,
    *,
    tag: Hashable | None = None,
    wrapper: Wrapper | None = None,
) -> BaseException:
    """Build the failure envelope for ``error``.

    A custom ``wrapper`` replaces the default envelope entirely and ``tag`` is
    ignored. The wrapper must return an exception, since the envelope is what
    gets raised once retries are exhausted.
    """
    if wrapper is None:
        return RetriableError(error, tag=tag, token=token)
    if not isinstance(wrapped := wrapper(error), BaseException):
        raise TypeError(f"wrapper must return an exception, got {type(wrapped).__name__}")
    return wrapped


def original_error(wrapped: BaseException) -> BaseException:
    """Underlying exception of a wrapped failure.

    Custom wrappers are not required to expose ``error``; fall back to the
    explicit cause, then to the wrapper itself.
    """
    if isinstance(wrapped, RetriableError):
        return wrapped.error
    if isinstance(err := getattr(wrapped, "error", None), BaseException):
        return err
    return wrapped.__cause__ or wrapped

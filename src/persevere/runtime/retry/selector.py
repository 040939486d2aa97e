"""Selectors decide which retry scope claims a wrapped failure.

A scope is given either a tag (matched by equality against the wrapper's
``tag``) or a predicate over the wrapper. ``as_selector`` resolves the option
once, when the scope is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Hashable

Selector = Callable[[BaseException], bool]


@dataclass(frozen=True, slots=True)
class TagSelector:
    """Claims failures whose wrapper carries ``tag``.

    Custom wrappers are matched through their own ``tag`` attribute, if any.
    """

    tag: Hashable

    def __call__(self, wrapped: BaseException) -> bool:
        return getattr(wrapped, "tag", None) == self.tag


@dataclass(frozen=True, slots=True)
class PredicateSelector:
    """Claims failures for which ``predicate`` is truthy."""

    predicate: Callable[[BaseException], object]

    def __call__(self, wrapped: BaseException) -> bool:
        return bool(self.predicate(wrapped))


def as_selector(value: Hashable | Callable[[BaseException], object] | None) -> Selector | None:
    """Resolve a ``selector`` option. Callables are predicates, anything else is a tag."""
    match value:
        case None | TagSelector() | PredicateSelector():
            return value
        case _ if callable(value):
            return PredicateSelector(value)
        case _:
            return TagSelector(value)

"""Retry strategies: pure mappings from attempt number to delay.

A strategy is called with the 1-indexed attempt that just failed and returns
either the delay in seconds to wait before the next attempt, or None to stop
retrying. Strategies hold no mutable state: "give up after N" is encoded in
``max_count``, so the same attempt always yields the same answer.

- ConstantStrategy: fixed delay
- ProgressiveStrategy: stable initial phase, then exponential growth

Any callable ``(attempt: int) -> float | None`` satisfies the Strategy protocol.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Annotated, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, NonNegativeInt, PositiveFloat

if TYPE_CHECKING:
    from persevere.foundation.config import StrategySettings


@runtime_checkable
class Strategy(Protocol):
    """Protocol for retry strategies.

    Attempt numbers start at 1 (the first failed try).
    """

    def __call__(self, attempt: int) -> float | None:
        """Delay in seconds before the next attempt, or None to stop."""
        ...


class _BaseStrategy(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")

    max_count: Annotated[NonNegativeInt | None, Field(description="Attempts allowed before stopping")] = None

    def _exhausted(self, attempt: int) -> bool:
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}")
        return self.max_count is not None and attempt > self.max_count

    def __call__(self, attempt: int) -> float | None:
        raise NotImplementedError

    def delays(self, n: int) -> list[float | None]:
        """Outcomes for attempts 1..n."""
        return [self(attempt) for attempt in range(1, n + 1)]


class ConstantStrategy(_BaseStrategy):
    """Same delay for every attempt.

    Example:
        >>> ConstantStrategy(0.1, 2).delays(4)
        [0.1, 0.1, None, None]
    """

    delay: NonNegativeFloat = Field(description="Delay in seconds")

    def __init__(self, delay: float, max_count: int | None = None, **data: object) -> None:
        super().__init__(delay=delay, max_count=max_count, **data)

    def __call__(self, attempt: int) -> float | None:
        return None if self._exhausted(attempt) else self.delay


class ProgressiveStrategy(_BaseStrategy):
    """Delay that stays flat for a while, then grows geometrically.

    Delay = initial_delay                                       for attempt <= stable_length
    Delay = initial_delay * multiplier ** (attempt - stable_length)  afterwards

    ``max_delay`` caps the delay only when ``clamp`` is set; otherwise growth
    is unbounded.

    Attributes:
        initial_delay: Delay for the stable phase in seconds (default: 0.5)
        stable_length: Attempts that keep the initial delay (default: 3)
        multiplier: Growth factor per attempt past the stable phase (default: 2.0)
        max_delay: Ceiling in seconds, honoured only with clamp (default: 60.0)
        max_count: Stop after this many attempts (default: never)
        clamp: Apply max_delay (default: False)
    """

    initial_delay: NonNegativeFloat = 0.5
    stable_length: NonNegativeInt = 3
    multiplier: PositiveFloat = 2.0
    max_delay: NonNegativeFloat = 60.0
    clamp: bool = False

    @classmethod
    def from_settings(cls, settings: StrategySettings | None = None) -> ProgressiveStrategy:
        """Build from PERSEVERE_STRATEGY_* configuration."""
        if settings is None:
            from persevere.foundation.config import get_settings
            settings = get_settings().strategy
        return cls(**settings.model_dump())

    def __call__(self, attempt: int) -> float | None:
        if self._exhausted(attempt):
            return None
        if attempt <= self.stable_length:
            d = self.initial_delay
        else:
            try:
                d = self.initial_delay * self.multiplier ** (attempt - self.stable_length)
            except OverflowError:
                d = math.inf if self.initial_delay else 0.0
        return min(d, self.max_delay) if self.clamp else d

"""Tests for retry strategies."""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from persevere import ConstantStrategy, ProgressiveStrategy, Strategy
from persevere.foundation.config import StrategySettings


# ─────────────────────────────────────────────────────────────────────────────
# ConstantStrategy
# ─────────────────────────────────────────────────────────────────────────────


def test_constant_same_delay_for_every_attempt() -> None:
    assert ConstantStrategy(100).delays(10) == [100] * 10


def test_constant_stops_after_max_count() -> None:
    assert ConstantStrategy(1000, 5).delays(3) == [1000, 1000, 1000]
    assert ConstantStrategy(10, 5).delays(10) == [10] * 5 + [None] * 5


def test_constant_zero_max_count_never_retries() -> None:
    assert ConstantStrategy(1, max_count=0)(1) is None


def test_constant_rejects_negative_delay() -> None:
    with pytest.raises(ValidationError):
        ConstantStrategy(-1)


def test_constant_requires_delay() -> None:
    with pytest.raises(TypeError):
        ConstantStrategy()  # type: ignore[call-arg]
    assert ConstantStrategy(delay=0.2, max_count=1).delays(2) == [0.2, None]


# ─────────────────────────────────────────────────────────────────────────────
# ProgressiveStrategy
# ─────────────────────────────────────────────────────────────────────────────


def test_progressive_stable_phase_then_doubling() -> None:
    strategy = ProgressiveStrategy(initial_delay=1, stable_length=3, multiplier=2, max_delay=1000)
    assert strategy.delays(10) == [1, 1, 1, 2, 4, 8, 16, 32, 64, 128]


def test_progressive_ignores_max_delay_by_default() -> None:
    strategy = ProgressiveStrategy(initial_delay=1, stable_length=1, multiplier=2, max_delay=100)
    assert strategy.delays(10) == [1, 2, 4, 8, 16, 32, 64, 128, 256, 512]


def test_progressive_clamp_caps_at_max_delay() -> None:
    strategy = ProgressiveStrategy(initial_delay=1, stable_length=1, multiplier=2, max_delay=100, clamp=True)
    assert strategy.delays(10) == [1, 2, 4, 8, 16, 32, 64, 100, 100, 100]


def test_progressive_stops_after_max_count() -> None:
    strategy = ProgressiveStrategy(initial_delay=1, stable_length=1, multiplier=2, max_delay=1000, max_count=5)
    assert strategy.delays(10) == [1, 2, 4, 8, 16, None, None, None, None, None]


def test_progressive_defaults() -> None:
    strategy = ProgressiveStrategy()
    assert (strategy.initial_delay, strategy.stable_length, strategy.multiplier) == (0.5, 3, 2.0)
    assert strategy.max_delay == 60.0 and strategy.max_count is None and not strategy.clamp
    assert strategy.delays(5) == [0.5, 0.5, 0.5, 1.0, 2.0]


def test_progressive_non_integer_multiplier() -> None:
    strategy = ProgressiveStrategy(initial_delay=2, stable_length=0, multiplier=1.5)
    assert strategy.delays(3) == [3.0, 4.5, 6.75]


def test_progressive_overflow_does_not_raise() -> None:
    assert ProgressiveStrategy(initial_delay=1, stable_length=0)(5000) == math.inf
    assert ProgressiveStrategy(initial_delay=1, stable_length=0, clamp=True)(5000) == 60.0
    assert ProgressiveStrategy(initial_delay=0, stable_length=0)(5000) == 0.0


@pytest.mark.parametrize("kwargs", [
    {"initial_delay": -0.1},
    {"stable_length": -1},
    {"multiplier": 0},
    {"max_count": -2},
    {"jitter": True},
])
def test_progressive_rejects_invalid_config(kwargs: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        ProgressiveStrategy(**kwargs)


def test_progressive_from_settings() -> None:
    settings = StrategySettings(initial_delay=0.1, stable_length=1, multiplier=3, max_count=4)
    strategy = ProgressiveStrategy.from_settings(settings)
    assert strategy.delays(4) == pytest.approx([0.1, 0.3, 0.9, 2.7])
    assert strategy(5) is None


# ─────────────────────────────────────────────────────────────────────────────
# Shared properties
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.parametrize("strategy", [ConstantStrategy(0.25, 3), ProgressiveStrategy(max_count=6)])
def test_strategies_are_pure(strategy: Strategy) -> None:
    first = strategy.delays(8)
    assert strategy.delays(8) == first
    assert [strategy(3), strategy(3)] == [first[2], first[2]]


@pytest.mark.parametrize("strategy", [ConstantStrategy(1), ProgressiveStrategy()])
def test_attempts_start_at_one(strategy: Strategy) -> None:
    with pytest.raises(ValueError, match="attempt must be >= 1"):
        strategy(0)


def test_strategies_are_frozen() -> None:
    with pytest.raises(ValidationError):
        ConstantStrategy(1).delay = 2  # type: ignore[misc]


def test_plain_callables_satisfy_protocol() -> None:
    assert isinstance(ConstantStrategy(1), Strategy)
    assert isinstance(ProgressiveStrategy(), Strategy)
    assert isinstance(lambda attempt: None, Strategy)

"""Shared fixtures: log capture, settings isolation, recorded sleeps."""

from __future__ import annotations

import time

import pytest

from persevere.foundation.config import clear_settings_cache
from persevere.runtime.observability import CaptureRenderer
from persevere.runtime.observability.logging import logger as logger_module


class Flaky:
    """Callable that raises ``error`` for the first ``failures`` calls, then returns ``value``."""

    def __init__(self, failures: int, error: BaseException | None = None, value: object = "ok") -> None:
        self.failures, self.value = failures, value
        self.error = error if error is not None else ConnectionResetError("pshhhh-ft-ft")
        self.calls = 0

    def __call__(self) -> object:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.value


class Recorder:
    """log_fn that remembers every (wrapped, attempt, delay) it is given."""

    def __init__(self) -> None:
        self.calls: list[tuple[BaseException, int, float]] = []

    def __call__(self, wrapped: BaseException, attempt: int, delay: float) -> None:
        self.calls.append((wrapped, attempt, delay))

    @property
    def attempts(self) -> list[int]:
        return [a for _, a, _ in self.calls]

    @property
    def delays(self) -> list[float]:
        return [d for _, _, d in self.calls]


@pytest.fixture(autouse=True)
def logs() -> object:
    """Capture structured log output instead of printing it."""
    capture = CaptureRenderer()
    renderer_token = logger_module._renderer.set(capture)
    level_token = logger_module._default_level.set(logger_module.logging.DEBUG)
    yield capture
    logger_module._default_level.reset(level_token)
    logger_module._renderer.reset(renderer_token)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> object:
    """Drop cached settings and any PERSEVERE_ variables from the environment."""
    import os

    for key in [k for k in os.environ if k.startswith("PERSEVERE_")]:
        monkeypatch.delenv(key)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record time.sleep calls without actually sleeping."""
    recorded: list[float] = []
    monkeypatch.setattr(time, "sleep", recorded.append)
    return recorded


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def flaky() -> type[Flaky]:
    return Flaky

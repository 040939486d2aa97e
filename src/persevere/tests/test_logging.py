"""Tests for structured logging and the default retry log hook."""

from __future__ import annotations

import io

import orjson
import pytest

from persevere import (
    ConstantStrategy,
    RetriableError,
    call_retriable,
    configure_logging,
    default_log_fn,
    get_logger,
    log_context,
    retry,
    silent_log_fn,
)
from persevere.runtime.observability import (
    BoundLogger,
    CaptureRenderer,
    ConsoleRenderer,
    JsonRenderer,
    NoOpRenderer,
)


def _warnings(capture: CaptureRenderer) -> list:
    return [e for e in capture.entries if e.level == "warning"]


# ─────────────────────────────────────────────────────────────────────────────
# Default log hook
# ─────────────────────────────────────────────────────────────────────────────


def test_default_log_fn_describes_error_and_delay(logs: CaptureRenderer) -> None:
    wrapped = RetriableError(ConnectionResetError("pshhhh-ft-ft"), tag="modem")
    default_log_fn(wrapped, 2, 1.5)
    [entry] = _warnings(logs)
    assert entry.event == "pshhhh-ft-ft, retrying in 1.5 seconds..."
    assert entry.context["attempt"] == 2
    assert entry.context["delay"] == 1.5
    assert entry.context["tag"] == "modem"
    assert entry.context["error_type"] == "ConnectionResetError"
    assert entry.context["logger"] == "persevere.retry"


def test_default_log_fn_used_when_scope_has_none(flaky, logs: CaptureRenderer) -> None:
    with retry(strategy=ConstantStrategy(0)):
        call_retriable(flaky(failures=2))
    assert [e.event for e in _warnings(logs)] == ["pshhhh-ft-ft, retrying in 0.0 seconds..."] * 2


def test_default_log_fn_with_custom_wrapper(logs: CaptureRenderer) -> None:
    original = TimeoutError("slow disk")
    try:
        raise RuntimeError("wrapped") from original
    except RuntimeError as wrapped:
        default_log_fn(wrapped, 1, 0.3)
    [entry] = _warnings(logs)
    assert entry.event == "slow disk, retrying in 0.3 seconds..."


def test_silent_log_fn_logs_nothing(flaky, logs: CaptureRenderer) -> None:
    with retry(strategy=ConstantStrategy(0), log_fn=silent_log_fn):
        call_retriable(flaky(failures=2))
    assert _warnings(logs) == []


def test_exhaustion_logged_as_error(flaky, logs: CaptureRenderer) -> None:
    with pytest.raises(RetriableError):
        with retry(strategy=ConstantStrategy(0, max_count=1), log_fn=silent_log_fn):
            call_retriable(flaky(failures=5))
    [entry] = [e for e in logs.entries if e.level == "error"]
    assert entry.event == "retries exhausted"
    assert entry.context["attempt"] == 2


def test_scope_lifecycle_logged_at_debug(logs: CaptureRenderer) -> None:
    with retry():
        with retry():
            pass
    assert logs.events == ["retry scope entered", "retry scope entered", "retry scope exited", "retry scope exited"]
    assert [e.context["depth"] for e in logs.entries] == [1, 2, 1, 0]


def test_log_context_flows_into_retry_logs(flaky, logs: CaptureRenderer) -> None:
    with log_context(job="nightly-sync"):
        with retry(strategy=ConstantStrategy(0)):
            call_retriable(flaky(failures=1))
    [entry] = _warnings(logs)
    assert entry.context["job"] == "nightly-sync"


# ─────────────────────────────────────────────────────────────────────────────
# Logger and renderers
# ─────────────────────────────────────────────────────────────────────────────


def test_bound_logger_merges_context(logs: CaptureRenderer) -> None:
    log = get_logger("svc", region="eu").bind(attempt=1)
    log.info("hello", extra=True)
    [entry] = logs.entries
    assert entry.context == {"logger": "svc", "region": "eu", "attempt": 1, "extra": True}
    assert "attempt" not in log.unbind("attempt").context


def test_level_filtering() -> None:
    capture = CaptureRenderer()
    log = BoundLogger(context={}, _renderer=capture, _level=30)
    log.info("dropped")
    log.warning("kept")
    assert capture.events == ["kept"]


def test_console_renderer_output() -> None:
    out = io.StringIO()
    renderer = ConsoleRenderer(output=out, colors=False, show_timestamp=False)
    log = BoundLogger(context={"logger": "svc"}, _renderer=renderer)
    log.warning("disk busy, retrying in 0.5 seconds...", attempt=3)
    assert out.getvalue() == '[warning] disk busy, retrying in 0.5 seconds... attempt=3 logger="svc"\n'


def test_json_renderer_output() -> None:
    out = io.StringIO()
    log = BoundLogger(context={"logger": "svc"}, _renderer=JsonRenderer(output=out))
    log.error("retries exhausted", attempt=4, token=object())
    record = orjson.loads(out.getvalue())
    assert record["event"] == "retries exhausted"
    assert record["level"] == "error" and record["attempt"] == 4
    assert "timestamp" in record and isinstance(record["token"], str)


@pytest.mark.parametrize(("fmt", "kind"), [("console", ConsoleRenderer), ("json", JsonRenderer), ("none", NoOpRenderer)])
def test_configure_logging_formats(fmt: str, kind: type) -> None:
    assert isinstance(configure_logging(fmt, output=io.StringIO()), kind)


def test_configure_logging_rejects_unknown_format() -> None:
    with pytest.raises(ValueError, match="Unknown format"):
        configure_logging("xml")

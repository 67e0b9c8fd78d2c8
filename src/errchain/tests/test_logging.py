"""Tests for structured logging and settings.

Validates:
- Renderers (console, JSON lines, no-op)
- Level filtering, bound and scoped context
- error_chain() fields for chains and foreign exceptions
- Environment-driven settings
"""

from __future__ import annotations

import json
import threading
from io import StringIO

import pytest
from pydantic import ValidationError

import errchain
from errchain.foundation.config import ErrchainSettings, get_settings
from errchain.runtime.observability.logging import (
    ConsoleRenderer,
    JsonRenderer,
    NoOpRenderer,
    configure_logging,
    get_logger,
)


# ═════════════════════════════════════════════════════════════════════════════
# Renderers
# ═════════════════════════════════════════════════════════════════════════════


def test_configure_returns_renderer() -> None:
    assert isinstance(configure_logging(format="none"), NoOpRenderer)
    assert isinstance(configure_logging(format="json", output=StringIO()), JsonRenderer)
    assert isinstance(configure_logging(format="console", output=StringIO()), ConsoleRenderer)


def test_configure_rejects_unknown_format() -> None:
    with pytest.raises(ValueError):
        configure_logging(format="xml")


def test_console_output() -> None:
    out = StringIO()
    configure_logging(renderer=ConsoleRenderer(output=out, show_timestamp=False))

    get_logger("svc", region="eu").info("started", port=8080, debug=False)

    assert out.getvalue() == '[info] started debug=false logger="svc" port=8080 region="eu"\n'


def test_level_filtering() -> None:
    out = StringIO()
    configure_logging(format="json", level="WARNING", output=out)
    log = get_logger("svc")

    log.info("hidden")
    log.warning("shown")

    lines = out.getvalue().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["event"] == "shown"


def test_bind_and_scope(recorder) -> None:
    log = get_logger("svc").bind(request_id="r1")

    with log.scope(user="u1"):
        log.info("inside")
    log.unbind("request_id").info("outside")

    inside, outside = recorder.entries
    assert inside.context == {"user": "u1", "logger": "svc", "request_id": "r1"}
    assert outside.context == {"logger": "svc"}


def test_configuration_reaches_worker_threads(recorder) -> None:
    """Renderer and threshold set on the main thread apply to running and new threads."""
    configure_logging(format="none", level="ERROR")
    ready, go = threading.Event(), threading.Event()

    def running() -> None:
        ready.set()
        go.wait(timeout=5)
        get_logger("running").debug("from running thread")

    worker = threading.Thread(target=running)
    worker.start()
    ready.wait(timeout=5)
    configure_logging(level="DEBUG", renderer=recorder)
    go.set()
    worker.join(timeout=5)

    late = threading.Thread(target=lambda: get_logger("late").debug("from new thread"))
    late.start()
    late.join(timeout=5)

    assert sorted(recorder.events()) == ["from new thread", "from running thread"]


def test_threshold_change_reaches_worker_threads(recorder) -> None:
    configure_logging(level="ERROR", renderer=recorder)

    worker = threading.Thread(target=lambda: get_logger().warning("suppressed"))
    worker.start()
    worker.join(timeout=5)

    assert recorder.entries == []


# ═════════════════════════════════════════════════════════════════════════════
# error_chain
# ═════════════════════════════════════════════════════════════════════════════


def test_error_chain_json_fields() -> None:
    """Chains are logged with user-safe text, code, status and trace records."""
    out = StringIO()
    configure_logging(format="json", output=out)
    err = errchain.wrap(errchain.new("read: end of input"), "load failed", code=errchain.StdCode.FATAL)

    get_logger("svc").error_chain("configuration failed", err, attempt=2)

    data = json.loads(out.getvalue())
    assert data["level"] == "error"
    assert data["event"] == "configuration failed"
    assert data["error"] == "Internal Server Error"
    assert data["code"] == 2
    assert data["http_status"] == 500
    assert data["attempt"] == 2
    assert data["trace"] == err.to_records()
    assert [r["error"] for r in data["trace"]] == ["load failed", "read: end of input"]


def test_error_chain_console_lists_trace(monkeypatch: pytest.MonkeyPatch) -> None:
    """Console output puts each trace record on its own indented line."""
    monkeypatch.setenv("ERRCHAIN_CAPTURE_FRAMES", "false")
    errchain.clear_settings_cache()
    out = StringIO()
    configure_logging(renderer=ConsoleRenderer(output=out, show_timestamp=False))

    get_logger().error_chain("failed", errchain.wrap(errchain.new("a"), "b"))

    assert out.getvalue().splitlines() == [
        '[error] failed code=1 error="b" http_status=500',
        "    #0 n/a: b",
        "    #1 n/a: a",
    ]


def test_error_chain_below_threshold_is_skipped() -> None:
    out = StringIO()
    configure_logging(renderer=ConsoleRenderer(output=out), level="CRITICAL")

    get_logger().error_chain("failed", errchain.new("x"))

    assert out.getvalue() == ""


def test_error_chain_foreign(recorder) -> None:
    get_logger().error_chain("failed", KeyError("k"))

    (entry,) = recorder.entries
    assert entry.context["error"] == "'k'"
    assert entry.context["trace"] == [{"caller": "#0 n/a", "error": "'k'"}]
    assert "code" not in entry.context


def test_error_chain_none(recorder) -> None:
    get_logger().error_chain("nothing", None)

    (entry,) = recorder.entries
    assert entry.level == "error"
    assert "error" not in entry.context


# ═════════════════════════════════════════════════════════════════════════════
# Settings
# ═════════════════════════════════════════════════════════════════════════════


def test_settings_defaults() -> None:
    settings = get_settings()

    assert settings.capture_frames is True
    assert settings.full_paths is False
    assert settings.json_indent == 4
    assert settings.logging.level == "INFO"
    assert settings.logging.format == "console"


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ERRCHAIN_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("ERRCHAIN_LOG_FORMAT", "json")
    monkeypatch.setenv("ERRCHAIN_FULL_PATHS", "1")
    errchain.clear_settings_cache()

    settings = get_settings()
    assert settings.logging.level == "DEBUG"
    assert settings.logging.format == "json"
    assert settings.full_paths is True
    assert get_settings() is settings


def test_configure_falls_back_to_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ERRCHAIN_LOG_FORMAT", "json")
    errchain.clear_settings_cache()

    assert isinstance(configure_logging(output=StringIO()), JsonRenderer)


def test_settings_validation() -> None:
    with pytest.raises(ValidationError):
        ErrchainSettings(json_indent=0)

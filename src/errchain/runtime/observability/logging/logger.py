"""Structured logging for services that report error chains.

Console output is meant for a developer terminal; JSON lines feed log
pipelines. `error_chain()` logs the user-safe text next to the full trace
records, so the trusted detail only ever reaches the log sink.

Quick Start:
    >>> from errchain.runtime.observability.logging import get_logger, configure_logging
    >>> configure_logging(format="json")
    >>> log = get_logger("config-loader")
    >>> log.error_chain("configuration failed", err)
    # => {"event":"configuration failed","error":"Internal Server Error","code":2,"trace":[...],...}
"""

from __future__ import annotations

import logging
import sys
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol, TextIO, runtime_checkable

import orjson

Fields = dict[str, Any]

_scoped_fields: ContextVar[Fields] = ContextVar("errchain_log_fields", default={})


# ─────────────────────────────────────────────────────────────────────────────
# Logger
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class BoundLogger:
    """Logger carrying a fixed set of fields. Never mutated: bind()/unbind() derive new loggers.

    Example:
        >>> log = get_logger("loader").bind(path="config.json")
        >>> log.warning("config missing, using defaults")
        # => 10:30:45.120 [warning] config missing, using defaults logger="loader" path="config.json"
    """

    context: Fields = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int | None = None

    def bind(self, **fields: Any) -> BoundLogger:
        return BoundLogger({**self.context, **fields}, self._renderer, self._level)

    def unbind(self, *keys: str) -> BoundLogger:
        kept = {k: v for k, v in self.context.items() if k not in keys}
        return BoundLogger(kept, self._renderer, self._level)

    def enabled(self, level: int) -> bool:
        """Whether level passes this logger's threshold (the global one unless pinned)."""
        return level >= (_config.threshold if self._level is None else self._level)

    def _emit(self, level: int, event: str, fields: Fields) -> None:
        if not self.enabled(level):
            return
        entry = LogEntry(time.time(), _level_name(level), event, {**_scoped_fields.get(), **self.context, **fields})
        (self._renderer or _active_renderer()).render(entry)

    def debug(self, event: str, **kw: Any) -> None: self._emit(logging.DEBUG, event, kw)
    def info(self, event: str, **kw: Any) -> None: self._emit(logging.INFO, event, kw)
    def warning(self, event: str, **kw: Any) -> None: self._emit(logging.WARNING, event, kw)
    def error(self, event: str, **kw: Any) -> None: self._emit(logging.ERROR, event, kw)

    def error_chain(self, event: str, err: BaseException | None, **kw: Any) -> None:
        """Log err at error level: user-safe text, code and HTTP status for chains, and the trace records."""
        if err is None:
            self._emit(logging.ERROR, event, kw)
            return
        if not self.enabled(logging.ERROR):
            return
        from errchain.foundation.errors import as_chain
        from errchain.io.format import to_records

        fields: Fields = {"error": str(err), "trace": to_records(err)}
        if (chain := as_chain(err)) is not None:
            fields |= {"code": int(chain.code), "http_status": chain.http_status}
        self._emit(logging.ERROR, event, {**fields, **kw})

    def scope(self, **fields: Any) -> LogScope:
        """Add fields to every entry logged inside the with-block, from any logger.

        Example:
            >>> with log.scope(request_id="abc123"):
            ...     load_config()  # entries logged here carry request_id
        """
        return LogScope(fields)


@dataclass(slots=True)
class LogEntry:
    """One rendered log event."""

    timestamp: float
    level: str
    event: str
    context: Fields

    @property
    def ts_iso(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()

    @property
    def ts_human(self) -> str:
        """Wall-clock time to the millisecond."""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


class LogScope:
    """Context manager returned by BoundLogger.scope()."""

    __slots__ = ("_fields", "_token")

    def __init__(self, fields: Fields) -> None:
        self._fields = fields
        self._token = None

    def __enter__(self) -> None:
        self._token = _scoped_fields.set({**_scoped_fields.get(), **self._fields})

    def __exit__(self, *_: object) -> None:
        if self._token is not None:
            _scoped_fields.reset(self._token)
            self._token = None


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    """Sink for log entries."""

    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class ConsoleRenderer:
    """One line per event (`time [level] event key=value ...`); trace records follow indented."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    show_timestamp: bool = True

    def render(self, entry: LogEntry) -> None:
        trace = entry.context.get("trace")
        fields = {k: v for k, v in entry.context.items() if k != "trace"} if _is_trace(trace) else entry.context
        head = [entry.ts_human] if self.show_timestamp else []
        head += [f"[{entry.level}]", entry.event, *(f"{k}={_format_value(v)}" for k, v in sorted(fields.items()))]
        lines = [" ".join(head)]
        if _is_trace(trace):
            lines += [f"    {r.get('caller', '')}: {r.get('error', '')}" for r in trace]
        print("\n".join(lines), file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines, one object per event; trace records are embedded as-is."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        payload = {"timestamp": entry.ts_iso, "level": entry.level, "event": entry.event, **entry.context}
        print(orjson.dumps(payload, option=orjson.OPT_NON_STR_KEYS, default=str).decode(), file=self.output)


@dataclass(slots=True)
class NoOpRenderer:
    """Discards everything."""

    def render(self, entry: LogEntry) -> None:
        return None


# ─────────────────────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class _LogConfig:
    """Process-wide renderer and threshold, shared by every thread."""

    renderer: LogRenderer | None = None
    threshold: int = logging.INFO


_config = _LogConfig()


def configure_logging(
    format: str | None = None,  # noqa: A002
    level: str | None = None,
    *,
    output: TextIO | None = None,
    renderer: LogRenderer | None = None,
) -> LogRenderer:
    """Select the renderer and threshold for errchain's loggers and return the renderer.

    format is "console", "json" or "none"; omitted values come from
    ERRCHAIN_LOG_FORMAT / ERRCHAIN_LOG_LEVEL. An explicit renderer wins over format.
    """
    from errchain.foundation.config import get_settings

    settings = get_settings().logging
    _config.threshold = getattr(logging, (level or settings.level).upper(), logging.INFO)
    if renderer is None:
        match format or settings.format:
            case "console": renderer = ConsoleRenderer(output=output or sys.stderr)
            case "json": renderer = JsonRenderer(output=output or sys.stdout)
            case "none": renderer = NoOpRenderer()
            case other: raise ValueError(f"Unknown log format {other!r}: expected 'console', 'json' or 'none'")
    _config.renderer = renderer
    return renderer


def get_logger(name: str | None = None, **fields: Any) -> BoundLogger:
    """Logger with fields bound; name is bound as `logger`. Thresholds apply at log time."""
    if name:
        fields["logger"] = name
    return BoundLogger(fields)


def _active_renderer() -> LogRenderer:
    """Configured renderer; falls back to the console on first use."""
    if (renderer := _config.renderer) is None:
        renderer = _config.renderer = ConsoleRenderer()
    return renderer


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


def _level_name(level: int) -> str:
    return logging.getLevelName(level).lower()


def _is_trace(value: object) -> bool:
    return isinstance(value, list) and all(isinstance(r, dict) for r in value)


def _format_value(v: object) -> str:
    match v:
        case str(): return f'"{v}"'
        case bool(): return "true" if v else "false"
        case int() | float(): return str(v)
        case dict(): return f"{{{len(v)} keys}}"
        case list() | tuple(): return f"[{len(v)} items]"
        case _: return repr(v)

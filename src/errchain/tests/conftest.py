"""Shared fixtures: settings and logging isolation."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import pytest

from errchain.foundation.config import clear_settings_cache
from errchain.runtime.observability.logging import LogEntry, configure_logging


@dataclass(slots=True)
class RecordingRenderer:
    """Collects log entries in memory."""

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def events(self) -> list[str]:
        return [e.event for e in self.entries]


@pytest.fixture(autouse=True)
def isolated_settings() -> Iterator[None]:
    """Reload settings from a clean environment around each test."""
    clear_settings_cache()
    configure_logging(format="none", level="INFO")
    yield
    clear_settings_cache()
    configure_logging(format="none", level="INFO")


@pytest.fixture
def recorder() -> RecordingRenderer:
    """Route logs into memory at DEBUG level."""
    renderer = RecordingRenderer()
    configure_logging(level="DEBUG", renderer=renderer)
    return renderer

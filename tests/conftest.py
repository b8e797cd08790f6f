"""Shared pytest fixtures for the ta-client test suite.

Provides a scripted runtime adapter so the :class:`GameClient`
supervisor can be driven deterministically without spawning the real
game: tests push output lines and exit codes into the fake child and
observe the events the client fires.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.ta_client.process import ChildProcess, RuntimeAdapter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Fake runtime
# ---------------------------------------------------------------------------


class FakeChildProcess(ChildProcess):
    """A child process whose output and exit are driven by the test."""

    _next_pid = 4000

    def __init__(self, command: str, args: Sequence[str]) -> None:
        super().__init__()
        FakeChildProcess._next_pid += 1
        self._pid = FakeChildProcess._next_pid
        self.command = command
        self.args = list(args)
        self.started = False
        self.returncode: Optional[int] = None
        self.kill_calls = 0

    @property
    def pid(self) -> Optional[int]:
        return self._pid

    @property
    def connected(self) -> bool:
        return self.returncode is None

    def start(self) -> None:
        self.started = True

    def kill(self) -> None:
        self._killed = True
        self.kill_calls += 1

    def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        return self.returncode

    # -- Test drivers --------------------------------------------------

    def emit_line(self, line: str) -> None:
        assert self.started, "output delivered before start()"
        self._dispatch("data", line)

    def exit(self, code: int = 0) -> None:
        self.returncode = code
        self._dispatch("exit", code)


class FakeAdapter(RuntimeAdapter):
    """Records every spawn and hands back :class:`FakeChildProcess` objects."""

    def __init__(self) -> None:
        self.spawned: list[FakeChildProcess] = []
        self.error: Optional[BaseException] = None

    def spawn(self, command: str, args: Sequence[str] = ()) -> FakeChildProcess:
        if self.error is not None:
            raise self.error
        child = FakeChildProcess(command, args)
        self.spawned.append(child)
        return child

    @property
    def last(self) -> FakeChildProcess:
        return self.spawned[-1]


class EventLog:
    """Collects fired client events by name."""

    def __init__(self) -> None:
        self.events: list[str] = []

    def attach(self, client) -> "EventLog":
        for name in ("start", "stop", "crash"):
            client.on(name, lambda name=name: self.events.append(name))
        return self

    def count(self, name: str) -> int:
        return self.events.count(name)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def event_log() -> EventLog:
    return EventLog()

"""Tests for the event emitter and ready detectors.

Tests cover:

- ClientEvent parsing
- on / off / once registration and ordering
- Listener failures do not stop other listeners
- Coroutine listeners (helper thread and bound loop)
- sentinel_detector / default_detector
"""

from __future__ import annotations

import asyncio
import threading

import pytest

from src.ta_client.events import ClientEvent, EventEmitter
from src.ta_client.ready import DEFAULT_READY_SENTINELS, default_detector, sentinel_detector


class TestClientEvent:
    """Tests for event name parsing."""

    def test_parse_strings(self):
        assert ClientEvent.parse("start") is ClientEvent.START
        assert ClientEvent.parse(ClientEvent.CRASH) is ClientEvent.CRASH

    def test_unknown_event_raises(self):
        """Unknown names raise ValueError listing the valid ones."""
        with pytest.raises(ValueError, match="Unknown event 'launch'"):
            ClientEvent.parse("launch")


class TestEventEmitter:
    """Tests for listener registration and emission."""

    def test_registration_order(self):
        """Listeners run in the order they were registered."""
        emitter = EventEmitter()
        calls: list[int] = []
        emitter.on("start", lambda: calls.append(1))
        emitter.on("start", lambda: calls.append(2))
        assert emitter.emit("start") == 2
        assert calls == [1, 2]

    def test_events_are_separate(self):
        """Emitting one event does not call another event's listeners."""
        emitter = EventEmitter()
        calls: list[str] = []
        emitter.on("stop", lambda: calls.append("stop"))
        emitter.emit("crash")
        assert calls == []

    def test_off(self):
        """off() removes a listener; unknown listeners are ignored."""
        emitter = EventEmitter()
        calls: list[str] = []

        def listener():
            calls.append("x")

        emitter.on("stop", listener)
        emitter.off("stop", listener)
        emitter.off("stop", listener)
        emitter.emit("stop")
        assert calls == []

    def test_once(self):
        """once() listeners fire a single time."""
        emitter = EventEmitter()
        calls: list[str] = []
        emitter.once("start", lambda: calls.append("x"))
        emitter.emit("start")
        emitter.emit("start")
        assert calls == ["x"]
        assert emitter.listeners("start") == []

    def test_off_removes_once_listener(self):
        """A once() listener can be removed by its original callable."""
        emitter = EventEmitter()
        calls: list[str] = []

        def listener():
            calls.append("x")

        emitter.once("start", listener)
        emitter.off("start", listener)
        emitter.emit("start")
        assert calls == []

    def test_failing_listener_does_not_block_others(self, caplog):
        """A raising listener is logged and the rest still run."""
        emitter = EventEmitter()
        calls: list[str] = []

        def boom():
            raise RuntimeError("boom")

        emitter.on("crash", boom)
        emitter.on("crash", lambda: calls.append("after"))
        with caplog.at_level("ERROR"):
            emitter.emit("crash")
        assert calls == ["after"]
        assert "failed" in caplog.text

    def test_clear(self):
        emitter = EventEmitter()
        emitter.on("start", lambda: None)
        emitter.clear()
        assert emitter.emit("start") == 0

    def test_coroutine_listener_without_loop(self):
        """Coroutine listeners run on a helper thread when no loop is bound."""
        emitter = EventEmitter()
        done = threading.Event()

        async def listener():
            await asyncio.sleep(0)
            done.set()

        emitter.on("start", listener)
        emitter.emit("start")
        assert done.wait(5)

    def test_coroutine_listener_with_loop(self):
        """Coroutine listeners are scheduled on the bound loop."""
        loop = asyncio.new_event_loop()
        thread = threading.Thread(target=loop.run_forever, daemon=True)
        thread.start()
        try:
            emitter = EventEmitter(loop)
            done = threading.Event()
            seen_loop: list[asyncio.AbstractEventLoop] = []

            async def listener():
                seen_loop.append(asyncio.get_running_loop())
                done.set()

            emitter.on("stop", listener)
            emitter.emit("stop")
            assert done.wait(5)
            assert seen_loop == [loop]
        finally:
            loop.call_soon_threadsafe(loop.stop)
            thread.join(5)
            loop.close()


class TestReadyDetector:
    """Tests for sentinel-based ready detection."""

    def test_default_sentinels_match(self):
        """Each stock sentinel marks a line as ready."""
        detect = default_detector()
        for sentinel in DEFAULT_READY_SENTINELS:
            assert detect(f"[0003.21] Warning: {sentinel} (x)")

    def test_unrelated_line(self):
        assert not default_detector()("Log: Init: Version 1.0")

    def test_custom_sentinels(self):
        detect = sentinel_detector("Bringing World", "Game engine initialized")
        assert detect("Log: Game engine initialized")
        assert not detect("Failed to load font")

    def test_empty_sentinels_ignored(self):
        """Blank sentinels never match every line."""
        detect = sentinel_detector("", "ready")
        assert not detect("anything")
        assert detect("ready now")

    def test_default_detector_explicit_list(self):
        assert default_detector(["X"])("a X b")

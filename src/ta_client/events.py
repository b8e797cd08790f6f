"""Lifecycle events fired by :class:`~src.ta_client.client.GameClient`.

Listeners are plain zero-argument callables, kept in one ordered list
per :class:`ClientEvent`.  Coroutine functions are accepted too: their
coroutine is handed to an event loop (or a helper thread) and never
awaited by the emitter.
"""

from __future__ import annotations

import asyncio
import enum
import inspect
import logging
import threading
from typing import Any, Callable, Optional, Union

logger = logging.getLogger(__name__)

Listener = Callable[[], Any]


class ClientEvent(str, enum.Enum):
    """Events a game client can emit."""

    START = "start"
    STOP = "stop"
    CRASH = "crash"

    @classmethod
    def parse(cls, event: Union["ClientEvent", str]) -> "ClientEvent":
        """Accept either a member or its string value.

        Raises
        ------
        ValueError
            If ``event`` names no known event.
        """
        try:
            return cls(event)
        except ValueError:
            raise ValueError(
                f"Unknown event {event!r}. Available: {[e.value for e in cls]}"
            ) from None


class EventEmitter:
    """Ordered observer lists keyed by :class:`ClientEvent`.

    Parameters
    ----------
    loop : asyncio.AbstractEventLoop, optional
        Loop that coroutine listeners are scheduled on.  Without one,
        each coroutine runs to completion on its own daemon thread.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._listeners: dict[ClientEvent, list[Listener]] = {e: [] for e in ClientEvent}
        self._loop = loop

    def bind_loop(self, loop: Optional[asyncio.AbstractEventLoop]) -> None:
        """Set the loop used for coroutine listeners."""
        self._loop = loop

    def on(self, event: Union[ClientEvent, str], listener: Listener) -> None:
        self._listeners[ClientEvent.parse(event)].append(listener)

    def off(self, event: Union[ClientEvent, str], listener: Listener) -> None:
        """Remove the first registration of ``listener``.  Unknown listeners are ignored."""
        listeners = self._listeners[ClientEvent.parse(event)]
        for i, registered in enumerate(listeners):
            if registered == listener or getattr(registered, "__wrapped__", None) == listener:
                del listeners[i]
                return

    def once(self, event: Union[ClientEvent, str], listener: Listener) -> None:
        """Register ``listener`` for the next emission of ``event`` only."""
        event = ClientEvent.parse(event)

        def _once() -> Any:
            self.off(event, _once)
            return listener()

        _once.__wrapped__ = listener  # type: ignore[attr-defined]
        self.on(event, _once)

    def listeners(self, event: Union[ClientEvent, str]) -> list[Listener]:
        """Return a copy of the listeners registered for ``event``."""
        return list(self._listeners[ClientEvent.parse(event)])

    def clear(self) -> None:
        for listeners in self._listeners.values():
            listeners.clear()

    def emit(self, event: Union[ClientEvent, str]) -> int:
        """Call every listener of ``event`` in registration order.

        A listener that raises is logged and skipped; the remaining
        listeners still run.

        Returns
        -------
        int
            Number of listeners invoked.
        """
        event = ClientEvent.parse(event)
        listeners = list(self._listeners[event])
        logger.debug("Emitting %r to %d listener(s)", event.value, len(listeners))
        for listener in listeners:
            try:
                result = listener()
            except Exception:
                logger.exception("Listener %r for %r failed", listener, event.value)
                continue
            if inspect.iscoroutine(result):
                self._schedule(result, event)
        return len(listeners)

    def _schedule(self, coro: Any, event: ClientEvent) -> None:
        loop = self._loop
        if loop is not None and not loop.is_closed():
            asyncio.run_coroutine_threadsafe(coro, loop)
            return

        def _run() -> None:
            try:
                asyncio.run(coro)
            except Exception:
                logger.exception("Async listener for %r failed", event.value)

        threading.Thread(target=_run, name=f"ta-client-{event.value}", daemon=True).start()

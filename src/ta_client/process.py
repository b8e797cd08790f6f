"""Runtime adapter: the minimal child-process interface the client drives.

:class:`RuntimeAdapter` spawns a :class:`ChildProcess`, which reports
two raw events:

- ``"data"`` — called with each decoded line of output.
- ``"exit"`` — called once with the process return code.

:class:`SubprocessAdapter` implements this on top of
:class:`subprocess.Popen` with one reader thread per process and one
thread waiting for exit.  Other runtimes (or tests) can supply their
own adapter.
"""

from __future__ import annotations

import abc
import logging
import subprocess
import sys
import threading
from typing import Any, Callable, Optional, Sequence

logger = logging.getLogger(__name__)

_EVENTS = ("data", "exit")


class ChildProcess(abc.ABC):
    """A spawned process whose output and exit can be observed.

    Listeners are attached with :meth:`on` before :meth:`start` is
    called; no events are delivered until then.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[[Any], None]]] = {e: [] for e in _EVENTS}
        self._killed: bool = False

    # -- Properties ----------------------------------------------------

    @property
    @abc.abstractmethod
    def pid(self) -> Optional[int]:
        """OS process id, or ``None`` if unknown."""

    @property
    @abc.abstractmethod
    def connected(self) -> bool:
        """Whether the process is still alive."""

    @property
    def killed(self) -> bool:
        """Whether :meth:`kill` has been called."""
        return self._killed

    # -- Events --------------------------------------------------------

    def on(self, event: str, callback: Callable[[Any], None]) -> "ChildProcess":
        if event not in self._handlers:
            raise ValueError(f"Unknown process event {event!r}. Available: {list(_EVENTS)}")
        self._handlers[event].append(callback)
        return self

    def _dispatch(self, event: str, payload: Any) -> None:
        for callback in list(self._handlers[event]):
            try:
                callback(payload)
            except Exception:
                logger.exception("Process %r handler %r failed", event, callback)

    # -- Lifecycle -----------------------------------------------------

    @abc.abstractmethod
    def start(self) -> None:
        """Begin delivering ``data`` and ``exit`` events."""

    @abc.abstractmethod
    def kill(self) -> None:
        """Send a termination signal without waiting for the process to exit."""

    @abc.abstractmethod
    def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        """Block until ``exit`` has been delivered.

        Returns
        -------
        int or None
            The return code, or ``None`` if ``timeout`` expired first.
        """


class RuntimeAdapter(abc.ABC):
    """Factory for :class:`ChildProcess` instances."""

    @abc.abstractmethod
    def spawn(self, command: str, args: Sequence[str] = ()) -> ChildProcess:
        """Create the OS process for ``command`` with ``args``.

        Spawn failures (missing executable, permissions) propagate.
        """


class SubprocessChildProcess(ChildProcess):
    """:class:`ChildProcess` backed by :class:`subprocess.Popen`.

    stdout is piped with stderr merged into it.  Output is read as bytes
    and decoded as UTF-8 with replacement, since the game does not
    promise any particular encoding.
    """

    def __init__(self, popen: subprocess.Popen) -> None:
        super().__init__()
        self._popen = popen
        self._reader: Optional[threading.Thread] = None
        self._watcher: Optional[threading.Thread] = None
        self._exited = threading.Event()
        self._returncode: Optional[int] = None

    @property
    def pid(self) -> Optional[int]:
        return self._popen.pid

    @property
    def connected(self) -> bool:
        return not self._exited.is_set() and self._popen.poll() is None

    def start(self) -> None:
        if self._watcher is not None:
            return
        if self._popen.stdout is not None:
            self._reader = threading.Thread(
                target=self._read_output,
                name=f"ta-client-stdout-{self.pid}",
                daemon=True,
            )
            self._reader.start()
        self._watcher = threading.Thread(
            target=self._watch_exit,
            name=f"ta-client-exit-{self.pid}",
            daemon=True,
        )
        self._watcher.start()

    def kill(self) -> None:
        self._killed = True
        try:
            self._popen.terminate()
        except (ProcessLookupError, OSError) as exc:
            logger.debug("Terminate of PID %s failed: %s", self.pid, exc)

    def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        if not self._exited.wait(timeout):
            return None
        return self._returncode

    # -- Internal -------------------------------------------------------

    def _read_output(self) -> None:
        stream = self._popen.stdout
        try:
            for raw in iter(stream.readline, b""):
                line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
                self._dispatch("data", line)
        except (OSError, ValueError) as exc:
            logger.debug("Output reader for PID %s stopped: %s", self.pid, exc)
        finally:
            try:
                stream.close()
            except OSError:
                pass

    def _watch_exit(self) -> None:
        returncode = self._popen.wait()
        # Flush remaining output before reporting the exit.
        if self._reader is not None:
            self._reader.join()
        self._returncode = returncode
        try:
            self._dispatch("exit", returncode)
        finally:
            self._exited.set()


class SubprocessAdapter(RuntimeAdapter):
    """Spawn children with :class:`subprocess.Popen`.

    Parameters
    ----------
    cwd : str, optional
        Working directory for the child.  Defaults to the current one.
    env : dict[str, str], optional
        Environment for the child.  Defaults to the inherited one.
    """

    def __init__(self, cwd: Optional[str] = None, env: Optional[dict[str, str]] = None) -> None:
        self.cwd = cwd
        self.env = env

    def spawn(self, command: str, args: Sequence[str] = ()) -> SubprocessChildProcess:
        kwargs: dict = dict(
            cwd=self.cwd,
            env=self.env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
        if sys.platform == "win32":
            kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
        popen = subprocess.Popen([command, *args], **kwargs)
        logger.debug("Spawned %s (PID %d)", command, popen.pid)
        return SubprocessChildProcess(popen)

"""Supervisor for a single game client process.

A :class:`GameClient` owns the launch configuration, spawns the game
executable, and turns what it observes into three lifecycle events:

- ``start`` — a line of game output matched the ready detector.
- ``stop``  — the process exited after :meth:`GameClient.stop`.
- ``crash`` — the process exited without being asked to.

Typical usage::

    from src.ta_client import GameClient

    client = (
        GameClient("C:/Games/TribesAscend/Binaries/Win32/TribesAscend.exe")
        .windowed()
        .splash(False)
        .resolution(700, 450)
        .map("TrCTF-Katabatic")
        .on("start", lambda: print("ready"))
        .on("crash", lambda: print("crashed"))
    )
    client.start()
    ...
    client.stop()
"""

from __future__ import annotations

import asyncio
import enum
import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

from src.ta_client.command import LaunchCommand, create_launch_command
from src.ta_client.config import (
    ClientConfig,
    DestinationPolicy,
    Point,
    Team,
    load_client_config,
)
from src.ta_client.events import ClientEvent, EventEmitter, Listener
from src.ta_client.process import ChildProcess, RuntimeAdapter, SubprocessAdapter
from src.ta_client.ready import ReadyDetector, default_detector

logger = logging.getLogger(__name__)

_DEFAULTS = ClientConfig()


class ClientState(str, enum.Enum):
    """Observable lifecycle state of a :class:`GameClient`."""

    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    CRASHED = "crashed"


class GameClientError(Exception):
    """Raised when waiting on the game client fails."""


class GameClient:
    """Configure, launch and watch the game executable.

    Every setter returns the client itself so calls can be chained.
    The configuration is owned by this client and must not be changed
    from other threads while a process is running.

    Parameters
    ----------
    config : ClientConfig or str, optional
        Launch configuration, or just the path to the executable.
    adapter : RuntimeAdapter, optional
        How child processes are spawned.  Defaults to
        :class:`SubprocessAdapter`.
    ready_detector : ReadyDetector, optional
        Predicate applied to each output line.  Defaults to matching
        ``config.ready_sentinels``.
    loop : asyncio.AbstractEventLoop, optional
        Loop on which coroutine listeners are scheduled.
    """

    def __init__(
        self,
        config: Union[ClientConfig, str, None] = None,
        *,
        adapter: Optional[RuntimeAdapter] = None,
        ready_detector: Optional[ReadyDetector] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        if isinstance(config, ClientConfig):
            self._config = config
        elif config:
            self._config = ClientConfig(path=str(config))
        else:
            self._config = ClientConfig()

        self._adapter = adapter or SubprocessAdapter()
        self._ready_detector = ready_detector
        self._events = EventEmitter(loop)
        self._process: Optional[ChildProcess] = None
        self._running: bool = False
        self._state = ClientState.IDLE
        self._last_command: Optional[LaunchCommand] = None

    @classmethod
    def from_config_file(
        cls,
        name: str,
        configs_dir: str | Path | None = None,
        **kwargs: Any,
    ) -> "GameClient":
        """Create a client from ``configs/clients/<name>.yaml``.

        Extra keyword arguments are passed to the constructor.
        """
        return cls(load_client_config(name, configs_dir), **kwargs)

    # -- Properties ----------------------------------------------------

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def path(self) -> str:
        """The assigned path to the game executable."""
        return self._config.path

    @property
    def name(self) -> str:
        """Executable file name, used to tag log messages."""
        return os.path.basename(self._config.path.replace("\\", "/")) or self._config.path

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def running(self) -> bool:
        """``True`` from :meth:`start` until :meth:`stop` or an exit."""
        return self._running

    @property
    def connected(self) -> bool:
        """Whether a child process exists and is still alive."""
        return self._process is not None and self._process.connected

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process is not None else None

    @property
    def last_command(self) -> Optional[LaunchCommand]:
        """The command used by the most recent :meth:`start`."""
        return self._last_command

    # -- Builder -------------------------------------------------------

    def fullscreen(self, fullscreen: bool = True) -> "GameClient":
        """Run fullscreen (``True``) or windowed (``False``)."""
        self._config.fullscreen = fullscreen
        return self

    def windowed(self, window: bool = True) -> "GameClient":
        """Run in windowed mode (with title bar)."""
        self._config.windowed = window
        return self

    def position(self, x: Any = _DEFAULTS.position.x, y: Any = _DEFAULTS.position.y) -> "GameClient":
        """Set the window position in pixels.  Only applies when windowed."""
        self._config.position = Point(x, y)
        return self

    def resolution(
        self,
        width: Any = _DEFAULTS.resolution.x,
        height: Any = _DEFAULTS.resolution.y,
    ) -> "GameClient":
        """Set the window resolution in pixels."""
        self._config.resolution = Point(width, height)
        return self

    def splash(self, show: bool = True) -> "GameClient":
        self._config.show_splash = show
        return self

    def debug(self, enabled: bool = True) -> "GameClient":
        """Echo the game's output at ``INFO`` level instead of ``DEBUG``."""
        self._config.debug = enabled
        return self

    def logs(self, enabled: bool = True) -> "GameClient":
        """Toggle writing of the game's own log file."""
        self._config.log = enabled
        return self

    def log(self, path: Optional[str]) -> "GameClient":
        """Write the game's log into directory ``path``.  ``None`` disables it."""
        self._config.log_path = os.path.expanduser(str(path)) if path else None
        self._config.log = bool(path)
        return self

    def map(self, name: Optional[str]) -> "GameClient":
        """Load map ``name`` locally.  Unknown maps are ignored at launch."""
        self._config.map = name
        return self

    def connect(self, address: Optional[str], port: Optional[int] = None) -> "GameClient":
        """Join the server at ``address:port``.  ``None`` clears the target."""
        self._config.remote_address = address
        self._config.remote_port = port if address else None
        return self

    def host(self, address: Optional[str]) -> "GameClient":
        """Override the login server address."""
        self._config.host = address
        return self

    def server(self, port: Optional[int] = _DEFAULTS.server_port) -> "GameClient":
        """Launch as a server listening on ``port``.  ``None`` turns server mode off."""
        self._config.server = port is not None
        if port is not None:
            self._config.server_port = port
        return self

    def team(self, team: Union[Team, int, str]) -> "GameClient":
        self._config.team = Team.coerce(team)
        return self

    def custom(self, *args: str) -> "GameClient":
        """Append raw arguments to the command line."""
        self._config.custom.extend(args)
        return self

    def destination(self, policy: Union[DestinationPolicy, str]) -> "GameClient":
        """Choose whether the map or the remote server wins when both are set."""
        self._config.destination_policy = DestinationPolicy(policy)
        return self

    def ready_when(self, detector: Optional[ReadyDetector]) -> "GameClient":
        """Replace the ready detector.  ``None`` restores the sentinel default."""
        self._ready_detector = detector
        return self

    # -- Events --------------------------------------------------------

    def on(self, event: Union[ClientEvent, str], callback: Listener) -> "GameClient":
        """Call ``callback`` every time ``event`` fires."""
        self._events.on(event, callback)
        return self

    def off(self, event: Union[ClientEvent, str], callback: Listener) -> "GameClient":
        self._events.off(event, callback)
        return self

    def once(self, event: Union[ClientEvent, str], callback: Listener) -> "GameClient":
        self._events.once(event, callback)
        return self

    # -- Lifecycle -----------------------------------------------------

    def start(self) -> "GameClient":
        """Start the game client.

        Does nothing if the client is already running.  Spawn failures
        (missing executable, permissions) are not caught.
        """
        if self.connected:
            logger.info("[%s] The game client is already running.", self.name)
            return self

        command = create_launch_command(self._config)
        self._last_command = command
        logger.info("[%s] Starting game client: %s", self.name, " ".join(command.argv))

        process = self._adapter.spawn(command.path, command.args)
        self._process = process
        self._running = True
        self._state = ClientState.STARTING

        detector = self._ready_detector or default_detector(self._config.ready_sentinels)
        process.on("data", lambda line: self._handle_output(line, detector))
        process.on("exit", lambda code: self._handle_exit(process, code))
        process.start()

        logger.info("[%s] Game client spawned (PID %s)", self.name, process.pid)
        return self

    def stop(self) -> "GameClient":
        """Ask the game client to terminate.

        Returns immediately; the ``stop`` event fires once the process
        has actually exited.  Safe to call when nothing is running.
        """
        process = self._process
        if process is None or process.killed:
            logger.info("[%s] The game client is not running.", self.name)
            return self

        logger.info("[%s] Stopping game client (PID %s)...", self.name, process.pid)
        self._running = False
        self._state = ClientState.STOPPING
        process.kill()
        return self

    def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        """Block until the current game process has exited.

        Returns
        -------
        int or None
            The exit code, or ``None`` if no process is running.

        Raises
        ------
        GameClientError
            If ``timeout`` expires before the process exits.
        """
        process = self._process
        if process is None:
            return None
        code = process.wait(timeout)
        if code is None and process.connected:
            raise GameClientError(
                f"{self.name} (PID {process.pid}) did not exit within {timeout}s"
            )
        return code

    # -- Internal -------------------------------------------------------

    def _handle_output(self, line: str, detector: ReadyDetector) -> None:
        if self._config.debug:
            logger.info("[%s] %s", self.name, line)
        else:
            logger.debug("[%s] %s", self.name, line)

        if detector(line):
            if self._state is ClientState.STARTING:
                logger.info("[%s] Game client is ready", self.name)
                self._state = ClientState.RUNNING
            self._events.emit(ClientEvent.START)

    def _handle_exit(self, process: ChildProcess, code: Optional[int]) -> None:
        if process is not self._process:
            logger.debug("[%s] Ignoring exit of stale process (PID %s)", self.name, process.pid)
            return

        self._process = None
        if self._running:
            logger.warning("[%s] Game client crashed (exit code %s)", self.name, code)
            self._state = ClientState.CRASHED
            event = ClientEvent.CRASH
        else:
            logger.info("[%s] Game client stopped (exit code %s)", self.name, code)
            event = ClientEvent.STOP

        self._running = False
        self._events.emit(event)
        # A listener may already have started a new process.
        if self._process is None:
            self._state = ClientState.IDLE

    # -- Context manager -----------------------------------------------

    def __enter__(self) -> "GameClient":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:  # noqa: ANN001
        self.stop()
        return False

    def __repr__(self) -> str:
        return f"<{type(self).__name__}({self.path!r}, {self._state.value})>"

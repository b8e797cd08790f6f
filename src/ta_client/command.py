"""Translate a :class:`ClientConfig` into the executable's command line.

The argument order is fixed: role token, destination token, server
port, login host, logging, splash, display mode, window position,
resolution, then any custom arguments.  Values that are missing or
invalid are left out of the command line instead of raising.
"""

from __future__ import annotations

import logging
import os
import posixpath
from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import PureWindowsPath
from typing import Any, Optional

from src.ta_client.config import DEFAULT_EXECUTABLE, ClientConfig, DestinationPolicy
from src.ta_client.maps import MAPS

logger = logging.getLogger(__name__)


@dataclass
class LaunchCommand:
    """Executable path plus its ordered argument list."""

    path: str
    args: list[str] = field(default_factory=list)

    @property
    def argv(self) -> list[str]:
        """The full argument vector, executable first."""
        return [self.path, *self.args]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _team_suffix(config: ClientConfig) -> str:
    team = config.team
    if config.server or not isinstance(team, int) or isinstance(team, bool):
        return ""
    if team < 0:
        return ""
    return f"?TEAM={int(team)}"


def _map_token(config: ClientConfig, maps: Collection[str]) -> Optional[str]:
    if config.map and config.map in maps:
        return config.map
    return None


def _remote_token(config: ClientConfig) -> Optional[str]:
    if not config.remote_address:
        return None
    if config.remote_port is None or config.remote_port == "":
        return str(config.remote_address)
    return f"{config.remote_address}:{config.remote_port}"


def destination_token(
    config: ClientConfig,
    maps: Collection[str] = MAPS,
) -> Optional[str]:
    """Return the map or server the client should travel to, if any.

    ``config.destination_policy`` decides which selector is used when
    both a valid map and a remote address are configured.  The team
    suffix is attached to whichever token wins.
    """
    candidates = (_map_token(config, maps), _remote_token(config))
    if config.destination_policy is DestinationPolicy.REMOTE_FIRST:
        candidates = candidates[::-1]

    for token in candidates:
        if token:
            return token + _team_suffix(config)

    if config.map:
        logger.debug("Ignoring unknown map %r", config.map)
    return None


def log_file_path(log_dir: str, now: datetime | None = None) -> str:
    """Return the absolute, forward-slashed path of a new game log file.

    The file name is the ISO-8601 UTC timestamp (millisecond precision,
    ``Z`` suffix) with every ``:`` replaced by ``-`` so that it is a
    valid Windows file name.  Directories with a Windows drive or UNC
    share are kept as given, since they name a path on the machine the
    game sees rather than on this host.
    """
    if now is None:
        now = datetime.now(tz=timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    name = stamp.replace(":", "-") + ".log"
    if PureWindowsPath(log_dir).drive:
        return posixpath.join(log_dir.replace("\\", "/"), name)
    return os.path.abspath(os.path.join(log_dir, name)).replace("\\", "/")


def create_launch_command(
    config: ClientConfig,
    *,
    now: datetime | None = None,
    maps: Collection[str] = MAPS,
) -> LaunchCommand:
    """Build the :class:`LaunchCommand` for ``config``.

    Parameters
    ----------
    config : ClientConfig
        Client configuration.  Not modified.
    now : datetime, optional
        Timestamp used to name the game log file.  Defaults to the
        current UTC time; pass a fixed value for reproducible output.
    maps : Collection[str]
        Allow-list of map names.  Defaults to the shipped map list.

    Returns
    -------
    LaunchCommand
    """
    command = LaunchCommand(path=config.path or DEFAULT_EXECUTABLE)
    args = command.args

    windowed = config.is_windowed
    has_remote = bool(config.remote_address)

    # Role.
    if config.server and not has_remote:
        args.append("server")

    # Destination.
    destination = destination_token(config, maps)
    if destination:
        args.append(destination)

    # Server port.
    if config.server:
        args.append(f"-port={config.server_port}")

    # Login server.
    if config.host:
        args.append(f"-hostx={config.host}")

    # Logs.
    if config.log and config.log_path:
        args.append(f'-abslog="{log_file_path(config.log_path, now)}"')
    else:
        args.append("-nowrite")

    # Splash.
    if not config.show_splash:
        args.append("-nosplash")

    # Fullscreen / windowed.
    args.append("-windowed" if windowed else "-fullscreen")

    # Position.
    if windowed and _is_number(config.position.x):
        args.append(f"-posx={config.position.x}")
    if windowed and _is_number(config.position.y):
        args.append(f"-posy={config.position.y}")

    # Resolution.
    if _is_number(config.resolution.x):
        args.append(f"-resx={config.resolution.x}")
    if _is_number(config.resolution.y):
        args.append(f"-resy={config.resolution.y}")

    # Custom.
    for arg in config.custom:
        if isinstance(arg, str):
            args.append(arg)
        else:
            logger.debug("Skipping non-string custom argument %r", arg)

    return command

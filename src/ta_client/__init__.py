"""Tribes Ascend client launcher — build, spawn and supervise the game.

Provides a fluent configuration API for the game executable's command
line and a supervisor that watches the running process and reports
when it becomes ready, is stopped, or crashes.

Typical usage::

    from src.ta_client import GameClient

    client = GameClient.from_config_file("katabatic-windowed")
    client.on("start", lambda: print("game is up"))
    client.start()
    # … play / test against the running client …
    client.stop()
"""

from src.ta_client.config import (
    ClientConfig,
    DestinationPolicy,
    Point,
    Team,
    load_client_config,
)
from src.ta_client.command import LaunchCommand, create_launch_command
from src.ta_client.events import ClientEvent, EventEmitter
from src.ta_client.maps import MAPS, is_valid_map
from src.ta_client.process import ChildProcess, RuntimeAdapter, SubprocessAdapter
from src.ta_client.ready import DEFAULT_READY_SENTINELS, ReadyDetector, sentinel_detector
from src.ta_client.client import ClientState, GameClient, GameClientError

__all__ = [
    "ClientConfig",
    "DestinationPolicy",
    "Point",
    "Team",
    "load_client_config",
    "LaunchCommand",
    "create_launch_command",
    "ClientEvent",
    "EventEmitter",
    "MAPS",
    "is_valid_map",
    "ChildProcess",
    "RuntimeAdapter",
    "SubprocessAdapter",
    "DEFAULT_READY_SENTINELS",
    "ReadyDetector",
    "sentinel_detector",
    "ClientState",
    "GameClient",
    "GameClientError",
]

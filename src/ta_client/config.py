"""Game client configuration data structures.

A :class:`ClientConfig` describes everything the launch command needs
to know about a game client: which executable to run, how to size and
place its window, which map or server to go to, and where the game
should write its own log.

Configs can be built in code through the fluent
:class:`~src.ta_client.client.GameClient` setters, or loaded from YAML
files via :func:`load_client_config`.  String values in YAML configs
support environment variable expansion using ``$VAR`` or ``${VAR}``
syntax, as well as ``~`` for the user home directory.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from src.ta_client.ready import DEFAULT_READY_SENTINELS

logger = logging.getLogger(__name__)

#: Executable launched when no path is configured.
DEFAULT_EXECUTABLE = "TribesAscend.exe"

# Default search path for client config YAML files.
_CONFIGS_DIR = Path(__file__).resolve().parent.parent.parent / "configs" / "clients"

# Pattern matching $VAR or ${VAR} for environment variable expansion.
_ENV_VAR_RE = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


class Team(enum.IntEnum):
    """Team the client asks to join when travelling to a map or server."""

    NONE = -1
    DIAMOND_SWORD = 0
    BLOOD_EAGLE = 1
    SPECTATOR = 255

    @classmethod
    def coerce(cls, value: Any) -> Any:
        """Map ints and member names onto :class:`Team`.

        Values that match no member are returned unchanged so that the
        launch command can decide whether to use or omit them.
        """
        if isinstance(value, cls) or isinstance(value, bool):
            return value
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return value
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_").replace(" ", "_")
            if key in cls.__members__:
                return cls[key]
        return value


class DestinationPolicy(str, enum.Enum):
    """Which destination selector wins when both a map and a server are set."""

    MAP_FIRST = "map_first"
    REMOTE_FIRST = "remote_first"


@dataclass
class Point:
    """A pair of screen coordinates (pixels).

    Either coordinate may be left as a non-number; such coordinates are
    dropped from the command line rather than rejected.
    """

    x: Any = 0
    y: Any = 0

    @classmethod
    def coerce(cls, value: Any) -> "Point":
        """Build a :class:`Point` from a ``Point``, ``(x, y)`` or ``{x:, y:}``."""
        if isinstance(value, Point):
            return value
        if isinstance(value, dict):
            return cls(value.get("x"), value.get("y"))
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return cls(value[0], value[1])
        return cls(None, None)


@dataclass
class ClientConfig:
    """Declarative description of how to launch the game client.

    Parameters
    ----------
    path : str
        Path to the game executable.  Falls back to
        ``TribesAscend.exe`` when empty.
    fullscreen : bool
        Request fullscreen mode.
    windowed : bool
        Request windowed mode.  The client runs windowed when this is
        set *or* when ``fullscreen`` is off.
    position : Point
        Window position in pixels.  Only used in windowed mode.
    resolution : Point
        Window resolution in pixels.
    show_splash : bool
        Show the splash screen on startup.
    debug : bool
        Echo every line of game output at ``INFO`` instead of ``DEBUG``.
    map : str, optional
        Map to load locally.  Ignored unless on the map allow-list.
    log : bool
        Let the game write its own log file into ``log_path``.
    log_path : str, optional
        Directory for the game's log file.
    host : str, optional
        Login server override.
    remote_address : str, optional
        Server address to connect to.
    remote_port : int, optional
        Port of the server to connect to.
    server : bool
        Launch as a server.
    server_port : int
        Port the server listens on.
    team : Team
        Team to join on arrival.
    custom : list[str]
        Extra arguments appended to the command line verbatim.
    destination_policy : DestinationPolicy
        Which of ``map`` / ``remote_address`` wins when both are set.
    ready_sentinels : tuple[str, ...]
        Output substrings that mark the client as started.
    """

    path: str = DEFAULT_EXECUTABLE

    # Display
    fullscreen: bool = True
    windowed: bool = False
    position: Point = field(default_factory=Point)
    resolution: Point = field(default_factory=lambda: Point(1920, 1080))
    show_splash: bool = True
    debug: bool = False

    # Destination
    map: Optional[str] = None
    remote_address: Optional[str] = None
    remote_port: Optional[int] = None
    destination_policy: DestinationPolicy = DestinationPolicy.MAP_FIRST
    team: Team = Team.NONE

    # Networking role
    host: Optional[str] = None
    server: bool = False
    server_port: int = 7777

    # Game log
    log: bool = False
    log_path: Optional[str] = None

    custom: list = field(default_factory=list)
    ready_sentinels: tuple[str, ...] = DEFAULT_READY_SENTINELS

    def __post_init__(self) -> None:
        self.path = os.path.expanduser(str(self.path)) if self.path else DEFAULT_EXECUTABLE
        if self.log_path:
            self.log_path = os.path.expanduser(str(self.log_path))
        self.position = Point.coerce(self.position)
        self.resolution = Point.coerce(self.resolution)
        self.team = Team.coerce(self.team)
        if isinstance(self.destination_policy, str):
            self.destination_policy = DestinationPolicy(self.destination_policy)
        self.custom = list(self.custom or [])
        self.ready_sentinels = tuple(self.ready_sentinels or ())

    @property
    def is_windowed(self) -> bool:
        """Whether the client will run in a window."""
        return bool(self.windowed or not self.fullscreen)

    def evolve(self, **changes: Any) -> "ClientConfig":
        """Return a copy of this config with *changes* applied."""
        changes.setdefault("position", dataclasses.replace(self.position))
        changes.setdefault("resolution", dataclasses.replace(self.resolution))
        changes.setdefault("custom", list(self.custom))
        return dataclasses.replace(self, **changes)


def _expand_vars(value: str) -> str:
    """Expand ``$VAR`` and ``${VAR}`` references in a string.

    Undefined variables are left as-is (no error).

    Parameters
    ----------
    value : str
        String potentially containing environment variable references.

    Returns
    -------
    str
        String with known variables expanded.
    """

    def _replace(match: re.Match) -> str:
        braced = match.group(1)  # From ${...}
        bare = match.group(2)  # From $VAR
        original: str = match.group(0) or ""

        if braced is not None:
            # Support ${VAR:-default} syntax.
            if ":-" in braced:
                var_name, default = braced.split(":-", 1)
                return os.environ.get(var_name, default)
            return os.environ.get(braced, original)

        return os.environ.get(bare or "", original)

    return _ENV_VAR_RE.sub(_replace, value)


def _expand_vars_recursive(data: Any) -> Any:
    """Expand environment variables in every string nested in *data*.

    Walks dicts and lists so that ``custom`` argument lists and
    ``position`` mappings are expanded as well as top-level values.
    """
    if isinstance(data, str):
        return _expand_vars(data)
    if isinstance(data, dict):
        return {key: _expand_vars_recursive(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_expand_vars_recursive(value) for value in data]
    return data


def load_client_config(
    name: str,
    configs_dir: str | Path | None = None,
) -> ClientConfig:
    """Load a :class:`ClientConfig` from a YAML file.

    Searches ``configs_dir`` (default ``configs/clients/``) for a file
    named ``<name>.yaml``.  String values in the YAML undergo
    environment variable expansion (``$VAR`` / ``${VAR}``) and home
    directory expansion (``~``) for ``path`` and ``log_path``.

    Parameters
    ----------
    name : str
        Config identifier matching the YAML filename (without extension).
    configs_dir : str or Path, optional
        Override the default config directory.

    Returns
    -------
    ClientConfig

    Raises
    ------
    FileNotFoundError
        If no YAML file is found for ``name``.
    ValueError
        If the YAML contains unknown fields or invalid values.
    """
    search_dir = Path(configs_dir) if configs_dir else _CONFIGS_DIR
    config_path = search_dir / f"{name}.yaml"

    if not config_path.exists():
        raise FileNotFoundError(
            f"No client config found at {config_path}. "
            f"Available configs: {[p.stem for p in search_dir.glob('*.yaml')]}"
        )

    logger.info("Loading client config from %s", config_path)
    with open(config_path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(
            f"Expected a YAML mapping in {config_path}, got {type(raw).__name__}"
        )

    raw = _expand_vars_recursive(raw)

    valid_fields = {f.name for f in dataclasses.fields(ClientConfig)}
    unknown = set(raw) - valid_fields
    if unknown:
        raise ValueError(
            f"Unknown fields in {config_path}: {sorted(unknown)}. "
            f"Valid fields: {sorted(valid_fields)}"
        )

    try:
        return ClientConfig(**raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid config in {config_path}: {exc}") from exc

"""Shared utilities for smoke-test scripts.

Provides consistent logging setup, timing, game log
lookup, and common argument parsing for all ``smoke_*.py`` scripts.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

_COLORS = {
    "DEBUG": "\033[90m",  # grey
    "INFO": "\033[36m",  # cyan
    "WARNING": "\033[33m",  # yellow
    "ERROR": "\033[31m",  # red
    "CRITICAL": "\033[1;31m",  # bold red
}
_RESET = "\033[0m"


class _ColorFormatter(logging.Formatter):
    """Formatter that prepends a colored level tag and timestamp."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now(tz=timezone.utc).strftime("%H:%M:%S")
        color = _COLORS.get(record.levelname, "")
        tag = f"{color}[{ts}] {record.levelname:<8}{_RESET}"
        message = f"{tag} {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure root logger with colored output.

    Parameters
    ----------
    verbose : bool
        If ``True``, set level to ``DEBUG``; otherwise ``INFO``.

    Returns
    -------
    logging.Logger
        The root logger.
    """
    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_ColorFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    # Avoid duplicate handlers on re-init
    root.handlers.clear()
    root.addHandler(handler)
    return root


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------


class Timer:
    """Simple context-manager stopwatch."""

    def __init__(self, label: str = "") -> None:
        self.label = label
        self.elapsed: float = 0.0
        self._start: float = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *_: object) -> None:
        self.elapsed = time.perf_counter() - self._start
        logger.debug("%s took %.2fs", self.label or "block", self.elapsed)


# ---------------------------------------------------------------------------
# Common CLI arguments
# ---------------------------------------------------------------------------


def base_argparser(description: str) -> argparse.ArgumentParser:
    """Return an ``ArgumentParser`` pre-loaded with common options.

    Includes ``--config``, ``--configs-dir`` and ``--verbose``.
    """
    p = argparse.ArgumentParser(description=description)
    p.add_argument(
        "--config",
        default="katabatic-windowed",
        help="Client config name (default: %(default)s)",
    )
    p.add_argument(
        "--configs-dir",
        type=Path,
        default=None,
        help="Override config directory (default: configs/clients/)",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug-level logging",
    )
    return p


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def newest_log(log_dir: str | Path) -> Path | None:
    """Return the most recently modified ``*.log`` file in *log_dir*."""
    logs = sorted(Path(log_dir).glob("*.log"), key=lambda p: p.stat().st_mtime)
    return logs[-1] if logs else None


def log_shows_map(log_file: Path, map_name: str) -> bool:
    """Return ``True`` if the game log shows *map_name* was brought up."""
    content = log_file.read_text(encoding="utf-8", errors="replace")
    return f"Bringing World {map_name}.TheWorld up for play" in content

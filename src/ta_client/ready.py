"""Readiness heuristics for the game client's console output.

The game prints no explicit "ready" banner.  Two warnings that the
executable always emits early in its own startup (a shader compile
warning and a font load warning) are used instead as a signal that the
engine is up.  Both strings are tied to a specific build of the
executable, so the check is exposed as a pluggable predicate.
"""

from __future__ import annotations

from typing import Callable, Iterable

#: Predicate called with each line of child output.
ReadyDetector = Callable[[str], bool]

#: Substrings the stock executable prints once its engine is initialised.
DEFAULT_READY_SENTINELS: tuple[str, ...] = (
    "Failed to compile global shader",
    "Failed to load font",
)


def sentinel_detector(*substrings: str) -> ReadyDetector:
    """Build a detector that matches when any of *substrings* is present.

    Parameters
    ----------
    *substrings : str
        Fixed strings to look for.  Empty strings are ignored so that a
        blank YAML entry cannot mark every line as ready.

    Returns
    -------
    ReadyDetector
    """
    needles = tuple(s for s in substrings if s)

    def _detect(line: str) -> bool:
        return any(needle in line for needle in needles)

    _detect.sentinels = needles  # type: ignore[attr-defined]
    return _detect


def default_detector(sentinels: Iterable[str] | None = None) -> ReadyDetector:
    """Return a detector for *sentinels*, or the stock sentinels if ``None``."""
    if sentinels is None:
        sentinels = DEFAULT_READY_SENTINELS
    return sentinel_detector(*sentinels)

"""Tests for the shared smoke-script helpers.

Tests cover:

- Timer elapsed measurement and labelled debug logging
- Game log lookup and map verification
"""

from __future__ import annotations

import os
from pathlib import Path

from scripts._smoke_utils import Timer, log_shows_map, newest_log


class TestTimer:
    """Tests for the context-manager stopwatch."""

    def test_elapsed_and_label_logged(self, caplog):
        """The label and elapsed time are logged when the block exits."""
        with caplog.at_level("DEBUG", logger="scripts._smoke_utils"):
            with Timer("start") as t:
                pass
        assert t.elapsed >= 0.0
        assert "start took" in caplog.text

    def test_unlabelled(self, caplog):
        with caplog.at_level("DEBUG", logger="scripts._smoke_utils"):
            with Timer():
                pass
        assert "block took" in caplog.text


class TestGameLogHelpers:
    """Tests for newest_log and log_shows_map."""

    def test_newest_log(self, tmp_path: Path):
        old = tmp_path / "a.log"
        new = tmp_path / "b.log"
        old.write_text("", encoding="utf-8")
        new.write_text("", encoding="utf-8")
        os.utime(old, (1_000, 1_000))
        os.utime(new, (2_000, 2_000))
        assert newest_log(tmp_path) == new

    def test_newest_log_empty(self, tmp_path: Path):
        assert newest_log(tmp_path) is None

    def test_log_shows_map(self, tmp_path: Path):
        log = tmp_path / "game.log"
        log.write_text(
            "Log: Bringing World TrCTF-Katabatic.TheWorld up for play (0) at 2026\n",
            encoding="utf-8",
        )
        assert log_shows_map(log, "TrCTF-Katabatic")
        assert not log_shows_map(log, "TrCTF-Drydock")

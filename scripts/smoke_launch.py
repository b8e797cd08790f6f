#!/usr/bin/env python
"""Smoke test: launch the game client, wait for it to come up, shut it down.

Usage::

    python scripts/smoke_launch.py
    python scripts/smoke_launch.py --wait 10          # keep alive 10s instead of 5
    python scripts/smoke_launch.py --startup-timeout 300
    python scripts/smoke_launch.py --verify-map       # check the game log for the map
    python scripts/smoke_launch.py -v                 # debug logging (echo game output)
"""

from __future__ import annotations

import logging
import sys
import threading

# Allow running from project root
sys.path.insert(0, str(__import__("pathlib").Path(__file__).resolve().parent.parent))

from scripts._smoke_utils import (
    Timer,
    base_argparser,
    log_shows_map,
    newest_log,
    setup_logging,
)

logger = logging.getLogger(__name__)


def main() -> int:
    parser = base_argparser("Launch the game client, verify it starts, and shut it down.")
    parser.add_argument(
        "--wait",
        type=float,
        default=5.0,
        help="Seconds to keep the game running after it starts (default: %(default)s)",
    )
    parser.add_argument(
        "--startup-timeout",
        type=float,
        default=120.0,
        help="Seconds to wait for the start event (default: %(default)s)",
    )
    parser.add_argument(
        "--verify-map",
        action="store_true",
        help="Check the game log for the configured map after shutdown",
    )
    args = parser.parse_args()
    setup_logging(args.verbose)

    # ── Load config ──────────────────────────────────────────────────
    from src.ta_client import GameClient

    logger.info("Loading config: %s", args.config)
    client = GameClient.from_config_file(args.config, args.configs_dir)
    client.debug(args.verbose)
    config = client.config

    started = threading.Event()
    crashed = threading.Event()
    client.once("start", started.set)
    client.on("crash", crashed.set)

    # ── Start ────────────────────────────────────────────────────────
    logger.info("Starting game client ...")
    with Timer("start") as t:
        client.start()
        started.wait(args.startup_timeout)
    if crashed.is_set():
        logger.error("Game client crashed during startup")
        return 1
    if not started.is_set():
        logger.error("No start event within %.0fs", args.startup_timeout)
        client.stop()
        client.wait(30)
        return 1
    logger.info("Game is READY (PID %s, took %.1fs)", client.pid, t.elapsed)

    # ── Wait ─────────────────────────────────────────────────────────
    logger.info("Keeping game alive for %.0fs ...", args.wait)
    if crashed.wait(args.wait):
        logger.error("Game client crashed while running")
        return 1

    # ── Stop ─────────────────────────────────────────────────────────
    logger.info("Shutting down ...")
    with Timer("stop") as t:
        client.stop()
        code = client.wait(30)
    logger.info("Shutdown complete (exit code %s, %.1fs)", code, t.elapsed)

    if crashed.is_set():
        logger.error("Game client reported a crash during shutdown")
        return 1

    # ── Verify log ───────────────────────────────────────────────────
    if args.verify_map:
        if not (config.log and config.log_path and config.map):
            logger.error("--verify-map needs log, log_path and map in the config")
            return 1
        log_file = newest_log(config.log_path)
        if log_file is None:
            logger.error("No game log found in %s", config.log_path)
            return 1
        if not log_shows_map(log_file, config.map):
            logger.error("Map %s was not loaded according to %s", config.map, log_file)
            return 1
        logger.info("Map check: PASSED (%s)", log_file)

    logger.info("All checks PASSED")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as exc:
        logger.critical("FAILED: %s", exc, exc_info=True)
        sys.exit(1)

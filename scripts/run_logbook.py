#!/usr/bin/env python3
"""Run the automatic logbook against a live Signal K server.

Usage
-----
Set environment variables and run::

    export LOGBOOK_SIGNALK_URL="http://localhost:3000"
    export LOGBOOK_MQTT_ENABLED=1
    export LOGBOOK_MQTT_HOST="localhost"
    export LOGBOOK_LOG_DIR="$HOME/logbook"
    python scripts/run_logbook.py

Options::

    --log-dir DIR        Override LOGBOOK_LOG_DIR
    --verbose, -v        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging

from pylogbook import Logbook, LogbookConfig


async def main() -> None:
    parser = argparse.ArgumentParser(description="Keep an automatic ship's log from Signal K telemetry.")
    parser.add_argument("--log-dir", help="Directory for daily log files (default: LOGBOOK_LOG_DIR)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    overrides = {"log_dir": args.log_dir} if args.log_dir else {}
    config = LogbookConfig.from_env(**overrides)

    async with Logbook(config):
        await asyncio.Event().wait()


if __name__ == "__main__":
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(main())

#!/usr/bin/env python3
"""Replay recorded Signal K deltas through the trigger engine.

Reads a file with one Signal K delta JSON object per line, feeds every
update through the rules in order, and writes the resulting entries to a
log directory. Handy for checking rule changes against a recorded passage.

Usage
-----
    python scripts/replay_deltas.py passage.jsonl --log-dir /tmp/replayed
    python scripts/replay_deltas.py passage.jsonl --ticks 30 --summary
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pylogbook import JsonLogStore, LogbookState, TelemetryMirror, TriggerEngine, summarize_days
from pylogbook.ingestion.delta import parse_delta


async def main() -> None:
    parser = argparse.ArgumentParser(description="Replay Signal K deltas into a log directory.")
    parser.add_argument("deltas", help="File with one delta JSON object per line")
    parser.add_argument("--log-dir", required=True, help="Directory for the replayed daily log files")
    parser.add_argument(
        "--ticks",
        type=int,
        default=0,
        help="Run a record promotion tick every N delta lines (default: only at the end)",
    )
    parser.add_argument("--summary", action="store_true", help="Print entries per day when done")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    store = JsonLogStore(args.log_dir)
    host = TelemetryMirror()
    engine = TriggerEngine(LogbookState(), store, host)

    lines = Path(args.deltas).read_text(encoding="utf-8").splitlines()
    skipped = 0
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError:
            skipped += 1
            continue
        if not isinstance(payload, dict):
            skipped += 1
            continue
        for update in parse_delta(payload):
            host.update(update.path, update.value)
            await engine.dispatch(update.path, update.value)
        if args.ticks and number % args.ticks == 0:
            await engine.promote_records()
    await engine.promote_records()

    if skipped:
        print(f"Skipped {skipped} unparseable lines", file=sys.stderr)
    if args.summary:
        for day in await summarize_days(store):
            print(f"{day.date}  {day.count:4d} entries")


if __name__ == "__main__":
    asyncio.run(main())

"""Date-partitioned log persistence.

The trigger engine only depends on :class:`LogSink`. Two stores are
provided: :class:`MemoryLogStore` for tests and embedding, and
:class:`JsonLogStore`, one JSON array file per UTC day.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from pylogbook.exceptions import LogPersistenceError
from pylogbook.models.entry import LogEntry

_logger = logging.getLogger(__name__)

_DATE_KEY_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


class LogSink(Protocol):
    """Append-only capability the trigger engine writes through."""

    async def append_entry(self, date_key: str, entry: LogEntry) -> None: ...


class LogReader(Protocol):
    async def list_dates(self) -> list[str]: ...

    async def get_entries(self, date_key: str) -> list[LogEntry]: ...


def _check_date_key(date_key: str) -> str:
    if not _DATE_KEY_RE.fullmatch(date_key):
        raise LogPersistenceError(f"invalid date key {date_key!r}", date_key=date_key)
    return date_key


class MemoryLogStore:
    """Ordered in-memory log."""

    def __init__(self) -> None:
        self._days: dict[str, list[LogEntry]] = {}

    async def append_entry(self, date_key: str, entry: LogEntry) -> None:
        self._days.setdefault(_check_date_key(date_key), []).append(entry)

    async def list_dates(self) -> list[str]:
        return sorted(self._days)

    async def get_entries(self, date_key: str) -> list[LogEntry]:
        return list(self._days.get(_check_date_key(date_key), []))

    @property
    def entries(self) -> list[LogEntry]:
        """All entries, oldest day first."""
        return [entry for day in sorted(self._days) for entry in self._days[day]]


class JsonLogStore:
    """One ``<YYYY-MM-DD>.json`` file per day, each a JSON array of entries.

    Appends rewrite the day file through a temporary file and
    :func:`os.replace`, so a crash never leaves a truncated day behind.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._directory = Path(directory)
        self._lock = asyncio.Lock()

    @property
    def directory(self) -> Path:
        return self._directory

    def _day_file(self, date_key: str) -> Path:
        return self._directory / f"{_check_date_key(date_key)}.json"

    def _read_day(self, date_key: str) -> list[dict[str, Any]]:
        path = self._day_file(date_key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise LogPersistenceError(f"Reading {path} failed: {exc}", date_key=date_key) from exc
        try:
            records = json.loads(text)
        except json.JSONDecodeError as exc:
            raise LogPersistenceError(f"{path} is not valid JSON", date_key=date_key) from exc
        if not isinstance(records, list):
            raise LogPersistenceError(f"{path} does not hold a list of entries", date_key=date_key)
        return records

    def _append_sync(self, date_key: str, record: dict[str, Any]) -> None:
        records = self._read_day(date_key)
        records.append(record)
        path = self._day_file(date_key)
        tmp = path.with_suffix(".json.tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            raise LogPersistenceError(f"Writing {path} failed: {exc}", date_key=date_key) from exc

    async def append_entry(self, date_key: str, entry: LogEntry) -> None:
        record = entry.to_record()
        async with self._lock:
            await asyncio.to_thread(self._append_sync, date_key, record)
        _logger.debug("Appended entry to %s: %s", date_key, entry.text)

    async def list_dates(self) -> list[str]:
        def _scan() -> list[str]:
            if not self._directory.is_dir():
                return []
            return sorted(p.stem for p in self._directory.glob("*.json") if _DATE_KEY_RE.fullmatch(p.stem))

        return await asyncio.to_thread(_scan)

    async def get_entries(self, date_key: str) -> list[LogEntry]:
        records = await asyncio.to_thread(self._read_day, date_key)
        try:
            return [LogEntry.model_validate(record) for record in records]
        except ValidationError as exc:
            raise LogPersistenceError(f"Malformed entry in {date_key}: {exc}", date_key=date_key) from exc


@dataclass(frozen=True, slots=True)
class DaySummary:
    date: str
    count: int


async def summarize_days(store: LogReader) -> list[DaySummary]:
    """Entry count per logged day, newest day first."""
    summaries = [DaySummary(date, len(await store.get_entries(date))) for date in await store.list_dates()]
    summaries.reverse()
    return summaries

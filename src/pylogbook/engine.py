"""Trigger engine.

Owns one :class:`~pylogbook.state.store.LogbookState` and turns updates and
timer ticks into log writes.

Invocation is serialized but completion is not: a new update may start
while the previous one is still waiting on the log store. Each dispatch
therefore runs in two phases. Everything up to the first ``await`` is
synchronous (rule evaluation, the immediate patch, recording the raw
observation, building the entry snapshots); the writes then go through
:class:`EntryWriter`, a FIFO sequencer, so entries land in the order the
updates were dispatched. The deferred patch is merged after the writes
settle.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pylogbook._constants import COURSE_CHANGE_THRESHOLD_DEG, PATH_GNSS_TYPE, PATH_POSITION
from pylogbook.formatting import snapshot_to_entry
from pylogbook.host import TelemetryHost
from pylogbook.ingestion.normalize import safe_str
from pylogbook.models.entry import LogEntry
from pylogbook.models.position import Position
from pylogbook.promoters import RECORD_METRICS, plan_promotion
from pylogbook.state.store import CANDIDATE_RESET, LogbookState, StatePatch
from pylogbook.storage import LogSink
from pylogbook.triggers import PendingEntry, evaluate

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def resolve_position(
    snapshot_position: Position | None,
    explicit: Position | None,
    host: TelemetryHost,
) -> Position | None:
    """Pick the position an entry is logged at.

    An explicit position wins (records keep the fix from when they
    happened). Otherwise the host's live position is used, tagged with the
    host's GNSS type or the snapshot's own source. When the host has no
    position the snapshot's is kept.
    """
    if explicit is not None:
        return explicit
    live = Position.parse(host.read_current_value(PATH_POSITION))
    if live is None:
        return snapshot_position
    source = safe_str(host.read_current_value(PATH_GNSS_TYPE))
    if source is None and snapshot_position is not None:
        source = snapshot_position.source
    return live.with_source(source)


class EntryWriter:
    """Builds entries and appends them to the sink one at a time, in call order."""

    def __init__(
        self,
        sink: LogSink,
        host: TelemetryHost,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._sink = sink
        self._host = host
        self._clock = clock
        self._lock = asyncio.Lock()

    def build(self, state: LogbookState, pending: PendingEntry) -> LogEntry:
        entry = snapshot_to_entry(state, pending.text, now=self._clock())
        update: dict[str, Any] = dict(pending.fields)
        update["position"] = resolve_position(entry.position, pending.position, self._host)
        return entry.model_copy(update=update)

    async def append(self, entry: LogEntry, status: str) -> None:
        # asyncio.Lock wakes waiters first-in first-out.
        async with self._lock:
            await self._sink.append_entry(entry.date_key, entry)
        self._host.report_status(status)


class TriggerEngine:
    """Rule dispatcher and periodic promoters for one vessel session.

    Parameters
    ----------
    state : LogbookState
        Derived state; owned by this engine from now on.
    sink : LogSink
        Log persistence.
    host : TelemetryHost
        Canonical telemetry reads and status reporting.
    course_change_threshold : float
        Degrees of cumulative course change logged while sailing.
    clock : callable
        Fallback timestamp source when the state carries no
        ``navigation.datetime``.
    """

    def __init__(
        self,
        state: LogbookState,
        sink: LogSink,
        host: TelemetryHost,
        *,
        course_change_threshold: float = COURSE_CHANGE_THRESHOLD_DEG,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._state = state
        self._host = host
        self._writer = EntryWriter(sink, host, clock=clock)
        self._course_change_threshold = course_change_threshold

    @property
    def state(self) -> LogbookState:
        return self._state

    async def dispatch(self, path: str, value: Any) -> StatePatch | None:
        """Process one telemetry update.

        Returns the deferred patch that was merged, if any. A failed log
        write propagates; the deferred patch is then not merged.
        """
        state = self._state
        outcome = evaluate(
            path,
            value,
            state,
            self._host,
            course_change_threshold=self._course_change_threshold,
        )
        if outcome is None:
            state.observe(path, value)
            return None

        state.apply(outcome.immediate)
        state.observe(path, value)
        built = [(self._writer.build(state, pending), pending.status_message) for pending in outcome.entries]

        for entry, status in built:
            await self._writer.append(entry, status)

        state.apply(outcome.deferred)
        return outcome.deferred

    async def promote_records(self) -> StatePatch:
        """Short-interval tick: promote candidates that beat the leg records.

        Metrics are written one after another in a fixed order. A failed
        write does not stop the remaining metrics; candidates are reset
        regardless and the first failure is raised afterwards.
        """
        state = self._state
        updates: StatePatch = dict(CANDIDATE_RESET)
        if not state.is_under_way:
            state.apply(updates)
            return updates

        failure: Exception | None = None
        for metric in RECORD_METRICS:
            planned = plan_promotion(state, metric)
            if planned is None:
                continue
            pending, value = planned
            try:
                await self._writer.append(self._writer.build(state, pending), pending.status_message)
            except Exception as exc:
                _logger.warning("Record entry for %s could not be written", metric.name, exc_info=True)
                if failure is None:
                    failure = exc
                continue
            updates[metric.max_field] = value

        state.apply(updates)
        if failure is not None:
            raise failure
        return updates

    async def hourly_snapshot(self) -> LogEntry | None:
        """Hourly tick: one status entry without narrative while under way."""
        if not self._state.is_under_way:
            return None
        pending = PendingEntry("", status="Automatic hourly log entry")
        entry = self._writer.build(self._state, pending)
        await self._writer.append(entry, pending.status_message)
        return entry

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from pylogbook.engine import TriggerEngine
from pylogbook.exceptions import LogPersistenceError
from pylogbook.host import TelemetryMirror
from pylogbook.models.entry import LogEntry
from pylogbook.models.position import Position
from pylogbook.promoters import RECORD_METRICS, plan_promotion
from pylogbook.state.store import LogbookState
from pylogbook.storage import MemoryLogStore


def _dt() -> datetime:
    return datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class _SelectiveFailingSink(MemoryLogStore):
    """Fails writes whose text starts with *prefix*."""

    def __init__(self, prefix: str) -> None:
        super().__init__()
        self._prefix = prefix

    async def append_entry(self, date_key: str, entry: LogEntry) -> None:
        if entry.text.startswith(self._prefix):
            raise LogPersistenceError("disk full", date_key=date_key)
        await super().append_entry(date_key, entry)


def _engine(store: MemoryLogStore, host: TelemetryMirror | None = None, **state_fields: object) -> TriggerEngine:
    return TriggerEngine(LogbookState(**state_fields), store, host or TelemetryMirror(), clock=_dt)


@pytest.mark.asyncio
async def test_speed_candidate_promoted_to_record() -> None:
    store = MemoryLogStore()
    engine = _engine(store, navigation_state="sailing", max_speed=3.0, max_speed_candidate=5.0)

    await engine.promote_records()

    assert [entry.text for entry in store.entries] == ["New speed record: 9.7 kt"]
    assert store.entries[0].max_speed == 5.0
    assert engine.state.max_speed == 5.0
    assert engine.state.max_speed_candidate is None


@pytest.mark.asyncio
async def test_record_entry_keeps_candidate_position() -> None:
    captured = Position(latitude=59.5, longitude=23.0)
    host = TelemetryMirror({"navigation.position": {"latitude": 60.0, "longitude": 25.0}})
    store = MemoryLogStore()
    engine = _engine(
        store,
        host,
        navigation_state="sailing",
        max_wind_candidate=12.0,
        max_wind_candidate_position=captured,
    )

    await engine.promote_records()

    assert store.entries[0].position == captured
    assert engine.state.max_wind_candidate_position is None
    # The promoted fix is not carried into the mirrored vessel position.
    assert engine.state.position is None


@pytest.mark.asyncio
async def test_all_metrics_promoted_in_fixed_order() -> None:
    store = MemoryLogStore()
    engine = _engine(
        store,
        navigation_state="motoring",
        max_speed_candidate=2.0,
        max_wind_candidate=10.0,
        max_heel_candidate=15.25,
    )

    updates = await engine.promote_records()

    assert [entry.text for entry in store.entries] == [
        "New speed record: 3.9 kt",
        "New wind speed record: 19.4 kt",
        "New heel record: 15.2°",
    ]
    assert updates["max_speed"] == 2.0
    assert updates["max_wind"] == 10.0
    assert updates["max_heel"] == 15.25


@pytest.mark.asyncio
async def test_candidate_not_beating_record_is_discarded() -> None:
    store = MemoryLogStore()
    engine = _engine(store, navigation_state="sailing", max_speed=5.0, max_speed_candidate=5.0)

    await engine.promote_records()

    assert store.entries == []
    assert engine.state.max_speed == 5.0
    assert engine.state.max_speed_candidate is None


@pytest.mark.asyncio
async def test_no_promotion_when_not_under_way() -> None:
    store = MemoryLogStore()
    engine = _engine(store, navigation_state="anchored", max_speed_candidate=5.0, max_heel_candidate=20.0)

    await engine.promote_records()

    assert store.entries == []
    assert engine.state.max_speed == 0.0
    assert engine.state.max_speed_candidate is None
    assert engine.state.max_heel_candidate is None


@pytest.mark.asyncio
async def test_failed_record_write_does_not_block_other_metrics() -> None:
    store = _SelectiveFailingSink("New speed")
    engine = _engine(store, navigation_state="sailing", max_speed_candidate=5.0, max_wind_candidate=8.0)

    with pytest.raises(LogPersistenceError):
        await engine.promote_records()

    assert [entry.text for entry in store.entries] == ["New wind speed record: 15.6 kt"]
    assert engine.state.max_speed == 0.0
    assert engine.state.max_wind == 8.0
    assert engine.state.max_speed_candidate is None
    assert engine.state.max_wind_candidate is None


def test_plan_promotion_ignores_missing_candidate() -> None:
    speed = RECORD_METRICS[0]

    assert plan_promotion(LogbookState(navigation_state="sailing"), speed) is None


@pytest.mark.asyncio
async def test_hourly_snapshot_under_way() -> None:
    host = TelemetryMirror()
    store = MemoryLogStore()
    engine = _engine(
        store,
        host,
        navigation_state="sailing",
        telemetry={"navigation.speedOverGround": 3.0, "navigation.headingTrue": 3.14159},
    )

    entry = await engine.hourly_snapshot()

    assert entry is not None
    assert store.entries == [entry]
    assert entry.text == ""
    assert entry.speed is not None and entry.speed.sog == 5.8
    assert entry.heading == 180.0
    assert host.last_status == "Automatic hourly log entry"


@pytest.mark.asyncio
async def test_hourly_snapshot_skipped_at_anchor() -> None:
    store = MemoryLogStore()
    engine = _engine(store, navigation_state="anchored")

    assert await engine.hourly_snapshot() is None
    assert store.entries == []

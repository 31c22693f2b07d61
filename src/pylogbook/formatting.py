"""Snapshot formatting.

:func:`snapshot_to_entry` turns the current derived state into a log entry
record. It is pure: position resolution against the live host and
event-specific fields are layered on afterwards by the entry writer.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from pylogbook._constants import (
    PATH_COG,
    PATH_DATETIME,
    PATH_HEADING,
    PATH_LOG,
    PATH_PRESSURE,
    PATH_SOG,
    PATH_STW,
    PATH_WIND_DIRECTION,
    PATH_WIND_SPEED,
)
from pylogbook.ingestion.normalize import is_number, parse_datetime
from pylogbook.models.entry import LogEntry, SpeedInfo, WindInfo
from pylogbook.state.store import LogbookState
from pylogbook.units import m_to_nm, pa_to_hpa, rad_to_deg, to_knots


def _converted(state: LogbookState, path: str, convert: Callable[[float], float], digits: int = 1) -> float | None:
    value = state.mirrored(path)
    if not is_number(value):
        return None
    return round(convert(value), digits)


def _course(state: LogbookState, path: str) -> float | None:
    degrees = _converted(state, path, rad_to_deg, 0)
    if degrees is None:
        return None
    return degrees % 360


def snapshot_to_entry(state: LogbookState, text: str, *, now: datetime | None = None) -> LogEntry:
    """Build a log entry from *state* with narrative *text*.

    The timestamp is the mirrored ``navigation.datetime`` when it parses,
    else *now* (defaulting to the current UTC time).
    """
    timestamp = parse_datetime(state.mirrored(PATH_DATETIME))
    if timestamp is None:
        timestamp = now if now is not None else datetime.now(UTC)

    sog = _converted(state, PATH_SOG, to_knots)
    stw = _converted(state, PATH_STW, to_knots)
    wind_speed = _converted(state, PATH_WIND_SPEED, to_knots)
    wind_direction = _course(state, PATH_WIND_DIRECTION)

    return LogEntry(
        datetime=timestamp,
        text=text,
        position=state.position,
        heading=_course(state, PATH_HEADING),
        course=_course(state, PATH_COG),
        speed=SpeedInfo(sog=sog, stw=stw) if sog is not None or stw is not None else None,
        wind=(
            WindInfo(speed=wind_speed, direction=wind_direction)
            if wind_speed is not None or wind_direction is not None
            else None
        ),
        barometer=_converted(state, PATH_PRESSURE, pa_to_hpa),
        log=_converted(state, PATH_LOG, m_to_nm),
        crew_names=list(state.crew_names) if state.crew_names else None,
    )

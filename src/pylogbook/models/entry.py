"""Log entry record.

One append to the log is one :class:`LogEntry`. The model allows extra
fields so rules can attach event-specific data without widening the
schema.
"""

from __future__ import annotations

import datetime as dt

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from pylogbook._constants import DEFAULT_AUTHOR, DEFAULT_CATEGORY
from pylogbook.models._base import LogbookBaseModel
from pylogbook.models.position import Position


class SpeedInfo(LogbookBaseModel):
    """Speed over ground / through water, knots."""

    sog: float | None = None
    stw: float | None = None


class WindInfo(LogbookBaseModel):
    """True wind speed (knots) and direction (degrees)."""

    speed: float | None = None
    direction: float | None = None


class LogEntry(LogbookBaseModel):
    """A persisted log entry.

    Parameters
    ----------
    datetime : datetime
        Event time (UTC).
    text : str
        Narrative; empty for status snapshots.
    category : str
        Entry category, ``"navigation"`` unless set otherwise.
    end : bool or None
        Marks the final entry of a leg (anchored or moored).
    max_speed, max_wind, max_heel : float or None
        Record values (m/s, m/s, degrees) carried by record and leg-end entries.
    """

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    datetime: dt.datetime
    text: str = ""
    category: str = DEFAULT_CATEGORY
    author: str = DEFAULT_AUTHOR
    position: Position | None = None
    heading: float | None = None
    course: float | None = None
    speed: SpeedInfo | None = None
    wind: WindInfo | None = None
    barometer: float | None = None
    log: float | None = None
    crew_names: list[str] | None = None
    end: bool | None = None
    max_speed: float | None = None
    max_wind: float | None = None
    max_heel: float | None = None

    @field_validator("datetime")
    @classmethod
    def _ensure_tz_aware(cls, value: dt.datetime) -> dt.datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=dt.UTC)
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: object) -> object:
        return value or DEFAULT_CATEGORY

    @property
    def date_key(self) -> str:
        """Log partition key: the UTC calendar date, ``YYYY-MM-DD``."""
        return self.datetime.astimezone(dt.UTC).date().isoformat()

"""Telemetry updates and the enumerations rules interpret.

All ingestion paths (REST bootstrap, MQTT, parsed deltas) convert their
inputs into :class:`TelemetryUpdate` records before they reach the
trigger engine.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IngestionSource(StrEnum):
    REST = "rest"
    MQTT = "mqtt"
    DELTA = "delta"
    MANUAL = "manual"


class NavigationState(StrEnum):
    """Vessel navigation state as published under ``navigation.state``."""

    SAILING = "sailing"
    MOTORING = "motoring"
    ANCHORED = "anchored"
    MOORED = "moored"

    @classmethod
    def parse(cls, value: Any) -> NavigationState | None:
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def is_under_way(self) -> bool:
        return self in (NavigationState.SAILING, NavigationState.MOTORING)


class AutopilotState(StrEnum):
    AUTO = "auto"
    WIND = "wind"
    ROUTE = "route"
    STANDBY = "standby"


class EngineState(StrEnum):
    STARTED = "started"
    STOPPED = "stopped"


class TelemetryUpdate(BaseModel):
    """A single ``(path, value)`` observation."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Dotted Signal K path")
    value: Any = None
    source: IngestionSource = IngestionSource.MANUAL
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        path = value.strip()
        if not path:
            raise ValueError("path must be non-empty")
        return path

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

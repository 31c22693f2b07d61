"""Vessel position model."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import AliasChoices, ConfigDict, Field, ValidationError, field_validator

from pylogbook.ingestion.normalize import safe_float
from pylogbook.models._base import LogbookBaseModel


class Position(LogbookBaseModel):
    """A latitude/longitude fix.

    Parameters
    ----------
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    source : str or None
        Positioning source tag (e.g. the GNSS type reported by the host).
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    latitude: float = Field(validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(validation_alias=AliasChoices("longitude", "lon", "lng"))
    source: str | None = None

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value: Any) -> float:
        parsed = safe_float(value)
        if parsed is None:
            raise ValueError("coordinate must be numeric")
        return parsed

    @field_validator("source", mode="before")
    @classmethod
    def _coerce_source(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        return str(value)

    @classmethod
    def parse(cls, value: Any) -> Position | None:
        """Best-effort conversion of a Signal K position value; ``None`` when unusable."""
        if isinstance(value, Position):
            return value
        if not isinstance(value, Mapping):
            return None
        try:
            return cls.model_validate(dict(value))
        except ValidationError:
            return None

    def with_source(self, source: str | None) -> Position:
        if not source:
            return self
        return self.model_copy(update={"source": source})

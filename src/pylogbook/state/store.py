"""Derived state store.

One :class:`LogbookState` exists per running vessel session. The trigger
engine is the only writer: rules read it synchronously, and their
outcomes are merged back through :meth:`LogbookState.apply`.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pylogbook._constants import PATH_AUTOPILOT, PATH_CREW, PATH_NAVIGATION_STATE, PATH_POSITION
from pylogbook.ingestion.normalize import safe_str, string_list
from pylogbook.models.position import Position
from pylogbook.state.events import NavigationState

#: Field name -> new value. ``None`` clears a field.
StatePatch = dict[str, Any]

ENGINE_STATE_RE = re.compile(r"propulsion\.([A-Za-z0-9]+)\.state")
SAIL_PATH_RE = re.compile(r"sails\.inventory\.([A-Za-z0-9]+)")

#: Applied at every record promotion tick, whether or not anything was promoted.
CANDIDATE_RESET: StatePatch = {
    "max_speed_candidate": None,
    "max_wind_candidate": None,
    "max_heel_candidate": None,
    "max_speed_candidate_position": None,
    "max_wind_candidate_position": None,
    "max_heel_candidate_position": None,
}

#: Applied after a leg ends (anchored or moored).
LEG_RESET: StatePatch = {
    "max_speed": 0.0,
    "max_wind": 0.0,
    "max_heel": 0.0,
    "last_course": None,
    "max_speed_candidate_position": None,
    "max_wind_candidate_position": None,
    "max_heel_candidate_position": None,
}


class LogbookState(BaseModel):
    """Interpreted telemetry, raw mirror and rule bookkeeping.

    ``None`` on an interpreted field means "never observed"; change-driven
    rules treat that as a cold start and stay silent.
    """

    model_config = ConfigDict(extra="forbid")

    # Interpreted telemetry
    navigation_state: str | None = None
    autopilot_state: str | None = None
    crew_names: list[str] | None = None
    position: Position | None = None
    engine_states: dict[str, str] = Field(default_factory=dict)
    sail_inventory: dict[str, Any] = Field(default_factory=dict)

    # Raw mirror of every other observed path
    telemetry: dict[str, Any] = Field(default_factory=dict)

    # Bookkeeping
    max_speed: float = 0.0
    max_wind: float = 0.0
    max_heel: float = 0.0
    max_speed_candidate: float | None = None
    max_wind_candidate: float | None = None
    max_heel_candidate: float | None = None
    max_speed_candidate_position: Position | None = None
    max_wind_candidate_position: Position | None = None
    max_heel_candidate_position: Position | None = None
    last_course: float | None = None
    sails: str | None = None

    @property
    def is_under_way(self) -> bool:
        nav = NavigationState.parse(self.navigation_state)
        return nav is not None and nav.is_under_way

    def observe(self, path: str, value: Any) -> None:
        """Record a raw observation under its interpreted field or the mirror."""
        if path == PATH_NAVIGATION_STATE:
            self.navigation_state = safe_str(value)
            return
        if path == PATH_AUTOPILOT:
            self.autopilot_state = safe_str(value)
            return
        if path == PATH_CREW:
            roster = string_list(value)
            if roster is not None or value is None:
                self.crew_names = roster
            return
        if path == PATH_POSITION:
            parsed = Position.parse(value)
            if parsed is not None or value is None:
                self.position = parsed
            return

        engine = ENGINE_STATE_RE.fullmatch(path)
        if engine:
            state = safe_str(value)
            if state is None:
                self.engine_states.pop(engine.group(1), None)
            else:
                self.engine_states[engine.group(1)] = state
            return

        sail = SAIL_PATH_RE.fullmatch(path)
        if sail:
            self.sail_inventory[sail.group(1)] = copy.deepcopy(value)
            return

        if value is None:
            self.telemetry.pop(path, None)
        else:
            self.telemetry[path] = copy.deepcopy(value)

    def apply(self, patch: Mapping[str, Any] | None) -> None:
        """Merge a state patch. Re-applying the same patch is harmless."""
        if not patch:
            return
        fields = type(self).model_fields
        for name, value in patch.items():
            if name not in fields:
                raise ValueError(f"unknown state field: {name}")
            setattr(self, name, value)

    def mirrored(self, path: str) -> Any:
        """Raw mirrored value for *path*, or ``None``."""
        return self.telemetry.get(path)

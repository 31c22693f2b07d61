"""Rule table for automatic log entries.

:func:`evaluate` looks at one ``(path, value)`` update against the current
:class:`~pylogbook.state.store.LogbookState` and returns a
:class:`RuleOutcome` describing what should happen, without performing any
I/O itself:

* ``immediate`` is merged before anything is awaited, so a duplicate
  notification delivered while a write is still pending already sees the
  new baseline;
* ``entries`` are the log writes, in narrative order;
* ``deferred`` is merged once every write has settled.

Exact paths are matched first in the order below, then engine states, then
sail inventory records.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pylogbook._constants import (
    COURSE_CHANGE_THRESHOLD_DEG,
    PATH_AUTOPILOT,
    PATH_COG,
    PATH_CREW,
    PATH_NAVIGATION_STATE,
    PATH_POSITION,
    PATH_ROLL,
    PATH_SOG,
    PATH_STW,
    PATH_WIND_SPEED,
)
from pylogbook.host import TelemetryHost
from pylogbook.ingestion.normalize import is_number, safe_str, string_list
from pylogbook.models.position import Position
from pylogbook.sails import describe_sails
from pylogbook.state.events import AutopilotState, EngineState, NavigationState
from pylogbook.state.store import ENGINE_STATE_RE, LEG_RESET, SAIL_PATH_RE, LogbookState, StatePatch
from pylogbook.units import circular_delta, rad_to_deg

_logger = logging.getLogger(__name__)

_AUTOPILOT_TEXT: dict[str, str] = {
    AutopilotState.AUTO: "Autopilot activated",
    AutopilotState.WIND: "Autopilot set to wind mode",
    AutopilotState.ROUTE: "Autopilot set to route mode",
    AutopilotState.STANDBY: "Autopilot deactivated",
}

_ENGINE_TEXT: dict[str, str] = {
    EngineState.STARTED: "Started {engine} engine",
    EngineState.STOPPED: "Stopped {engine} engine",
}


@dataclass(slots=True)
class PendingEntry:
    """A log write requested by a rule.

    ``fields`` are event-specific entry fields layered over the snapshot
    (e.g. ``end`` or record values). ``position`` overrides the live
    position, for records captured before they were promoted.
    """

    text: str
    fields: dict[str, Any] = field(default_factory=dict)
    position: Position | None = None
    status: str | None = None

    @property
    def status_message(self) -> str:
        return self.status if self.status is not None else f"Automatic log entry: {self.text}"


@dataclass(slots=True)
class RuleOutcome:
    immediate: StatePatch = field(default_factory=dict)
    entries: list[PendingEntry] = field(default_factory=list)
    deferred: StatePatch | None = None


def current_position(state: LogbookState, host: TelemetryHost) -> Position | None:
    """Live host position, falling back to the last mirrored one."""
    return Position.parse(host.read_current_value(PATH_POSITION)) or state.position


# ----------------------------------------------------------------------
# Candidate maxima
# ----------------------------------------------------------------------


def _candidate(state: LogbookState, host: TelemetryHost, metric: str, value: float) -> RuleOutcome | None:
    current = getattr(state, f"max_{metric}_candidate") or 0
    if value <= current:
        return None
    return RuleOutcome(
        deferred={
            f"max_{metric}_candidate": float(value),
            f"max_{metric}_candidate_position": current_position(state, host),
        }
    )


def _speed(path: str, value: Any, state: LogbookState, host: TelemetryHost, **_: Any) -> RuleOutcome | None:
    if not is_number(value):
        return None
    return _candidate(state, host, "speed", value)


def _wind(path: str, value: Any, state: LogbookState, host: TelemetryHost, **_: Any) -> RuleOutcome | None:
    if not is_number(value):
        return None
    return _candidate(state, host, "wind", value)


def _heel(path: str, value: Any, state: LogbookState, host: TelemetryHost, **_: Any) -> RuleOutcome | None:
    # Roll is heel, in radians.
    if not is_number(value):
        return None
    return _candidate(state, host, "heel", abs(rad_to_deg(value)))


# ----------------------------------------------------------------------
# Course
# ----------------------------------------------------------------------


def _course(
    path: str,
    value: Any,
    state: LogbookState,
    host: TelemetryHost,
    *,
    course_change_threshold: float = COURSE_CHANGE_THRESHOLD_DEG,
    **_: Any,
) -> RuleOutcome | None:
    # Compared against the last logged course, not the previous update, so
    # gradual turns are picked up once the cumulative change is large enough.
    if state.navigation_state != NavigationState.SAILING or not is_number(value):
        return None
    last = state.last_course if is_number(state.last_course) else value
    delta = circular_delta(rad_to_deg(value), rad_to_deg(last))
    if delta >= course_change_threshold:
        patch = {"last_course": value}
        return RuleOutcome(
            immediate=patch,
            entries=[PendingEntry(f"Course change: {rad_to_deg(last):.0f}° → {rad_to_deg(value):.0f}°")],
            deferred=patch,
        )
    if state.last_course is None:
        patch = {"last_course": last}
        return RuleOutcome(immediate=patch, deferred=patch)
    return None


# ----------------------------------------------------------------------
# Autopilot
# ----------------------------------------------------------------------


def _autopilot(path: str, value: Any, state: LogbookState, host: TelemetryHost, **_: Any) -> RuleOutcome | None:
    new = safe_str(value)
    previous = state.autopilot_state
    if previous is None or previous == new:
        return None
    if not state.is_under_way:
        # Autopilot changes while at anchor or moored are not interesting.
        return None
    outcome = RuleOutcome(immediate={"autopilot_state": new})
    text = _AUTOPILOT_TEXT.get(new or "")
    if text is not None:
        outcome.entries.append(PendingEntry(text))
    return outcome


# ----------------------------------------------------------------------
# Navigation state machine
# ----------------------------------------------------------------------


def _with_sails(text: str, state: LogbookState) -> str:
    if state.sails:
        return f"{text} with {state.sails}"
    return text


def _leg_end(text: str) -> tuple[PendingEntry, StatePatch]:
    entry = PendingEntry(text, fields={"end": True, "max_speed": 0.0, "max_wind": 0.0, "max_heel": 0.0})
    return entry, dict(LEG_RESET)


def _navigation_state(path: str, value: Any, state: LogbookState, host: TelemetryHost, **_: Any) -> RuleOutcome | None:
    new = safe_str(value)
    previous = state.navigation_state
    if previous is None or previous == new:
        return None

    outcome = RuleOutcome(immediate={"navigation_state": new})
    target = NavigationState.parse(new)

    if target in (NavigationState.ANCHORED, NavigationState.MOORED):
        entry, reset = _leg_end("Anchored" if target == NavigationState.ANCHORED else "Stopped")
        outcome.entries.append(entry)
        outcome.deferred = reset
    elif target == NavigationState.SAILING:
        text = "Motor stopped, sailing" if previous == NavigationState.MOTORING else "Sailing"
        outcome.entries.append(PendingEntry(_with_sails(text, state)))
    elif target == NavigationState.MOTORING:
        if previous == NavigationState.ANCHORED:
            text = "Anchor up, motoring"
        elif previous == NavigationState.SAILING:
            text = "Sails down, motoring"
        else:
            text = "Motoring"
        outcome.entries.append(PendingEntry(text))
        # Course tracking restarts with the new leg.
        outcome.deferred = {"last_course": None}
    return outcome


# ----------------------------------------------------------------------
# Crew
# ----------------------------------------------------------------------


def _crew(path: str, value: Any, state: LogbookState, host: TelemetryHost, **_: Any) -> RuleOutcome | None:
    previous = state.crew_names
    roster = string_list(value)
    if not previous or not roster or previous == roster:
        return None
    added = [name for name in roster if name not in previous]
    removed = [name for name in previous if name not in roster]
    if added and removed:
        text = f"Crew changed to {', '.join(roster)}"
    elif added:
        text = f"{', '.join(added)} joined the crew"
    elif removed:
        text = f"{', '.join(removed)} left the crew"
    else:
        return None
    return RuleOutcome(entries=[PendingEntry(text)])


# ----------------------------------------------------------------------
# Pattern rules
# ----------------------------------------------------------------------


def _engine(engine_id: str, value: Any, state: LogbookState) -> RuleOutcome | None:
    new = safe_str(value)
    previous = state.engine_states.get(engine_id)
    if previous is None or previous == new:
        return None
    if state.is_under_way:
        # The navigation state transition already narrates this.
        return None
    template = _ENGINE_TEXT.get(new or "")
    if template is None:
        return None
    return RuleOutcome(entries=[PendingEntry(template.format(engine=engine_id))])


def _sail(sail_id: str, value: Any, state: LogbookState, host: TelemetryHost) -> RuleOutcome:
    inventory = dict(state.sail_inventory)
    inventory[sail_id] = value
    phrase = describe_sails(inventory, host)
    if state.sails and state.sails == phrase:
        return RuleOutcome()
    patch = {"sails": phrase}
    outcome = RuleOutcome(immediate=patch, deferred=patch)
    if state.sails and state.navigation_state == NavigationState.SAILING:
        outcome.entries.append(PendingEntry(f"Sails set: {phrase}"))
    return outcome


_Rule = Callable[..., RuleOutcome | None]

_EXACT_RULES: dict[str, _Rule] = {
    PATH_SOG: _speed,
    PATH_STW: _speed,
    PATH_WIND_SPEED: _wind,
    PATH_ROLL: _heel,
    PATH_COG: _course,
    PATH_AUTOPILOT: _autopilot,
    PATH_NAVIGATION_STATE: _navigation_state,
    PATH_CREW: _crew,
}


def evaluate(
    path: str,
    value: Any,
    state: LogbookState,
    host: TelemetryHost,
    *,
    course_change_threshold: float = COURSE_CHANGE_THRESHOLD_DEG,
) -> RuleOutcome | None:
    """Decide what a single update means for the log.

    Returns ``None`` when no rule has anything to do. The state is only
    read here; the caller applies the outcome.
    """
    rule = _EXACT_RULES.get(path)
    if rule is not None:
        outcome = rule(path, value, state, host, course_change_threshold=course_change_threshold)
        if outcome is not None:
            _logger.debug("Rule for %s produced %d entries", path, len(outcome.entries))
        return outcome

    engine = ENGINE_STATE_RE.fullmatch(path)
    if engine:
        return _engine(engine.group(1), value, state)

    sail = SAIL_PATH_RE.fullmatch(path)
    if sail:
        return _sail(sail.group(1), value, state, host)

    return None

from __future__ import annotations

import pytest

from pylogbook.models.position import Position
from pylogbook.state.store import CANDIDATE_RESET, LogbookState


def test_observe_routes_interpreted_paths() -> None:
    state = LogbookState()

    state.observe("navigation.state", "sailing")
    state.observe("steering.autopilot.state", "auto")
    state.observe("communication.crewNames", ["Ann", "Bob"])
    state.observe("navigation.position", {"latitude": 60.1, "longitude": 24.9})
    state.observe("propulsion.port.state", "started")
    state.observe("sails.inventory.main", {"name": "Main", "active": True})
    state.observe("navigation.headingTrue", 1.2)

    assert state.navigation_state == "sailing"
    assert state.autopilot_state == "auto"
    assert state.crew_names == ["Ann", "Bob"]
    assert state.position == Position(latitude=60.1, longitude=24.9)
    assert state.engine_states == {"port": "started"}
    assert state.sail_inventory["main"]["name"] == "Main"
    assert state.mirrored("navigation.headingTrue") == 1.2
    assert "navigation.state" not in state.telemetry


def test_unusable_position_keeps_previous_fix() -> None:
    state = LogbookState(position=Position(latitude=1.0, longitude=2.0))

    state.observe("navigation.position", {"latitude": "north"})

    assert state.position == Position(latitude=1.0, longitude=2.0)


def test_observe_none_clears_mirror_value() -> None:
    state = LogbookState()
    state.observe("environment.outside.pressure", 101300)
    state.observe("environment.outside.pressure", None)

    assert state.mirrored("environment.outside.pressure") is None


def test_apply_is_idempotent() -> None:
    state = LogbookState(max_speed_candidate=4.0)
    state.apply(CANDIDATE_RESET)
    state.apply(CANDIDATE_RESET)

    assert state.max_speed_candidate is None


def test_apply_rejects_unknown_fields() -> None:
    with pytest.raises(ValueError, match="unknown state field"):
        LogbookState().apply({"maxSpeed": 1.0})


@pytest.mark.parametrize(
    ("navigation_state", "expected"),
    [("sailing", True), ("motoring", True), ("anchored", False), ("moored", False), (None, False), ("drifting", False)],
)
def test_is_under_way(navigation_state: str | None, expected: bool) -> None:
    assert LogbookState(navigation_state=navigation_state).is_under_way is expected


def test_malformed_roster_keeps_previous_crew() -> None:
    state = LogbookState(crew_names=["Ann"])

    state.observe("communication.crewNames", "Ann")
    assert state.crew_names == ["Ann"]

    state.observe("communication.crewNames", None)
    assert state.crew_names is None

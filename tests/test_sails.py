from __future__ import annotations

from pylogbook.host import TelemetryMirror
from pylogbook.sails import describe_sails


def test_reefed_and_plain_sails_in_inventory_order() -> None:
    inventory = {
        "main": {"name": "Main", "active": True, "reducedState": {"reefs": 2}},
        "jib": {"name": "Jib", "active": True},
    }

    assert describe_sails(inventory, TelemetryMirror()) == "Main (2nd reef), Jib"


def test_furled_ratio_rendered_as_percentage() -> None:
    inventory = {
        "genoa": {"name": "Genoa", "active": True, "reducedState": {"reefs": 0, "furledRatio": 0.3}},
        "code0": {"name": "Code 0", "active": True, "reducedState": {"furledRatio": 0.5}},
    }

    assert describe_sails(inventory, TelemetryMirror()) == "Genoa (30% furled), Code 0 (50% furled)"


def test_inactive_and_malformed_sails_skipped() -> None:
    inventory = {
        "main": {"name": "Main", "active": False},
        "jib": "not-a-sail",
        "spinnaker": {"name": "Spinnaker", "active": True},
    }

    assert describe_sails(inventory, TelemetryMirror()) == "Spinnaker"


def test_host_value_wins_over_stale_local_snapshot() -> None:
    host = TelemetryMirror(
        {"sails.inventory.main": {"name": "Main", "active": True, "reducedState": {"reefs": 1}}},
    )
    inventory = {"main": {"name": "Main", "active": False}}

    assert describe_sails(inventory, host) == "Main (1st reef)"


def test_missing_name_falls_back_to_sail_id() -> None:
    assert describe_sails({"storm": {"active": True}}, TelemetryMirror()) == "storm"


def test_no_active_sails_is_empty_phrase() -> None:
    assert describe_sails({}, TelemetryMirror()) == ""

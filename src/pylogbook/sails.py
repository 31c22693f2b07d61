"""Sail description builder.

Sail inventory records arrive as several independent Signal K updates, so
the local snapshot can hold a half-updated sail. Every matched sail is
re-read from the host before it is described; the local value is only a
fallback for sails the host does not know.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pylogbook._constants import SAIL_INVENTORY_PREFIX
from pylogbook.host import TelemetryHost
from pylogbook.ingestion.normalize import safe_float
from pylogbook.units import ordinal


def sail_path(sail_id: str) -> str:
    return f"{SAIL_INVENTORY_PREFIX}{sail_id}"


def _format_percent(ratio: float) -> str:
    pct = round(ratio * 100, 1)
    return str(int(pct)) if pct.is_integer() else str(pct)


def describe_sail(sail_id: str, sail: Mapping[str, Any]) -> str | None:
    """Render one sail, or ``None`` when it is not set."""
    if not sail.get("active"):
        return None
    name = sail.get("name") or sail_id
    reduced = sail.get("reducedState")
    if isinstance(reduced, Mapping):
        reefs = safe_float(reduced.get("reefs"))
        if reefs:
            return f"{name} ({ordinal(int(reefs))} reef)"
        furled = safe_float(reduced.get("furledRatio"))
        if furled:
            return f"{name} ({_format_percent(furled)}% furled)"
    return str(name)


def describe_sails(inventory: Mapping[str, Any], host: TelemetryHost) -> str:
    """Compose the active sail plan, e.g. ``"Main (2nd reef), Jib (30% furled)"``.

    Order follows *inventory* iteration order.
    """
    parts: list[str] = []
    for sail_id, local_value in inventory.items():
        canonical = host.read_current_value(sail_path(sail_id))
        sail = canonical if canonical is not None else local_value
        if not isinstance(sail, Mapping):
            continue
        rendered = describe_sail(sail_id, sail)
        if rendered is not None:
            parts.append(rendered)
    return ", ".join(parts)

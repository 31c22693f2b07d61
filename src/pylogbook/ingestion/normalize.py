"""Normalization helpers.

Centralizes defensive parsing of telemetry values. Rules fall through
silently on malformed input, so these helpers return ``None`` instead of
raising.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any


def is_number(value: Any) -> bool:
    """Return True for finite ints/floats (booleans excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def string_list(value: Any) -> list[str] | None:
    """Coerce a roster-like value to a list of strings; ``None`` when not a list."""
    if not isinstance(value, (list, tuple)):
        return None
    return [str(item) for item in value if item is not None]


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp (``Z`` suffix accepted) into an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)

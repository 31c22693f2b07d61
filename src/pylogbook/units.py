"""Unit conversions used when narrating telemetry.

Signal K reports SI units (m/s, radians, pascals, meters); log entries are
written in knots, degrees, hectopascals and nautical miles.
"""

from __future__ import annotations

from pylogbook._constants import (
    DEGREES_PER_RADIAN,
    KNOTS_PER_MPS,
    METERS_PER_NAUTICAL_MILE,
    PASCALS_PER_HECTOPASCAL,
)


def to_knots(mps: float) -> float:
    """Convert a speed in m/s to knots."""
    return mps * KNOTS_PER_MPS


def rad_to_deg(rad: float) -> float:
    """Convert an angle in radians to degrees."""
    return rad * DEGREES_PER_RADIAN


def pa_to_hpa(pascals: float) -> float:
    return pascals / PASCALS_PER_HECTOPASCAL


def m_to_nm(meters: float) -> float:
    return meters / METERS_PER_NAUTICAL_MILE


def circular_delta(a: float, b: float) -> float:
    """Return the shorter arc between two angles in degrees.

    The naive difference is folded into ``[0, 180]`` so a course moving
    across north (e.g. 350 to 10) reports 20 rather than 340.
    """
    delta = abs(a - b)
    if delta > 180:
        delta = 360 - delta
    return delta


def ordinal(number: int) -> str:
    """English ordinal for *number* (``1st``, ``2nd``, ``11th``, ``23rd``)."""
    n = int(number)
    if 10 <= abs(n) % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(abs(n) % 10, "th")
    return f"{n}{suffix}"

"""Public log entry models."""

from pylogbook.models.entry import LogEntry, SpeedInfo, WindInfo
from pylogbook.models.position import Position

__all__ = [
    "LogEntry",
    "Position",
    "SpeedInfo",
    "WindInfo",
]

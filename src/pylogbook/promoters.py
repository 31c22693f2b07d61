"""Record promotion planning.

Speed, wind and heel maxima are tracked as per-interval candidates by the
rule table. Every short tick the candidates that beat the permanent record
for the current leg are promoted into log entries.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from pylogbook.ingestion.normalize import is_number
from pylogbook.state.store import LogbookState
from pylogbook.triggers import PendingEntry
from pylogbook.units import to_knots


@dataclass(frozen=True, slots=True)
class RecordMetric:
    name: str
    render: Callable[[float], str]

    @property
    def max_field(self) -> str:
        return f"max_{self.name}"

    @property
    def candidate_field(self) -> str:
        return f"max_{self.name}_candidate"

    @property
    def position_field(self) -> str:
        return f"max_{self.name}_candidate_position"


RECORD_METRICS: tuple[RecordMetric, ...] = (
    RecordMetric("speed", lambda mps: f"New speed record: {to_knots(mps):.1f} kt"),
    RecordMetric("wind", lambda mps: f"New wind speed record: {to_knots(mps):.1f} kt"),
    RecordMetric("heel", lambda deg: f"New heel record: {deg:.1f}°"),
)


def plan_promotion(state: LogbookState, metric: RecordMetric) -> tuple[PendingEntry, float] | None:
    """Return the record entry and promoted value, or ``None`` when the candidate does not beat the record."""
    candidate = getattr(state, metric.candidate_field)
    if not is_number(candidate):
        return None
    if candidate <= (getattr(state, metric.max_field) or 0):
        return None
    entry = PendingEntry(
        metric.render(candidate),
        fields={metric.max_field: candidate},
        position=getattr(state, metric.position_field),
    )
    return entry, candidate

"""Ingestion layer.

Adapters that receive Signal K data (REST bootstrap, MQTT gateway, raw
deltas) and emit :class:`~pylogbook.state.events.TelemetryUpdate` records.
"""

__all__: list[str] = []

"""Signal K payload shapes -> telemetry updates.

Three shapes reach the logbook:

* delta messages (``{"updates": [{"values": [{"path", "value"}]}]}``),
  as streamed by the server;
* the full data model of the self vessel, returned by the REST API and
  used to seed the mirror;
* per-path MQTT topics published by the Signal K MQTT gateway.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pylogbook.state.events import IngestionSource, TelemetryUpdate

_logger = logging.getLogger(__name__)

# Keys of the full model that describe a value rather than nest further.
_META_KEYS = frozenset({"value", "values", "meta", "$source", "timestamp", "pgn", "sentence"})


class _DeltaValue(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    path: str = ""
    value: Any = None


class _DeltaUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    values: list[_DeltaValue] = Field(default_factory=list)


def parse_delta(payload: Mapping[str, Any], *, source: IngestionSource = IngestionSource.DELTA) -> list[TelemetryUpdate]:
    """Extract ``(path, value)`` updates from a Signal K delta.

    Malformed update blocks are skipped. A value with an empty path is a
    root-level object (e.g. ``{"name": ...}``) and expands to one update
    per key.
    """
    updates_raw = payload.get("updates")
    if not isinstance(updates_raw, list):
        return []

    updates: list[TelemetryUpdate] = []
    for block in updates_raw:
        try:
            update = _DeltaUpdate.model_validate(block)
        except ValidationError:
            _logger.debug("Skipping malformed delta update block", exc_info=True)
            continue
        for item in update.values:
            if item.path.strip():
                updates.append(TelemetryUpdate(path=item.path, value=item.value, source=source))
            elif isinstance(item.value, Mapping):
                updates.extend(
                    TelemetryUpdate(path=str(key), value=val, source=source)
                    for key, val in item.value.items()
                    if str(key).strip()
                )
    return updates


def flatten_full_model(vessel: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten a full-model vessel object to ``{dotted path: value}``.

    A node holding a ``value`` key is a leaf. Plain scalars directly under
    the vessel (``name``, ``mmsi``) are kept under their own key.
    """
    flat: dict[str, Any] = {}
    for key, node in vessel.items():
        if key in _META_KEYS:
            continue
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(node, Mapping):
            if "value" in node:
                flat[path] = node["value"]
            else:
                flat.update(flatten_full_model(node, path))
        elif not prefix:
            flat[path] = node
    return flat


def topic_to_path(topic: str, prefix: str) -> str | None:
    """Map an MQTT gateway topic to a dotted path; ``None`` for foreign topics."""
    prefix = prefix.strip("/")
    topic = topic.strip("/")
    if prefix:
        if not topic.startswith(f"{prefix}/"):
            return None
        topic = topic[len(prefix) + 1 :]
    path = ".".join(part for part in topic.split("/") if part)
    return path or None

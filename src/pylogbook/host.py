"""Telemetry host collaborator.

The trigger engine needs two things from the application hosting it: a
best-effort synchronous read of canonical values, and somewhere to surface
a human-readable status after each write. :class:`TelemetryMirror` is the
in-process implementation fed by the Signal K ingestion adapters.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, Protocol

_logger = logging.getLogger(__name__)


class TelemetryHost(Protocol):
    """Read-canonical-state capability plus a status sink."""

    def read_current_value(self, path: str) -> Any | None: ...

    def report_status(self, message: str) -> None: ...


class TelemetryMirror:
    """Latest canonical value per Signal K path."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = {}
        self.last_status: str | None = None
        if values:
            self.update_many(values)

    def update(self, path: str, value: Any) -> None:
        if value is None:
            self._values.pop(path, None)
            return
        self._values[path] = copy.deepcopy(value)

    def update_many(self, values: Mapping[str, Any]) -> None:
        for path, value in values.items():
            self.update(path, value)

    def read_current_value(self, path: str) -> Any | None:
        value = self._values.get(path)
        return copy.deepcopy(value) if value is not None else None

    def report_status(self, message: str) -> None:
        self.last_status = message
        _logger.info("%s", message)

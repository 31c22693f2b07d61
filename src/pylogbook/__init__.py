"""pylogbook - Async rule engine for automatic ship's log entries from Signal K telemetry."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pylogbook")
except PackageNotFoundError:
    __version__ = "0+local"
from pylogbook.config import LogbookConfig
from pylogbook.engine import EntryWriter, TriggerEngine
from pylogbook.exceptions import (
    LogbookConfigError,
    LogbookError,
    LogPersistenceError,
    SignalKDecodeError,
    SignalKError,
    SignalKTransportError,
)
from pylogbook.formatting import snapshot_to_entry
from pylogbook.host import TelemetryHost, TelemetryMirror
from pylogbook.logbook import Logbook
from pylogbook.models import LogEntry, Position, SpeedInfo, WindInfo
from pylogbook.sails import describe_sails
from pylogbook.state.events import AutopilotState, EngineState, IngestionSource, NavigationState, TelemetryUpdate
from pylogbook.state.store import LogbookState, StatePatch
from pylogbook.storage import DaySummary, JsonLogStore, LogSink, MemoryLogStore, summarize_days
from pylogbook.triggers import PendingEntry, RuleOutcome, evaluate

__all__ = [
    "__version__",
    "AutopilotState",
    "DaySummary",
    "EngineState",
    "EntryWriter",
    "IngestionSource",
    "JsonLogStore",
    "LogEntry",
    "LogPersistenceError",
    "LogSink",
    "Logbook",
    "LogbookConfig",
    "LogbookConfigError",
    "LogbookError",
    "LogbookState",
    "MemoryLogStore",
    "NavigationState",
    "PendingEntry",
    "Position",
    "RuleOutcome",
    "SignalKDecodeError",
    "SignalKError",
    "SignalKTransportError",
    "SpeedInfo",
    "StatePatch",
    "TelemetryHost",
    "TelemetryMirror",
    "TelemetryUpdate",
    "TriggerEngine",
    "WindInfo",
    "describe_sails",
    "evaluate",
    "snapshot_to_entry",
    "summarize_days",
]

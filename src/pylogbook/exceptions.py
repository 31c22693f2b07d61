"""Custom exception hierarchy for pylogbook."""

from __future__ import annotations


class LogbookError(Exception):
    """Base exception for all pylogbook errors."""


class LogbookConfigError(LogbookError):
    """Invalid or missing configuration."""


class LogPersistenceError(LogbookError):
    """Appending to or reading from the log store failed.

    Raised by the bundled stores; the trigger engine never retries and
    lets it propagate to whoever delivered the telemetry update.
    """

    def __init__(self, message: str, *, date_key: str = "") -> None:
        self.date_key = date_key
        super().__init__(message)


class SignalKError(LogbookError):
    """Failure talking to a Signal K server."""


class SignalKTransportError(SignalKError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class SignalKDecodeError(SignalKError):
    """A Signal K delta or MQTT payload could not be decoded."""

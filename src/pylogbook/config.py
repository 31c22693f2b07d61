"""Runtime configuration for pylogbook."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pylogbook._constants import COURSE_CHANGE_THRESHOLD_DEG, RECORD_INTERVAL_S, SNAPSHOT_INTERVAL_S
from pylogbook.exceptions import LogbookConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, kind: type[int] | type[float]) -> int | float:
    try:
        return kind(value)
    except ValueError as exc:
        raise LogbookConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class LogbookConfig:
    """Logbook runtime configuration.

    Parameters
    ----------
    log_dir : str
        Directory holding one JSON file per logged day.
    signalk_url : str or None
        Signal K server base URL (e.g. ``"http://localhost:3000"``). When
        set, the telemetry mirror is seeded from the REST API on start.
    signalk_token : str or None
        Bearer token for the Signal K REST API.
    mqtt_enabled : bool
        Subscribe to the Signal K MQTT gateway for live deltas.
    mqtt_host : str
        MQTT broker host.
    mqtt_port : int
        MQTT broker port.
    mqtt_username : str or None
        MQTT username.
    mqtt_password : str or None
        MQTT password.
    mqtt_topic_prefix : str
        Topic prefix the gateway publishes self-vessel values under.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    record_interval : float
        Seconds between record promotion ticks.
    snapshot_interval : float
        Seconds between status snapshot entries.
    course_change_threshold : float
        Degrees of cumulative course change that produce an entry.
    """

    log_dir: str = "logbook"
    signalk_url: str | None = None
    signalk_token: str | None = None
    mqtt_enabled: bool = False
    mqtt_host: str = "localhost"
    mqtt_port: int = 1883
    mqtt_username: str | None = None
    mqtt_password: str | None = None
    mqtt_topic_prefix: str = "vessels/self"
    mqtt_keepalive: int = 60
    record_interval: float = RECORD_INTERVAL_S
    snapshot_interval: float = SNAPSHOT_INTERVAL_S
    course_change_threshold: float = COURSE_CHANGE_THRESHOLD_DEG

    def __post_init__(self) -> None:
        if self.record_interval <= 0:
            raise LogbookConfigError("record_interval must be positive")
        if self.snapshot_interval <= 0:
            raise LogbookConfigError("snapshot_interval must be positive")
        if not 0 < self.course_change_threshold <= 180:
            raise LogbookConfigError("course_change_threshold must be within (0, 180] degrees")

    @classmethod
    def from_env(cls, **overrides: Any) -> LogbookConfig:
        """Create configuration from ``LOGBOOK_*`` environment variables.

        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        LogbookConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_STRING_MAP = {
            "LOGBOOK_LOG_DIR": "log_dir",
            "LOGBOOK_SIGNALK_URL": "signalk_url",
            "LOGBOOK_SIGNALK_TOKEN": "signalk_token",
            "LOGBOOK_MQTT_HOST": "mqtt_host",
            "LOGBOOK_MQTT_USERNAME": "mqtt_username",
            "LOGBOOK_MQTT_PASSWORD": "mqtt_password",
            "LOGBOOK_MQTT_TOPIC_PREFIX": "mqtt_topic_prefix",
        }
        _ENV_NUMBER_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "LOGBOOK_MQTT_PORT": ("mqtt_port", int),
            "LOGBOOK_MQTT_KEEPALIVE": ("mqtt_keepalive", int),
            "LOGBOOK_RECORD_INTERVAL": ("record_interval", float),
            "LOGBOOK_SNAPSHOT_INTERVAL": ("snapshot_interval", float),
            "LOGBOOK_COURSE_CHANGE_THRESHOLD": ("course_change_threshold", float),
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STRING_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        for env_key, (field_name, kind) in _ENV_NUMBER_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, kind)

        if "mqtt_enabled" not in overrides:
            config_kwargs["mqtt_enabled"] = _env_bool(env.get("LOGBOOK_MQTT_ENABLED"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)

"""MQTT runtime for the Signal K MQTT gateway.

The gateway publishes every self-vessel value as its own topic
(``vessels/self/navigation/speedOverGround``) with a JSON payload. The
paho network loop runs on its own thread; decoded updates are handed to
the asyncio loop with ``call_soon_threadsafe``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

import paho.mqtt.client as mqtt

from pylogbook._redact import redact_for_log
from pylogbook.exceptions import SignalKDecodeError
from pylogbook.ingestion.delta import topic_to_path
from pylogbook.state.events import IngestionSource, TelemetryUpdate


@dataclass(frozen=True)
class MqttBootstrap:
    """Broker connection details."""

    broker_host: str
    broker_port: int
    topic_prefix: str
    client_id: str
    username: str | None = None
    password: str | None = None

    @property
    def topic(self) -> str:
        prefix = self.topic_prefix.strip("/")
        return f"{prefix}/#" if prefix else "#"


def build_client_id() -> str:
    return f"pylogbook-{secrets.token_hex(4)}"


def decode_mqtt_value(payload: bytes) -> Any:
    """Decode a gateway payload: a JSON value, or an object wrapping ``value``."""
    try:
        text = payload.decode("utf-8").strip()
    except UnicodeDecodeError as exc:
        raise SignalKDecodeError("MQTT payload is not UTF-8") from exc
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SignalKDecodeError(f"MQTT payload is not JSON: {text[:64]}") from exc
    if isinstance(parsed, dict) and "value" in parsed:
        return parsed["value"]
    return parsed


class SignalKMqttRuntime:
    """Threaded paho-mqtt runtime that emits telemetry updates onto an asyncio loop."""

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        on_update: Callable[[TelemetryUpdate], None],
        keepalive: int = 60,
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._on_update = on_update
        self._keepalive = keepalive
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False
        self._bootstrap: MqttBootstrap | None = None

    @property
    def is_running(self) -> bool:
        """Whether the MQTT runtime is actively running."""
        return self._running

    def handle_message(self, topic: str, payload: bytes) -> TelemetryUpdate | None:
        """Decode one message into an update; ``None`` for foreign topics."""
        bootstrap = self._bootstrap
        prefix = bootstrap.topic_prefix if bootstrap is not None else ""
        path = topic_to_path(topic, prefix)
        if path is None:
            return None
        value = decode_mqtt_value(payload)
        self._logger.debug("MQTT update path=%s value=%s", path, redact_for_log(value))
        return TelemetryUpdate(path=path, value=value, source=IngestionSource.MQTT)

    def start(self, bootstrap: MqttBootstrap) -> None:
        """Connect and subscribe with provided broker details."""
        self.stop()
        self._logger.debug(
            "MQTT runtime start requested host=%s port=%s topic=%s client_id=%s",
            bootstrap.broker_host,
            bootstrap.broker_port,
            bootstrap.topic,
            bootstrap.client_id,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=bootstrap.client_id,
        )
        client.enable_logger(self._logger)
        if bootstrap.username:
            client.username_pw_set(bootstrap.username, bootstrap.password)

        self._bootstrap = bootstrap

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected, subscribing topic=%s", bootstrap.topic)
            c.subscribe(bootstrap.topic, qos=0)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            try:
                update = self.handle_message(msg.topic, msg.payload)
            except Exception:
                self._logger.debug("MQTT payload parse failure topic=%s", msg.topic, exc_info=True)
                return
            if update is not None:
                self._loop.call_soon_threadsafe(self._on_update, update)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        client.connect(bootstrap.broker_host, bootstrap.broker_port, keepalive=self._keepalive)
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Stop and disconnect current MQTT client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")

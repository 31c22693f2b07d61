"""High-level async runtime for automatic log keeping."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import UTC, datetime
from typing import Any

import aiohttp

from pylogbook._mqtt import MqttBootstrap, SignalKMqttRuntime, build_client_id
from pylogbook._transport import SignalKClient
from pylogbook.config import LogbookConfig
from pylogbook.engine import TriggerEngine
from pylogbook.exceptions import LogbookError, SignalKError
from pylogbook.host import TelemetryMirror
from pylogbook.state.events import TelemetryUpdate
from pylogbook.state.store import LogbookState
from pylogbook.storage import JsonLogStore, LogSink

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Logbook:
    """Keeps the ship's log from live Signal K telemetry.

    Usage::

        async with Logbook(LogbookConfig.from_env()) as logbook:
            await asyncio.Event().wait()

    Updates can also be pushed directly with :meth:`handle_update` (fire
    and forget) or :meth:`feed` (awaited, errors propagate).
    """

    def __init__(
        self,
        config: LogbookConfig,
        *,
        sink: LogSink | None = None,
        host: TelemetryMirror | None = None,
        state: LogbookState | None = None,
        session: aiohttp.ClientSession | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._sink = sink
        self._host = host if host is not None else TelemetryMirror()
        self._state = state if state is not None else LogbookState()
        self._external_session = session is not None
        self._http_session = session
        self._clock = clock
        self._loop: asyncio.AbstractEventLoop | None = None
        self._engine: TriggerEngine | None = None
        self._mqtt_runtime: SignalKMqttRuntime | None = None
        self._timers: list[asyncio.Task[None]] = []
        self._inflight: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> Logbook:
        self._loop = asyncio.get_running_loop()
        if self._sink is None:
            self._sink = JsonLogStore(self._config.log_dir)
        self._engine = TriggerEngine(
            self._state,
            self._sink,
            self._host,
            course_change_threshold=self._config.course_change_threshold,
            clock=self._clock,
        )
        if self._config.signalk_url:
            await self.bootstrap()
        if self._config.mqtt_enabled:
            await self._start_mqtt()
        self._start_timers()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        for timer in self._timers:
            timer.cancel()
        await asyncio.gather(*self._timers, return_exceptions=True)
        self._timers.clear()

        await self._stop_mqtt()

        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._loop = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def engine(self) -> TriggerEngine:
        if self._engine is None:
            raise LogbookError("Logbook not started. Use 'async with Logbook(...) as logbook:'")
        return self._engine

    @property
    def state(self) -> LogbookState:
        return self._state

    @property
    def host(self) -> TelemetryMirror:
        return self._host

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    async def bootstrap(self) -> int:
        """Seed the mirror and state from the Signal K REST API.

        Seeded values are observed, not dispatched, so they only set
        baselines and never produce entries. Returns the number of paths
        seeded; 0 when the server could not be read.
        """
        if not self._config.signalk_url:
            return 0
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        client = SignalKClient(self._config.signalk_url, self._http_session, token=self._config.signalk_token)
        try:
            values = await client.fetch_self()
        except SignalKError:
            _logger.warning("Signal K bootstrap failed; waiting for live updates", exc_info=True)
            return 0
        self._host.update_many(values)
        for path, value in values.items():
            self._state.observe(path, value)
        _logger.debug("Seeded %d paths from %s", len(values), self._config.signalk_url)
        return len(values)

    def handle_update(self, update: TelemetryUpdate) -> None:
        """Mirror an update and schedule its dispatch.

        Dispatches start in arrival order. A failed dispatch is logged; it
        is up to the feed to redeliver.
        """
        self._host.update(update.path, update.value)
        task = asyncio.get_running_loop().create_task(self._dispatch_logged(update))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def feed(self, updates: Iterable[TelemetryUpdate]) -> None:
        """Mirror and dispatch updates one by one, awaiting each."""
        for update in updates:
            self._host.update(update.path, update.value)
            await self.engine.dispatch(update.path, update.value)

    async def _dispatch_logged(self, update: TelemetryUpdate) -> None:
        try:
            await self.engine.dispatch(update.path, update.value)
        except Exception:
            _logger.warning("Automatic log entry for %s failed", update.path, exc_info=True)

    # ------------------------------------------------------------------
    # MQTT
    # ------------------------------------------------------------------

    async def _start_mqtt(self) -> None:
        assert self._loop is not None  # noqa: S101
        bootstrap = MqttBootstrap(
            broker_host=self._config.mqtt_host,
            broker_port=self._config.mqtt_port,
            topic_prefix=self._config.mqtt_topic_prefix,
            client_id=build_client_id(),
            username=self._config.mqtt_username,
            password=self._config.mqtt_password,
        )
        runtime = SignalKMqttRuntime(
            loop=self._loop,
            on_update=self.handle_update,
            keepalive=self._config.mqtt_keepalive,
            logger=_logger,
        )
        try:
            await self._loop.run_in_executor(None, runtime.start, bootstrap)
        except Exception:
            _logger.warning("MQTT runtime start failed", exc_info=True)
            return
        self._mqtt_runtime = runtime

    async def _stop_mqtt(self) -> None:
        runtime = self._mqtt_runtime
        self._mqtt_runtime = None
        if runtime is None or self._loop is None:
            return
        try:
            await self._loop.run_in_executor(None, runtime.stop)
        except Exception:
            _logger.debug("MQTT runtime stop failed", exc_info=True)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _start_timers(self) -> None:
        engine = self.engine
        self._timers = [
            asyncio.create_task(self._run_periodic(self._config.record_interval, engine.promote_records, "record")),
            asyncio.create_task(self._run_periodic(self._config.snapshot_interval, engine.hourly_snapshot, "snapshot")),
        ]

    async def _run_periodic(self, interval: float, tick: Callable[[], Awaitable[Any]], name: str) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await tick()
            except Exception:
                _logger.warning("Periodic %s tick failed", name, exc_info=True)

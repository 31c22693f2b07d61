from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import aiohttp
import pytest
from aiohttp import test_utils, web

from pylogbook._transport import SignalKClient
from pylogbook.config import LogbookConfig
from pylogbook.exceptions import LogbookError, SignalKTransportError
from pylogbook.logbook import Logbook
from pylogbook.state.events import TelemetryUpdate
from pylogbook.storage import MemoryLogStore

SELF_ENDPOINT = "/signalk/v1/api/vessels/self"

_VESSEL: dict[str, Any] = {
    "name": "Aurora",
    "navigation": {
        "state": {"value": "sailing"},
        "position": {"value": {"latitude": 60.1, "longitude": 24.9}},
    },
    "steering": {"autopilot": {"state": {"value": "standby"}}},
}


def _dt() -> datetime:
    return datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def _config(**overrides: Any) -> LogbookConfig:
    return LogbookConfig(record_interval=3600, snapshot_interval=3600, **overrides)


def _signalk_app(body: Any, *, status: int = 200, seen_headers: list[str | None] | None = None) -> web.Application:
    async def handler(request: web.Request) -> web.Response:
        if seen_headers is not None:
            seen_headers.append(request.headers.get("Authorization"))
        if isinstance(body, str):
            return web.Response(text=body, status=status)
        return web.json_response(body, status=status)

    app = web.Application()
    app.router.add_get(SELF_ENDPOINT, handler)
    return app


@pytest.mark.asyncio
async def test_feed_writes_entries() -> None:
    store = MemoryLogStore()

    async with Logbook(_config(), sink=store, clock=_dt) as logbook:
        await logbook.feed(
            [
                TelemetryUpdate(path="navigation.state", value="anchored"),
                TelemetryUpdate(path="navigation.state", value="motoring"),
            ]
        )

    assert [entry.text for entry in store.entries] == ["Anchor up, motoring"]
    assert logbook.host.last_status == "Automatic log entry: Anchor up, motoring"


@pytest.mark.asyncio
async def test_handle_update_dispatches_before_exit() -> None:
    store = MemoryLogStore()

    async with Logbook(_config(), sink=store, clock=_dt) as logbook:
        logbook.handle_update(TelemetryUpdate(path="navigation.state", value="moored"))
        logbook.handle_update(TelemetryUpdate(path="navigation.state", value="sailing"))
        assert logbook.host.read_current_value("navigation.state") == "sailing"

    assert [entry.text for entry in store.entries] == ["Sailing"]


def test_engine_requires_context() -> None:
    with pytest.raises(LogbookError):
        _ = Logbook(_config()).engine


@pytest.mark.asyncio
async def test_bootstrap_seeds_baselines_from_rest() -> None:
    store = MemoryLogStore()
    seen: list[str | None] = []

    async with test_utils.TestServer(_signalk_app(_VESSEL, seen_headers=seen)) as server:
        url = f"http://{server.host}:{server.port}"
        async with aiohttp.ClientSession() as session:
            config = _config(signalk_url=url, signalk_token="secret")
            async with Logbook(config, sink=store, session=session, clock=_dt) as logbook:
                assert logbook.state.navigation_state == "sailing"
                assert logbook.state.autopilot_state == "standby"
                assert logbook.host.read_current_value("name") == "Aurora"
                assert store.entries == []

                await logbook.feed([TelemetryUpdate(path="steering.autopilot.state", value="auto")])

    assert seen == ["Bearer secret"]
    assert [entry.text for entry in store.entries] == ["Autopilot activated"]
    assert store.entries[0].position is not None
    assert store.entries[0].position.latitude == 60.1


@pytest.mark.asyncio
async def test_bootstrap_failure_is_not_fatal() -> None:
    store = MemoryLogStore()

    async with test_utils.TestServer(_signalk_app({"message": "boom"}, status=500)) as server:
        url = f"http://{server.host}:{server.port}"
        async with aiohttp.ClientSession() as session:
            async with Logbook(_config(signalk_url=url), sink=store, session=session) as logbook:
                assert await logbook.bootstrap() == 0
                assert logbook.state.navigation_state is None


@pytest.mark.asyncio
async def test_client_maps_http_errors() -> None:
    async with test_utils.TestServer(_signalk_app("unauthorized", status=401)) as server:
        async with aiohttp.ClientSession() as session:
            client = SignalKClient(f"http://{server.host}:{server.port}/", session)
            with pytest.raises(SignalKTransportError) as exc_info:
                await client.fetch_self()

    assert exc_info.value.status_code == 401
    assert exc_info.value.endpoint == SELF_ENDPOINT


@pytest.mark.asyncio
async def test_client_rejects_invalid_json() -> None:
    async with test_utils.TestServer(_signalk_app("<html>", status=200)) as server:
        async with aiohttp.ClientSession() as session:
            client = SignalKClient(f"http://{server.host}:{server.port}", session)
            with pytest.raises(SignalKTransportError, match="Invalid JSON"):
                await client.fetch_self()

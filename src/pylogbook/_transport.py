"""Signal K REST client."""

from __future__ import annotations

import json
import logging
from typing import Any

import aiohttp

from pylogbook._constants import SIGNALK_SELF_ENDPOINT, USER_AGENT
from pylogbook._redact import redact_for_log
from pylogbook.exceptions import SignalKTransportError
from pylogbook.ingestion.delta import flatten_full_model

_logger = logging.getLogger(__name__)


class SignalKClient:
    """Reads the self vessel's full data model over HTTP."""

    def __init__(
        self,
        base_url: str,
        http_session: aiohttp.ClientSession,
        *,
        token: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http_session
        self._token = token
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _headers(self) -> dict[str, str]:
        headers = {"accept": "application/json", "user-agent": USER_AGENT}
        if self._token:
            headers["authorization"] = f"Bearer {self._token}"
        return headers

    async def get_json(self, endpoint: str) -> Any:
        url = f"{self._base_url}{endpoint}"
        _logger.debug("GET %s headers=%s", url, redact_for_log(self._headers()))
        try:
            async with self._http.get(url, headers=self._headers(), timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise SignalKTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except SignalKTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise SignalKTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SignalKTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc
        _logger.debug("Response from %s: %s", endpoint, redact_for_log(body))
        return body

    async def fetch_self(self) -> dict[str, Any]:
        """Return the self vessel as ``{dotted path: value}``."""
        body = await self.get_json(SIGNALK_SELF_ENDPOINT)
        if not isinstance(body, dict):
            raise SignalKTransportError(
                f"Expected an object from {SIGNALK_SELF_ENDPOINT}",
                endpoint=SIGNALK_SELF_ENDPOINT,
            )
        return flatten_full_model(body)

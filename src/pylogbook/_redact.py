"""Masking of credentials in DEBUG output.

Three things that reach DEBUG logs can carry secrets:

* REST request headers, which hold the Signal K bearer token;
* Signal K server bodies (``/signalk/v1/auth/login`` and access request
  replies return a ``token``; some plugins echo ``password`` fields);
* values decoded from the MQTT gateway, which may be any JSON object a
  plugin publishes.

Keys are compared after lowercasing and dropping ``_``/``-``, so
``mqtt_password``, ``Authorization`` and ``access-token`` are all caught.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

REDACTED = "<redacted>"

_SECRET_KEYS: frozenset[str] = frozenset(
    {
        # HTTP
        "authorization",
        "cookie",
        "setcookie",
        # Signal K security
        "token",
        "accesstoken",
        "refreshtoken",
        "password",
        "secret",
        # pylogbook settings, when a config mapping is dumped
        "signalktoken",
        "mqttpassword",
    }
)

_MAX_DEPTH = 20


def _is_secret(key: object) -> bool:
    normalized = str(key).lower().replace("_", "").replace("-", "")
    return normalized in _SECRET_KEYS


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Copy of *value* with secret keys masked and long strings cut at *max_string*."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, Mapping):
        return {
            str(key): REDACTED if _is_secret(key) else redact_for_log(item, max_string=max_string, _depth=_depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return repr(value)

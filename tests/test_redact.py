from __future__ import annotations

from pylogbook._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "name": "Aurora",
        "token": "abc",
        "Authorization": "Bearer abc",
        "mqtt": {"username": "boat", "password": "pw"},
        "servers": [{"accessToken": "t1"}],
    }

    redacted = redact_for_log(payload)
    assert redacted["name"] == "Aurora"
    assert redacted["token"] == "<redacted>"
    assert redacted["Authorization"] == "<redacted>"
    assert redacted["mqtt"] == {"username": "boat", "password": "<redacted>"}
    assert redacted["servers"] == [{"accessToken": "<redacted>"}]


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_summarizes_bytes() -> None:
    assert redact_for_log(b"\x00\x01\x02") == "<bytes:3b>"


def test_redact_for_log_matches_key_spelling_variants() -> None:
    headers = {"accept": "application/json", "authorization": "Bearer abc"}
    settings = {"mqtt_host": "localhost", "mqtt_password": "pw", "signalk_token": "tok", "access-token": "t"}

    assert redact_for_log(headers) == {"accept": "application/json", "authorization": "<redacted>"}
    assert redact_for_log(settings) == {
        "mqtt_host": "localhost",
        "mqtt_password": "<redacted>",
        "signalk_token": "<redacted>",
        "access-token": "<redacted>",
    }

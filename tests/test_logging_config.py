"""Tests for the structured logging helpers."""

import json
import logging

from pydantic import SecretStr

from lbg.logging_config import _sanitize, configure_logging, log_call, log_http_request, logger


def test_sanitize_drops_sensitive_keys() -> None:
    cleaned = _sanitize({"email": "a@b.com", "password": "pw", "access_token": "T", "nested": [{"secret": 1, "n": 2}]})
    assert cleaned == {"email": "a@b.com", "nested": [{"n": 2}]}


def test_sanitize_masks_secret_values() -> None:
    cleaned = _sanitize({"credentials": [SecretStr("pw")], "when": object})
    assert cleaned == {"credentials": ["**********"], "when": repr(object)}


def test_http_request_log_strips_authorization(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="lbg")
    log_http_request("GET", "https://h.example/jobs?", headers={"Authorization": "jwt T1", "bohr-client": "utility:1.2.18"},
                     attempt=1, status=200, duration_ms=12.5)
    record = json.loads(caplog.records[-1].getMessage())
    assert record["headers"] == {"bohr-client": "utility:1.2.18"}
    assert record["status"] == 200
    assert record["duration_ms"] == 12.5


def test_log_call_records_entry_and_exit(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="lbg")

    @log_call
    def add(a, b, *, password=None):
        return a + b

    assert add(1, 2, password="pw") == 3
    events = [json.loads(r.getMessage()) for r in caplog.records]
    assert [e["event"] for e in events] == ["call_start", "call_end"]
    assert events[0]["kwargs"] == {}
    assert events[1]["result"] == 3


def test_configure_logging_is_idempotent() -> None:
    before = list(logger.handlers)
    level = logger.level
    try:
        configure_logging(logging.WARNING)
        configure_logging(logging.WARNING)
        added = [h for h in logger.handlers if h not in before]
        assert len(added) == 1
        assert logger.level == logging.WARNING
    finally:
        for handler in logger.handlers[:]:
            if handler not in before:
                logger.removeHandler(handler)
        logger.setLevel(level)

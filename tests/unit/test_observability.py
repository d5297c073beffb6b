"""Unit tests for structured logging utilities in ``observability``.

Validates the null handler, trace binding, and event construction behaviour the
loader relies on, and checks that raw values never reach the log records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pytest

from lib_typed_env import EnvironSource, EnvLoader, bind_trace_id, get_logger
from lib_typed_env.observability import TRACE_ID, log_info, make_event


@dataclass
class Secrets:
    token: str = ""


def test_null_handler_present() -> None:
    """Package logger should always include a NullHandler to avoid surprises."""

    logger = get_logger()
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    """Structured logs should include the bound trace identifier and contextual fields."""

    caplog.set_level(logging.INFO, logger="lib_typed_env")
    bind_trace_id("trace-123")
    try:
        log_info("assignment_complete", stage="assignment", key=None)
    finally:
        bind_trace_id(None)
    assert caplog.records
    record = caplog.records[-1]
    assert getattr(record, "context") == {"trace_id": "trace-123", "stage": "assignment", "key": None}


def test_bind_trace_id_clears_context() -> None:
    """Clearing the trace ID should reset the context variable to None."""

    bind_trace_id("trace-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None


def test_make_event_merges_optional_payload() -> None:
    """make_event should merge optional metadata without mutating base keys."""

    event = make_event("discovery", None, {"values": 3})
    assert event == {"stage": "discovery", "key": None, "values": 3}


def test_load_logs_keys_but_never_values(caplog: pytest.LogCaptureFixture) -> None:
    """A full load emits discovery and assignment events without leaking the secret."""

    caplog.set_level(logging.DEBUG, logger="lib_typed_env")
    EnvLoader("APP").load(Secrets(), source=EnvironSource(environ={"APP_TOKEN": "hunter2"}))

    messages = [record.getMessage() for record in caplog.records]
    assert "value_discovered" in messages
    assert "discovery_complete" in messages
    assert "assignment_complete" in messages

    discovered = next(record for record in caplog.records if record.getMessage() == "value_discovered")
    assert getattr(discovered, "context")["key"] == "APP_TOKEN"
    for record in caplog.records:
        assert "hunter2" not in repr(getattr(record, "context", {}))


def test_load_failure_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    """Failed loads emit ``load_failed`` before the error propagates."""

    @dataclass
    class Broken:
        port: int = 0

    caplog.set_level(logging.DEBUG, logger="lib_typed_env")
    with pytest.raises(ValueError):
        EnvLoader().load(Broken(), source=EnvironSource(environ={"PORT": "eighty"}))
    failed = [record for record in caplog.records if record.getMessage() == "load_failed"]
    assert failed
    assert getattr(failed[-1], "context")["target"] == "Broken"


def test_custom_converter_failure_is_logged_and_propagates(caplog: pytest.LogCaptureFixture) -> None:
    """Exceptions outside the library taxonomy are logged too, then re-raised unchanged."""

    class VaultUnavailable(Exception):
        pass

    def fetch_secret(raw: str) -> str:
        raise VaultUnavailable(raw)

    caplog.set_level(logging.DEBUG, logger="lib_typed_env")
    with pytest.raises(VaultUnavailable):
        EnvLoader(converters={str: fetch_secret}).load(Secrets(), source=EnvironSource(environ={"TOKEN": "ref"}))
    failed = [record for record in caplog.records if record.getMessage() == "load_failed"]
    assert getattr(failed[-1], "context")["error"] == "VaultUnavailable"


def test_load_clears_previous_trace_id(caplog: pytest.LogCaptureFixture) -> None:
    """Each load starts without a stale trace identifier."""

    caplog.set_level(logging.DEBUG, logger="lib_typed_env")
    bind_trace_id("stale-trace")
    EnvLoader().load(Secrets(), source=EnvironSource(environ={}))
    assert TRACE_ID.get() is None
    completed = next(record for record in caplog.records if record.getMessage() == "assignment_complete")
    assert getattr(completed, "context")["trace_id"] is None

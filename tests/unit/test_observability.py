"""Unit tests for structured logging utilities in ``observability``."""

from __future__ import annotations

import logging

import pytest

from lib_config_vault import bind_trace_id, get_logger
from lib_config_vault import observability
from lib_config_vault.observability import TRACE_ID, log_debug, log_error, log_info, make_event


def test_null_handler_present() -> None:
    """Package logger should always include a NullHandler to avoid surprises."""

    logger = get_logger()
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    """Structured logs should include the bound trace identifier and contextual fields."""

    caplog.set_level(logging.INFO, logger="lib_config_vault")
    bind_trace_id("trace-123")
    try:
        log_info("config_saved", path="/tmp/app.toml", format="toml")
    finally:
        bind_trace_id(None)
    record = caplog.records[-1]
    assert getattr(record, "context") == {"trace_id": "trace-123", "path": "/tmp/app.toml", "format": "toml"}


def test_bind_trace_id_clears_context() -> None:
    bind_trace_id("trace-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None


def test_make_event_merges_optional_payload() -> None:
    event = make_event("/etc/app.yaml", "yaml", {"keys": 3})
    assert event == {"path": "/etc/app.yaml", "format": "yaml", "keys": 3}
    assert make_event(None, None) == {"path": None, "format": None}


def test_log_helpers_map_to_levels(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_config_vault")
    log_debug("type_conversion_declined", path="a")
    log_info("config_loaded", path="b")
    log_error("config_file_invalid", path="c")
    assert [(record.getMessage(), record.levelno) for record in caplog.records[-3:]] == [
        ("type_conversion_declined", logging.DEBUG),
        ("config_loaded", logging.INFO),
        ("config_file_invalid", logging.ERROR),
    ]
    assert not hasattr(observability, "log_warning")

from __future__ import annotations

import logging

import pytest

from layered_mcp.request_logging import (
    CorrelationLogger,
    _RequestIdFilter,
    configure_logging,
    get_correlation_logger,
    resolve_level,
)


@pytest.mark.parametrize(
    ("level", "expected"),
    [
        ("trace", logging.DEBUG),
        ("DEBUG", logging.DEBUG),
        ("warn", logging.WARNING),
        (" error ", logging.ERROR),
        ("bogus", logging.INFO),
        (None, logging.INFO),
        (logging.CRITICAL, logging.CRITICAL),
    ],
)
def test_resolve_level(level, expected):
    assert resolve_level(level) == expected


def test_with_id_returns_a_new_logger():
    base = get_correlation_logger("tests.logging")
    child = base.with_id("requestId", "r-1").with_id("step", "s-1")

    assert base.ids == ()
    assert child.ids == ({"requestId": "r-1"}, {"step": "s-1"})
    assert child.request_id == "r-1"
    assert base.request_id == "system"


def test_records_carry_correlation_ids(caplog):
    logger = CorrelationLogger(logging.getLogger("tests.logging.records")).with_id(
        "requestId", "r-9"
    )

    with caplog.at_level(logging.INFO, logger="tests.logging.records"):
        logger.log_at("info", "handled tool=%s", "list_domains")
        logger.log_at("debug", "not emitted")

    (record,) = caplog.records
    assert record.getMessage() == "handled tool=list_domains"
    assert record.request_id == "r-9"
    assert record.correlation_ids == [{"requestId": "r-9"}]


def test_configure_logging_defaults_request_id():
    configure_logging("info")
    root = logging.getLogger()
    record = logging.LogRecord("plain", logging.INFO, __file__, 1, "hello", None, None)

    assert root.handlers
    for handler in root.handlers:
        assert any(isinstance(item, _RequestIdFilter) for item in handler.filters)
        handler.filter(record)
    assert record.request_id == "system"

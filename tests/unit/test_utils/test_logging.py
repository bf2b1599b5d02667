"""Unit tests for structlog setup."""

from __future__ import annotations

import json
import logging

import pytest

from repograph.utils.logging import get_logger, setup_logging


@pytest.fixture
def json_logging(capsys):
    setup_logging("INFO", "json")
    yield capsys
    setup_logging("WARNING", "console")


def _records(out: str) -> list[dict]:
    return [json.loads(line) for line in out.splitlines() if line.strip()]


def test_json_records_carry_app_and_context(json_logging):
    get_logger("repograph.test").info("graph_built", nodes=4, edges=4)

    record = _records(json_logging.readouterr().out)[-1]
    assert record["event"] == "graph_built"
    assert record["app"] == "repograph"
    assert record["level"] == "info"
    assert record["logger"] == "repograph.test"
    assert record["nodes"] == 4


def test_exceptions_are_rendered_in_json(json_logging):
    try:
        raise ValueError("boom")
    except ValueError:
        get_logger("repograph.test").exception("unhandled_exception")

    record = _records(json_logging.readouterr().out)[-1]
    assert "Traceback" in record["exception"]
    assert "ValueError: boom" in record["exception"]


def test_http_client_loggers_are_quieted(json_logging):
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING

# tests/unit/core/test_logging.py
"""Tests for structured logging configuration."""

import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from wosync.core.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def test_json_output_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(json_output=True, level="INFO")

    get_logger("wosync.test").info("work_order_status_updated", work_order_id=56335)

    captured = capsys.readouterr()
    assert captured.out == ""
    event = json.loads(captured.err.strip().splitlines()[-1])
    assert event["event"] == "work_order_status_updated"
    assert event["work_order_id"] == 56335
    assert event["level"] == "info"
    assert "_record" not in event


def test_stdlib_loggers_share_the_format(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(json_output=True, level="INFO")

    logging.getLogger("thirdparty").warning("plain stdlib message")

    event = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert event["event"] == "plain stdlib message"


def test_level_filters(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(json_output=True, level="WARNING")

    get_logger("wosync.test").info("hidden")

    assert capsys.readouterr().err == ""


def test_noisy_loggers_capped_at_warning() -> None:
    configure_logging(level="DEBUG")

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

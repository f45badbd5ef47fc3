"""Tests for structured logging configuration."""

import io
import json
import logging

import pytest
import structlog

from src.observability.logging import (
    bind_batch_context,
    clear_batch_context,
    configure_logging,
    level_for_verbosity,
)
from src.settings.app import ExportSettings, LogVerbosity


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    clear_batch_context()
    structlog.reset_defaults()


@pytest.mark.parametrize(
    ("verbosity", "level"),
    [
        (LogVerbosity.ALL, logging.INFO),
        (LogVerbosity.WARNING, logging.WARNING),
        (LogVerbosity.ERROR, logging.ERROR),
        (LogVerbosity.NONE, logging.CRITICAL),
    ],
)
def test_level_for_verbosity(verbosity: LogVerbosity, level: int) -> None:
    assert level_for_verbosity(verbosity) == level


def test_json_events_carry_batch_id() -> None:
    output = io.StringIO()
    configure_logging(ExportSettings(log_level=LogVerbosity.ALL), output)

    bind_batch_context("batch-1")
    structlog.get_logger().bind(component="test").info("document_render_started", document="a.md")

    event = json.loads(output.getvalue().strip())
    assert event["event"] == "document_render_started"
    assert event["batch_id"] == "batch-1"
    assert event["component"] == "test"
    assert event["level"] == "info"
    assert "timestamp" in event


def test_verbosity_filters_console_events() -> None:
    output = io.StringIO()
    configure_logging(ExportSettings(log_level=LogVerbosity.ERROR), output)

    log = structlog.get_logger()
    log.warning("export_warning")
    log.error("export_error")

    lines = output.getvalue().strip().splitlines()
    assert [json.loads(line)["event"] for line in lines] == ["export_error"]


def test_cleared_context_not_emitted() -> None:
    output = io.StringIO()
    configure_logging(ExportSettings(), output)

    bind_batch_context("batch-2")
    clear_batch_context()
    structlog.get_logger().info("batch_ended")

    assert "batch_id" not in json.loads(output.getvalue().strip())

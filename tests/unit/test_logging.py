"""Unit tests for structured logging configuration."""

import io
import json
import sys

import pytest

from formgen.core.logging import (
    OperationTimer,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)
from formgen.validation.bridge import validate


@pytest.fixture
def log_stream():
    """Capture log output in memory and restore test logging afterwards."""
    stream = io.StringIO()
    yield stream
    clear_context()
    configure_logging(environment="testing", log_level="WARNING", stream=sys.__stderr__)


def records(stream):
    """Parse JSON log lines."""
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestConfigureLogging:
    """Test logging configuration."""

    def test_json_records(self, log_stream):
        """Test the fields of a JSON log record."""
        configure_logging(log_level="DEBUG", json_logs=True, stream=log_stream)
        get_logger("tests.logging").info("Form generated", fields=3)

        (record,) = records(log_stream)
        assert record["event"] == "Form generated"
        assert record["fields"] == 3
        assert record["level"] == "info"
        assert record["service"] == "formgen"
        assert record["logger"] == "tests.logging"
        assert "timestamp" in record

    def test_production_uses_json(self, log_stream):
        """Test that production logs are JSON without asking."""
        configure_logging(environment="production", stream=log_stream)
        get_logger("tests.logging").info("Rendered")
        assert records(log_stream)[0]["event"] == "Rendered"

    def test_level_filtering(self, log_stream):
        """Test that records below the level are dropped."""
        configure_logging(log_level="WARNING", json_logs=True, stream=log_stream)
        logger = get_logger("tests.logging")
        logger.info("Hidden")
        logger.warning("Shown")
        assert [r["event"] for r in records(log_stream)] == ["Shown"]

    def test_console_renderer(self, log_stream):
        """Test the human-readable development format."""
        configure_logging(environment="development", stream=log_stream)
        get_logger("tests.logging").info("Rendering", theme="dark")
        output = log_stream.getvalue()
        assert "Rendering" in output
        assert "theme=dark" in output

    def test_bound_context(self, log_stream):
        """Test that bound context variables appear in records."""
        configure_logging(json_logs=True, stream=log_stream)
        bind_context(command="render")
        get_logger("tests.logging").info("Started")
        assert records(log_stream)[0]["command"] == "render"


class TestOperationTimer:
    """Test operation timing."""

    def test_successful_operation(self, log_stream):
        """Test start, progress and completion records."""
        configure_logging(log_level="DEBUG", json_logs=True, stream=log_stream)
        logger = get_logger("tests.timer")
        with OperationTimer(logger, "map_schema", schema="Signup") as timer:
            timer.log_progress("Halfway", step=1)

        events = records(log_stream)
        assert [r["event"] for r in events] == [
            "Operation started",
            "Halfway",
            "Operation completed",
        ]
        assert events[0]["schema"] == "Signup"
        assert events[2]["operation"] == "map_schema"
        assert timer.duration_ms is not None
        assert events[2]["duration_ms"] == timer.duration_ms

    def test_failed_operation(self, log_stream):
        """Test that failures are logged and re-raised."""
        configure_logging(log_level="DEBUG", json_logs=True, stream=log_stream)
        logger = get_logger("tests.timer")
        with pytest.raises(RuntimeError):
            with OperationTimer(logger, "validate"):
                raise RuntimeError("boom")

        failure = records(log_stream)[-1]
        assert failure["event"] == "Operation failed"
        assert failure["level"] == "error"
        assert failure["error"] == "boom"
        assert failure["error_type"] == "RuntimeError"


class TestValidationLogging:
    """Test the records written while validating submissions."""

    def test_invalid_submission_is_not_an_error(self, log_stream, address_schema):
        """Test that rejected user input is logged at info, never as a failure."""
        configure_logging(log_level="DEBUG", json_logs=True, stream=log_stream)
        result = validate(address_schema, {"city": "X"})
        assert not result.valid

        events = records(log_stream)
        assert [r for r in events if r["level"] == "error"] == []
        (rejected,) = [r for r in events if r["event"] == "Submission failed validation"]
        assert rejected["level"] == "info"
        assert rejected["error_count"] == 1
        assert "Operation completed" in [r["event"] for r in events]

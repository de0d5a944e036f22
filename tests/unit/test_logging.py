"""Unit tests for structured logging configuration."""

import io
import json
import logging
from collections.abc import Iterator

import pytest
import structlog

from repofetch.observability import configure_logging, get_logger


@pytest.fixture(autouse=True)
def restore_structlog() -> Iterator[None]:
    """Reset structlog after each test."""
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output(self) -> None:
        """Test events render as JSON lines with level and timestamp."""
        output = io.StringIO()
        configure_logging(output=output, json_format=True)

        get_logger().info("fetch_complete", status_code=200, bytes=15)

        record = json.loads(output.getvalue().strip().splitlines()[-1])
        assert record["event"] == "fetch_complete"
        assert record["level"] == "info"
        assert record["status_code"] == 200
        assert "timestamp" in record

    def test_level_filtering(self) -> None:
        """Test events below the configured level are dropped."""
        output = io.StringIO()
        configure_logging(level=logging.WARNING, output=output)

        get_logger().info("fetch_start")

        assert output.getvalue() == ""

    def test_console_output(self) -> None:
        """Test console rendering includes the event name."""
        output = io.StringIO()
        configure_logging(output=output, json_format=False)

        get_logger().warning("redirect_followed", hop=1)

        assert "redirect_followed" in output.getvalue()

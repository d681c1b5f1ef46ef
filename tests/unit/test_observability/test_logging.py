"""Unit tests for logging configuration."""

import io
import json
from collections.abc import Generator

import pytest
import structlog

from haven_client.observability import (
    bind_invocation_context,
    clear_invocation_context,
    configure_logging,
)


@pytest.fixture(autouse=True)
def restore_structlog() -> Generator[None]:
    """Undo global logging configuration after each test."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


class TestInvocationContext:
    """Tests for invocation id binding."""

    @pytest.mark.unit
    def test_bind_and_clear(self) -> None:
        """The invocation id is bound until cleared."""
        bind_invocation_context("inv-1")
        assert structlog.contextvars.get_contextvars()["invocation_id"] == "inv-1"

        clear_invocation_context()
        assert "invocation_id" not in structlog.contextvars.get_contextvars()

    @pytest.mark.unit
    def test_bound_id_appears_in_json_output(self) -> None:
        """JSON log lines carry the bound invocation id."""
        output = io.StringIO()
        configure_logging(level="DEBUG", output=output, json_format=True)
        bind_invocation_context("inv-2")

        structlog.get_logger().info("sample_event", component="test")

        record = json.loads(output.getvalue().strip().splitlines()[-1])
        assert record["event"] == "sample_event"
        assert record["invocation_id"] == "inv-2"
        assert record["level"] == "info"

    @pytest.mark.unit
    def test_level_filters_messages(self) -> None:
        """Messages below the configured level are dropped."""
        output = io.StringIO()
        configure_logging(level="warning", output=output, json_format=True)

        structlog.get_logger().info("quiet_event")

        assert output.getvalue() == ""

# ABOUTME: Unit tests for logging utilities
# ABOUTME: Tests correlation IDs and the structlog configuration

import io
import json
from unittest.mock import MagicMock

import pytest
import structlog

from backstage_plugins.utils.logging import (
    add_correlation_id,
    configure_logging,
    correlation_id,
    get_correlation_id,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.mark.unit
class TestCorrelationId:
    """Tests for correlation ID generation and context management."""

    def test_get_correlation_id_generates_new_when_empty(self):
        correlation_id.set("")

        cid = get_correlation_id()

        assert len(cid) == 8
        int(cid, 16)

    def test_get_correlation_id_returns_existing(self):
        set_correlation_id("test1234")

        assert get_correlation_id() == "test1234"

    def test_get_correlation_id_preserves_value(self):
        correlation_id.set("")

        assert get_correlation_id() == get_correlation_id()

    def test_empty_id_regenerates(self):
        set_correlation_id("test1234")
        set_correlation_id("")

        assert get_correlation_id() != "test1234"


@pytest.mark.unit
class TestAddCorrelationId:
    """Tests for the add_correlation_id processor function."""

    def test_adds_correlation_id_to_event_dict(self):
        set_correlation_id("proc1234")

        result = add_correlation_id(MagicMock(), "info", {"event": "test_event"})

        assert result == {"event": "test_event", "correlation_id": "proc1234"}


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_output_to_stream(self):
        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)
        set_correlation_id("json1234")

        structlog.get_logger("test").info("Synchronized", entities=3)

        line = json.loads(stream.getvalue().strip())
        assert line["event"] == "Synchronized"
        assert line["entities"] == 3
        assert line["level"] == "info"
        assert line["correlation_id"] == "json1234"
        assert "timestamp" in line

    def test_level_filters_events(self):
        stream = io.StringIO()
        configure_logging(level="WARNING", json_output=True, stream=stream)

        logger = structlog.get_logger("test")
        logger.info("hidden")
        logger.warning("shown")

        lines = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert [line["event"] for line in lines] == ["shown"]

"""
Unit tests for the structured logging configuration.
"""

import logging
from datetime import datetime

import pytest
import structlog

from shared.logging import clear_context, configure_logging, set_request_id


class TestConfigureLogging:
    """Test cases for configure_logging."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        clear_context()
        structlog.reset_defaults()

    def _render(self, event: str, **fields):
        """Run the configured processor chain up to (not including) the JSON renderer."""
        configure_logging("gameday", "debug")
        processors = structlog.get_config()["processors"]
        logger = logging.getLogger("gameday.resolver")
        logger.setLevel(logging.DEBUG)
        event_dict = dict(fields, event=event)
        for processor in processors[:-1]:
            event_dict = processor(logger, "info", event_dict)
        return event_dict

    def test_single_iso_timestamp(self):
        event_dict = self._render("Cache hit", resource="schedule")

        assert isinstance(event_dict["timestamp"], str)
        datetime.fromisoformat(event_dict["timestamp"].replace("Z", "+00:00"))

    def test_service_and_request_context(self):
        set_request_id("req-123")

        event_dict = self._render("Cache miss")

        assert event_dict["service"] == "gameday"
        assert event_dict["logger"] == "gameday.resolver"
        assert event_dict["level"] == "info"
        assert event_dict["request_id"] == "req-123"

"""Tests for process logging setup."""

import json
import logging
import sys

import pytest

from runtime.logging_config import JsonFormatter, configure_logging, parse_log_level


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Root logger configuration."""

    def test_text_format(self, restore_root_logger):
        root = configure_logging("debug", "text")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_json_format(self, restore_root_logger):
        root = configure_logging("WARNING", "json")
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_invalid_format(self, restore_root_logger):
        with pytest.raises(ValueError, match="invalid logging format: xml"):
            configure_logging("info", "xml")

    def test_invalid_level(self, restore_root_logger):
        with pytest.raises(ValueError, match="invalid log level: loud"):
            configure_logging("loud", "text")

    def test_parse_log_level(self):
        assert parse_log_level(" Error ") == logging.ERROR


class TestJsonFormatter:
    """One JSON object per record."""

    def test_format(self):
        record = logging.LogRecord("liquidator", logging.INFO, __file__, 1, "swept %d", (3,), None)
        payload = json.loads(JsonFormatter().format(record))
        assert payload["level"] == "INFO"
        assert payload["logger"] == "liquidator"
        assert payload["message"] == "swept 3"
        assert "ts" in payload

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("liquidator", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        payload = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: boom" in payload["exc_info"]

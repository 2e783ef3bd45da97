"""Tests for structured logging configuration."""

import json
import logging
import sys
from unittest.mock import patch

from eventsite.app.core.logging import (
    JSONFormatter,
    ContextFilter,
    get_logger,
    get_logging_config,
    get_log_context,
    setup_logging,
)


def _record(msg: str = "Test message", level: int = logging.INFO, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:
    """Test JSON formatter for structured logging."""

    def test_basic_json_format(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["source"]["file"] == "test.py"
        assert data["source"]["line"] == 1

    def test_redemption_context_fields(self):
        record = _record("Redemption committed")
        record.employee_id = "E100"
        record.item = "beer"
        record.booth_id = "B1"
        record.actor = "staff@example.com"

        data = json.loads(JSONFormatter().format(record))

        assert data["employee_id"] == "E100"
        assert data["item"] == "beer"
        assert data["booth_id"] == "B1"
        assert data["actor"] == "staff@example.com"
        assert "extra" not in data

    def test_unknown_fields_go_to_extra(self):
        record = _record("Attendee updated")
        record.fields = ["quota_beer"]

        data = json.loads(JSONFormatter().format(record))

        assert data["extra"]["fields"] == ["quota_beer"]

    def test_none_context_values_are_dropped(self):
        record = _record()
        ContextFilter().filter(record)

        data = json.loads(JSONFormatter().format(record))

        assert "employee_id" not in data
        assert "request_id" not in data

    def test_exception_is_included(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = _record("Error occurred", logging.ERROR, sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        exception_text = "".join(data["exception"])
        assert "ValueError" in exception_text
        assert "Test error" in exception_text


class TestContextFilter:
    def test_adds_default_fields(self):
        record = _record()

        assert ContextFilter().filter(record) is True
        for field in JSONFormatter.CONTEXT_FIELDS:
            assert hasattr(record, field)

    def test_preserves_existing_values(self):
        record = _record()
        record.booth_id = "B9"

        ContextFilter().filter(record)

        assert record.booth_id == "B9"


class TestGetLoggingConfig:
    def test_default_text_format(self):
        with patch("eventsite.app.core.logging.settings") as mock_settings:
            mock_settings.log_format = "text"
            mock_settings.log_level = "INFO"

            config = get_logging_config()

        assert "json" not in config["formatters"]
        assert config["handlers"]["console"]["formatter"] == "standard"
        assert "context" in config["handlers"]["console"]["filters"]

    def test_structured_format(self):
        with patch("eventsite.app.core.logging.settings") as mock_settings:
            mock_settings.log_format = "structured"
            mock_settings.log_level = "debug"

            config = get_logging_config()

        assert config["handlers"]["console"]["formatter"] == "structured"
        assert config["handlers"]["console"]["level"] == "DEBUG"

    def test_json_format(self):
        with patch("eventsite.app.core.logging.settings") as mock_settings:
            mock_settings.log_format = "JSON"
            mock_settings.log_level = "WARNING"

            config = get_logging_config()

        assert config["handlers"]["console"]["formatter"] == "json"
        assert config["loggers"]["eventsite"]["level"] == "WARNING"


class TestGetLogContext:
    def test_context_filters_none(self):
        context = get_log_context(request_id="req-1", employee_id=None, actor="a@b.c")

        assert context == {"request_id": "req-1", "actor": "a@b.c"}

    def test_context_with_extra(self):
        context = get_log_context(employee_id="E1", item="beer", booth_id="B1")

        assert context == {"employee_id": "E1", "item": "beer", "booth_id": "B1"}


def test_get_logger_default_name():
    assert get_logger().name == "eventsite"


def test_json_logging_output(capsys):
    with patch("eventsite.app.core.logging.settings") as mock_settings:
        mock_settings.log_format = "json"
        mock_settings.log_level = "INFO"

        setup_logging()
        logger = get_logger("eventsite.test")
        logger.info(
            "Redemption committed",
            extra=get_log_context(employee_id="E100", item="beer"),
        )

    data = json.loads(capsys.readouterr().out.strip())
    assert data["logger"] == "eventsite.test"
    assert data["message"] == "Redemption committed"
    assert data["employee_id"] == "E100"
    assert data["item"] == "beer"

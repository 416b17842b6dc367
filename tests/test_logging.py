"""
Tests for the log output format switch.
"""
import json
import logging
import sys

import pytest

from app.core.config import settings
from app.core.logging import JSONFormatter, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg="Sensor match for rider: 3 ranked", exc_info=None):
    return logging.LogRecord(
        name="app.services.buddy_match",
        level=logging.INFO,
        pathname=__file__,
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:

    def test_one_json_object_per_record(self):
        entry = json.loads(JSONFormatter().format(_record()))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "app.services.buddy_match"
        assert entry["message"] == "Sensor match for rider: 3 ranked"
        assert entry["source"].endswith(":42")
        assert "exception" not in entry

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record("failed", exc_info=sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))

        assert "ValueError: boom" in entry["exception"]


class TestSetupLogging:

    def test_json_when_requested(self, monkeypatch, restore_logging):
        monkeypatch.setattr(settings, "LOG_FORMAT", "json")

        root = setup_logging()

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_json_in_production(self, monkeypatch, restore_logging):
        monkeypatch.setattr(settings, "LOG_FORMAT", "text")
        monkeypatch.setattr(settings, "ENVIRONMENT", "production")

        root = setup_logging()

        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_text_by_default(self, monkeypatch, restore_logging):
        monkeypatch.setattr(settings, "LOG_FORMAT", "text")
        monkeypatch.setattr(settings, "ENVIRONMENT", "development")
        monkeypatch.setattr(settings, "LOG_LEVEL", "debug")

        root = setup_logging()

        assert not isinstance(root.handlers[0].formatter, JSONFormatter)
        assert root.level == logging.DEBUG
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

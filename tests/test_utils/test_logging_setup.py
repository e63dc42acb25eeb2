"""
Tests for card_risk/utils/logging.py.

What we test
------------
- JsonLineFormatter emits one JSON object with the standard fields.
- ``extra=`` fields are lifted to the top level; LogRecord internals are not.
- configure_logging() installs a stderr handler and, when configured, a file
  handler whose parent directory is created.
"""

from __future__ import annotations

import json
import logging
import sys

import pytest

from card_risk.config import LoggingConfig
from card_risk.utils.logging import JsonLineFormatter, configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def _record(msg: str = "scored %s", args=("base1-4",), **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "card_risk.test", logging.WARNING, __file__, 10, msg, args, None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonLineFormatter:
    def test_standard_fields(self):
        payload = json.loads(JsonLineFormatter().format(_record()))
        assert payload["level"] == "WARNING"
        assert payload["logger"] == "card_risk.test"
        assert payload["msg"] == "scored base1-4"
        assert payload["ts"].endswith("Z")

    def test_extra_fields_lifted(self):
        payload = json.loads(
            JsonLineFormatter().format(_record(provider="reddit", status="timeout"))
        )
        assert payload["provider"] == "reddit"
        assert payload["status"] == "timeout"

    def test_record_internals_excluded(self):
        payload = json.loads(JsonLineFormatter().format(_record()))
        for internal in ("args", "levelno", "pathname", "lineno", "msecs"):
            assert internal not in payload

    def test_exception_included(self):
        try:
            raise RuntimeError("upstream 503")
        except RuntimeError:
            record = logging.LogRecord(
                "card_risk.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )
        payload = json.loads(JsonLineFormatter().format(record))
        assert "upstream 503" in payload["exc"]


class TestConfigureLogging:
    def test_console_only(self, restore_root_logger):
        handlers = configure_logging(LoggingConfig(level="WARNING", log_file=""))
        assert len(handlers) == 1
        assert handlers[0].stream is sys.stderr
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler_creates_directory(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "nested" / "card_risk.log"
        handlers = configure_logging(LoggingConfig(log_file=str(log_file)))
        assert len(handlers) == 2
        assert log_file.parent.is_dir()

    def test_json_format_selected(self, restore_root_logger):
        handlers = configure_logging(LoggingConfig(log_file="", json_format=True))
        assert isinstance(handlers[0].formatter, JsonLineFormatter)

    def test_http_loggers_quietened(self, restore_root_logger):
        configure_logging(LoggingConfig(level="DEBUG", log_file=""))
        assert logging.getLogger("httpx").level == logging.WARNING

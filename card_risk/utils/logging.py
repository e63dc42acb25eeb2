"""
Logging setup for the card risk engine.

``configure_logging(config)`` is called once by each CLI command before any
scoring starts. Library modules only ever do ``logging.getLogger(__name__)``;
an application embedding the engine keeps its own handlers.

Provider timeouts and failed batch items are logged with structured
``extra=`` fields (``provider``, ``status``, ``card_id``). The JSON formatter
lifts those fields to the top level::

    {"ts": "2026-10-19T09:12:44Z", "level": "WARNING",
     "logger": "card_risk.providers.base",
     "msg": "Provider reddit timed out after 10.0s",
     "provider": "reddit", "status": "timeout"}
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from card_risk.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Loggers from the HTTP stack log every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore")

_STANDARD_RECORD_FIELDS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime"}


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Fields attached through ``extra=`` on the logging call."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _STANDARD_RECORD_FIELDS and not key.startswith("_")
    }


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record: ``ts``, ``level``, ``logger``, ``msg`` plus extras."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "ts": stamp.strftime(TIMESTAMP_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(_record_extras(record))
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _make_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return JsonLineFormatter()
    formatter = logging.Formatter(TEXT_FORMAT, datefmt=TIMESTAMP_FORMAT)
    formatter.converter = time.gmtime
    return formatter


def configure_logging(config: "LoggingConfig") -> list[logging.Handler]:
    """Install stderr (and optionally file) handlers on the root logger.

    Console output goes to stderr so that ``--json`` command output on stdout
    stays parseable.

    Args:
        config: The ``[logging]`` section of ``AppConfig``.

    Returns:
        The handlers that were installed.
    """
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    formatter = _make_formatter(config.json_format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handlers

"""
Process logging setup.

Configures the root logger from a level name and an output format:
  text  human-readable single line per record
  json  one JSON object per record, for log shippers
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from config.settings import LOG_DATE_FORMAT, LOG_FORMAT, LOG_LEVEL, LOG_OUTPUT_FORMAT

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}
LOG_FORMATS = ("text", "json")


class JsonFormatter(logging.Formatter):
    """A minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, separators=(",", ":"))


def parse_log_level(level: str) -> int:
    try:
        return LOG_LEVELS[level.strip().lower()]
    except (KeyError, AttributeError):
        raise ValueError(f"invalid log level: {level}")


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger with plain text or JSON output.

    Args:
        level: debug|info|warning|error|critical; defaults to LIQUIDATOR_LOG_LEVEL
        fmt: text|json; defaults to LIQUIDATOR_LOG_FORMAT

    Raises:
        ValueError: If level or fmt is not recognised
    """
    fmt = (fmt or LOG_OUTPUT_FORMAT).strip().lower()
    if fmt not in LOG_FORMATS:
        raise ValueError(f"invalid logging format: {fmt}")
    log_level = parse_log_level(level or LOG_LEVEL)

    root = logging.getLogger()
    root.setLevel(log_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    root.handlers.clear()
    root.addHandler(handler)

    return root

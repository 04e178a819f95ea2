"""
Logging setup.

- Development: readable single-line format on stderr
- Production: JSON lines (log aggregator compatible)
"""

import json
import logging
import sys
from datetime import datetime, timezone

_EXTRA_KEYS = (
    "request_id",
    "collection",
    "field",
    "resource",
    "action",
    "actor_id",
)


class JSONFormatter(logging.Formatter):
    """JSON log formatter for production."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        for key in _EXTRA_KEYS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """Human-readable formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now().strftime("%H:%M:%S")
        extras = " ".join(
            f"{key}={getattr(record, key)}"
            for key in _EXTRA_KEYS
            if getattr(record, key, None) is not None
        )
        base = f"{ts} {record.levelname:<8} {record.name}: {record.getMessage()}"
        if extras:
            base += f" [{extras}]"
        if record.exc_info and record.exc_info[0] is not None:
            base += "\n" + self.formatException(record.exc_info)
        return base


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Install a single stderr handler on the package logger."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if json_output else ReadableFormatter())

    root = logging.getLogger("portal_engine")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)

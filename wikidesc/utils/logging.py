"""Logging helpers."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
    "asctime",
}


class JsonFormatter(logging.Formatter):
    """Render log records as compact JSON."""

    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.default_time_format),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }

        extras = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS
        }
        if extras:
            data.update(extras)

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        return json.dumps(data, ensure_ascii=False, default=str)


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _formatter(structured: bool) -> logging.Formatter:
    return JsonFormatter() if structured else logging.Formatter(_PLAIN_FORMAT)


def configure_logging(*, level: int | str = logging.INFO, structured: bool = True) -> None:
    """Set the root level and route records to stderr; stdout stays free for command output.

    Handlers installed by someone else (a test runner, an embedding app) are
    kept and only get the chosen formatter.
    """

    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    handlers = root.handlers or [logging.StreamHandler(sys.stderr)]
    for handler in handlers:
        handler.setFormatter(_formatter(structured))
    if not root.handlers:
        root.addHandler(handlers[0])


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "JsonFormatter"]

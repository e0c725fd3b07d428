"""Console logging for Sahay, configured from ``AppSettings``."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.config import dictConfig
from typing import Any, Dict

DEV_ENVIRONMENTS = {"development", "dev", "local", "test"}

_COLOR_CODES = {
    "red": "\033[31m",
    "yellow": "\033[33m",
}

_RESERVED_ATTRS = {
    "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread", "threadName", "processName", "process",
    "taskName", "name", "message",
}


def colorize(text: str, color: str, enabled: bool = True) -> str:
    prefix = _COLOR_CODES.get(color, "") if enabled else ""
    return f"{prefix}{text}\033[0m" if prefix else text


class JsonFormatter(logging.Formatter):
    """One JSON object per record; ``extra`` fields are merged in."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class ColorTextFormatter(logging.Formatter):
    """Plain text lines, warnings in yellow and errors in red when ``color`` is set."""

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, color: bool = False) -> None:
        super().__init__(fmt, datefmt)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        if record.levelno >= logging.ERROR:
            return colorize(formatted, "red", self.color)
        if record.levelno >= logging.WARNING:
            return colorize(formatted, "yellow", self.color)
        return formatted


def configure_logging(
    level: str | None = None,
    fmt: str | None = None,
    *,
    environment: str = "development",
    color: bool | None = None,
) -> None:
    """Install the console handler. Unset values default by environment."""

    is_dev = environment.lower() in DEV_ENVIRONMENTS
    log_level = (level or ("DEBUG" if is_dev else "INFO")).upper()
    formatter_name = "json" if (fmt or "json").lower() == "json" else "text"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": JsonFormatter},
                "text": {
                    "()": ColorTextFormatter,
                    "fmt": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                    "color": is_dev if color is None else color,
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter_name,
                    "level": log_level,
                }
            },
            "root": {
                "handlers": ["console"],
                "level": log_level,
            },
        }
    )


__all__ = ["ColorTextFormatter", "JsonFormatter", "colorize", "configure_logging"]

"""
Structured logging utilities for the Balance Monitor.

Centralizes logging configuration so the CLI, scheduler, request engine, and
strategies log consistently. Uses standard library logging with a
human-readable formatter by default and an optional JSON formatter for
structured logs.

A custom SUCCESS level (between INFO and WARNING) is registered so that the
five monitor log levels (debug/info/warn/error/success) map onto stdlib
loggers.

Usage:
    from balance_monitor.utils.logging import configure_logging, get_logger

    configure_logging(level="INFO", json_logs=False)
    log = get_logger(__name__)
    log.success("balance fetched", extra={"target_id": "deepseek-main"})
"""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any, Dict

SUCCESS = 25

# Attributes present on every LogRecord; anything else came in via `extra=`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "extra"}


class MonitorLogger(logging.Logger):
    """Logger with a `success` method for the SUCCESS level."""

    def success(self, msg: object, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(SUCCESS):
            self._log(SUCCESS, msg, args, **kwargs)


logging.addLevelName(SUCCESS, "SUCCESS")
logging.setLoggerClass(MonitorLogger)


def _json_formatter(record: logging.LogRecord) -> str:
    """Render a log record as JSON string."""
    payload: Dict[str, Any] = {
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    for key, value in vars(record).items():
        if key not in _RESERVED_ATTRS:
            payload[key] = value
    if hasattr(record, "extra") and isinstance(record.extra, dict):
        payload.update(record.extra)
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    force: bool = True,
) -> None:
    """
    Configure root logging.

    Parameters
    ----------
    level : str
        Logging level name (e.g., "DEBUG", "INFO", "SUCCESS", "WARNING").
    json_logs : bool
        Whether to emit logs as JSON. If False, uses a concise human formatter.
    force : bool
        Whether to override existing logging configuration (recommended in CLI apps).
    """
    if not force and logging.getLogger().handlers:
        return
    formatter_name = "json" if json_logs else "console"

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {
                    "()": JsonFormatter,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter_name,
                    "level": level.upper(),
                }
            },
            "root": {
                "handlers": ["default"],
                "level": level.upper(),
            },
        }
    )


def get_logger(name: str) -> MonitorLogger:
    """
    Get a named logger supporting `.success()`.

    The root logger is not a `MonitorLogger`, so a non-empty name is required.
    """
    if not name:
        raise ValueError("get_logger requires a logger name")
    return logging.getLogger(name)  # type: ignore[return-value]


__all__ = ["SUCCESS", "MonitorLogger", "configure_logging", "get_logger", "JsonFormatter"]

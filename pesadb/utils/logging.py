"""
PesaDB Logging
==============
Centralizes logging configuration so the engine, the storage layer and the
CLI log consistently. Standard library logging with a concise human format by
default and an optional JSON formatter for machine-readable output.

Usage:
    from pesadb.utils.logging import configure_logging, get_logger

    configure_logging(level="DEBUG")
    log = get_logger(__name__)
    log.info("seeded demo tables", extra={"tables": 2})
"""

import json
import logging
import logging.config
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else came in through extra=
_STANDARD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message", "asctime",
}


def _json_formatter(record: logging.LogRecord) -> str:
    """Render a log record as a JSON string."""
    payload: Dict[str, Any] = {
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    for key, value in vars(record).items():
        if key not in _STANDARD_ATTRS and key not in payload:
            payload[key] = value
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        return _json_formatter(record)


def configure_logging(level: str = "WARNING", json_logs: bool = False,
                      force: bool = True) -> None:
    """
    Configure the pesadb logger hierarchy.

    level      logging level name ("DEBUG", "INFO", ...)
    json_logs  emit one JSON object per line instead of the console format
    force      replace an existing configuration (CLI startup)
    """
    formatter_name = "json" if json_logs else "console"

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": not force,
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
                    "stream": "ext://sys.stderr",
                }
            },
            "loggers": {
                "pesadb": {
                    "handlers": ["default"],
                    "level": level.upper(),
                    "propagate": False,
                }
            },
        }
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger with the given name (root logger if None)."""
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "JsonFormatter"]

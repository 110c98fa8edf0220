"""
Logging setup for the API.

Format: 2026-01-06T14:05:52Z [api] LEVEL message

The level comes from Settings.log_level (env LOG_LEVEL: "DEBUG", "INFO",
"WARNING"); unknown names fall back to INFO.

Usage:
    from logging_config import configure_logging

    configure_logging(source="api", level=get_settings().log_level)
    logger = logging.getLogger(__name__)
"""

import logging
import sys
from datetime import datetime, timezone


class ISO8601Formatter(logging.Formatter):
    """Formatter producing UTC ISO-8601 timestamps and a source tag."""

    def __init__(self, source: str = "app"):
        self.source = source
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        message = record.getMessage()

        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        return f"{timestamp} [{self.source}] {record.levelname} {message}"


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(source: str = "app", level: str = "INFO") -> logging.Logger:
    """
    Configure the root logger with a single stdout handler.

    Uvicorn's own loggers are routed through the same handler so every
    line shares one format.
    """
    numeric_level = _parse_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(ISO8601Formatter(source=source))
    root_logger.addHandler(handler)

    for uvicorn_logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(uvicorn_logger_name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(handler)
        uvicorn_logger.setLevel(numeric_level)
        uvicorn_logger.propagate = False

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return root_logger

"""Structured logging infrastructure for vlnorm.

This module provides JSON-formatted structured logging. Normalization warnings
are always collected in a diagnostics list; the log stream only mirrors them
for monitoring and debugging.
"""

import json
import logging
import os
import sys
from datetime import UTC, datetime
from typing import Any

__all__ = ["StructuredLogger", "get_logger"]

LOG_LEVEL_ENV = "VLNORM_LOG_LEVEL"


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs JSON-structured log entries."""

    _excluded_fields = frozenset(
        {
            "name",
            "msg",
            "args",
            "created",
            "filename",
            "funcName",
            "levelname",
            "levelno",
            "lineno",
            "module",
            "msecs",
            "message",
            "pathname",
            "process",
            "processName",
            "relativeCreated",
            "thread",
            "threadName",
            "taskName",
            "exc_info",
            "exc_text",
            "stack_info",
        }
    )

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted log string.
        """
        log_entry = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_entry.update({key: value for key, value in record.__dict__.items() if key not in self._excluded_fields})

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class StructuredLogger:
    """Wrapper around standard logger with structured logging support."""

    def __init__(self, logger: logging.Logger, context: dict[str, Any] | None = None) -> None:
        """Initialize structured logger.

        Args:
            logger: The underlying Python logger instance.
            context: Fields added to every entry written through this logger.
        """
        self._logger = logger
        self._context = dict(context or {})

    def bind(self, **fields: Any) -> "StructuredLogger":
        """Return a logger that adds ``fields`` to every entry.

        Args:
            **fields: Fixed context fields; they lose to per-call fields of the same name.

        Returns:
            New StructuredLogger sharing the underlying logger.
        """
        return StructuredLogger(self._logger, {**self._context, **fields})

    def _log(
        self,
        level: int,
        msg: str,
        **kwargs: Any,
    ) -> None:
        """Internal log method with extra fields support.

        Args:
            level: Log level.
            msg: Log message.
            **kwargs: Additional fields to include in the log entry.
        """
        extra = {**self._context, **kwargs}
        self._logger.log(level, msg, extra=extra)

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, msg, **kwargs)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module).

    Returns:
        Configured StructuredLogger instance.
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False

        log_level = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
        level = getattr(logging, log_level, logging.INFO)
        logger.setLevel(level)

    return StructuredLogger(logger)

"""Structured logging configuration for the Idea Scoring Engine."""

import logging
import sys
from typing import Any

# Context fields printed right after the message, in this order
LEADING_FIELDS = ("operation", "acting_user_id", "error_code")


class StructuredFormatter(logging.Formatter):
    """Key=value structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured output."""
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "message": record.getMessage(),
        }

        context = dict(getattr(record, "extra_data", None) or {})
        if hasattr(record, "operation"):
            context["operation"] = record.operation

        for field in LEADING_FIELDS:
            if field in context:
                log_data[field] = context.pop(field)
        log_data.update(context)

        line = " ".join(f"{k}={v}" for k, v in log_data.items())
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _resolve_level() -> int:
    try:
        from idea_engine.core.config import get_settings

        settings = get_settings()
    except Exception:
        # Settings unavailable (e.g. missing env at import time)
        return logging.INFO

    if settings.LOG_LEVEL:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        # Unknown names come back as the string "Level <name>"
        return level if isinstance(level, int) else logging.INFO
    return logging.DEBUG if settings.IDEA_ENGINE_ENV == "dev" else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger writing structured lines to stdout
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.setLevel(_resolve_level())

    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **kwargs: Any) -> None:
    """
    Log with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Context fields (e.g., operation, acting_user_id, criteria_id)
    """
    extra: dict[str, Any] = {"extra_data": kwargs}
    if "operation" in kwargs:
        extra["operation"] = kwargs.pop("operation")
        extra["extra_data"] = kwargs

    logger.log(level, msg, extra=extra)

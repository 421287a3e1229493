"""
Structured Logging Utility.

This module provides structured JSON logging for the ApplyFill engines and API.
Every record is emitted as a single JSON object so that logs can be filtered by
platform, user, or engine decision in CloudWatch Logs Insights (or any other
JSON-aware log store).

Features:
- JSON format with consistent top-level keys
- Correlation IDs (request_id, user) attached to every record
- Lambda context integration (function_name, aws_request_id)
- Performance timing for engine operations and AI assistant calls

Usage:
    from applyfill.utils.logger import get_logger, log_performance

    logger = get_logger(__name__)
    logger.info("Mapped fields", extra={"extra_fields": {"platform": "greenhouse"}})

    with log_performance("ai_field_mapping", platform="greenhouse"):
        ...
"""

import json
import logging
import os
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

# Determine log level from environment
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL, logging.INFO)

# Correlation IDs shared by every record of the current request
_log_context: Dict[str, Any] = {}

# LogRecord attributes that are never copied into the JSON payload
_RESERVED_ATTRS = {
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
    "extra_fields",
}


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logs.

    Structured fields passed as ``extra={"extra_fields": {...}}`` are merged
    into the top level of the emitted object.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Correlation IDs from the request context
        log_data.update(_log_context)

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_data.update(extra_fields)

        # Any other attribute added via the extra parameter or a filter
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
            log_data["exception_type"] = (
                record.exc_info[0].__name__ if record.exc_info[0] else None
            )

        return json.dumps(log_data, default=str)


def configure_logging(context: Optional[Any] = None) -> None:
    """Configure the root logger with the JSON formatter.

    Args:
        context: Lambda context object (optional). If provided, the function
            name and AWS request id are attached to every record.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(LOG_LEVEL)

    # Remove existing handlers to avoid duplicate logs
    root_logger.handlers = []

    handler = logging.StreamHandler()
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)

    if context:

        class LambdaContextFilter(logging.Filter):
            def filter(self, record: logging.LogRecord) -> bool:
                record.function_name = getattr(context, "function_name", None)
                record.aws_request_id = getattr(context, "aws_request_id", None)
                return True

        handler.addFilter(LambdaContextFilter())


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with structured logging support.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


def set_correlation_id(
    request_id: Optional[str] = None, user: Optional[str] = None
) -> None:
    """Set correlation IDs for request tracing.

    Args:
        request_id: Request ID (from the X-Request-ID header or Lambda context).
        user: User identifier the request acts on behalf of.
    """
    if request_id:
        _log_context["request_id"] = request_id
    if user:
        _log_context["user"] = user


def clear_correlation_ids() -> None:
    """Clear correlation IDs from log context."""
    _log_context.clear()


@contextmanager
def log_performance(operation: str, **extra_fields):
    """Context manager for logging operation duration.

    Logs completion with ``duration_ms`` and ``status``. On failure the error
    is logged and the exception is re-raised.

    Args:
        operation: Operation name (e.g., "ai_field_mapping").
        **extra_fields: Additional fields to include in the log records.

    Example:
        with log_performance("ai_field_mapping", platform="lever"):
            mapping = assistant.map_fields(...)
    """
    start_time = time.time()
    logger = get_logger(__name__)

    try:
        yield
    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        logger.error(
            f"Failed {operation}",
            extra={
                "extra_fields": {
                    "operation": operation,
                    "duration_ms": round(duration_ms, 2),
                    "status": "error",
                    "error": str(e),
                    **extra_fields,
                }
            },
        )
        raise

    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        f"Completed {operation}",
        extra={
            "extra_fields": {
                "operation": operation,
                "duration_ms": round(duration_ms, 2),
                "status": "success",
                **extra_fields,
            }
        },
    )

"""
Structured JSON logging with correlation IDs, plus the diagnostics handle
used by the association layer to report soft failures.
"""

import json
import logging
import os
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request
from pythonjsonlogger import jsonlogger
from starlette.middleware.base import BaseHTTPMiddleware

DIAGNOSTICS_LOGGER_NAME = "multicat.diagnostics"

# Context variable for correlation ID (thread-safe)
correlation_id_var: ContextVar[Optional[str]] = ContextVar(
    "correlation_id", default=None
)


class CorrelationIdFilter(logging.Filter):
    """Add correlation ID to log records."""

    def filter(self, record):
        record.correlation_id = correlation_id_var.get() or "none"
        return True


class StructuredJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level and source location to every record."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["correlation_id"] = getattr(record, "correlation_id", "none")
        log_record["source"] = {
            "file": record.pathname,
            "line": record.lineno,
            "function": record.funcName,
        }


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure structured JSON logging on the root and uvicorn loggers."""
    formatter = StructuredJsonFormatter("%(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(console_handler)
        uvicorn_logger.propagate = False

    return logging.getLogger("multicat")


class DiagnosticsLogger:
    """
    Diagnostic output for the association layer.

    Built once when the application is constructed and handed to every
    component that needs to report a soft failure. When disabled, nothing
    is emitted.
    """

    def __init__(self, enabled: bool, logger: Optional[logging.Logger] = None):
        self.enabled = enabled
        self.logger = logger or logging.getLogger(DIAGNOSTICS_LOGGER_NAME)

    def log_event(
        self,
        event_type: str,
        message: str,
        level: int = logging.INFO,
        **context: Any,
    ) -> None:
        """
        Log a diagnostic event.

        Args:
            event_type: Dotted event name (e.g. "multicat.associations.write_failed")
            message: Human-readable message
            level: Logging level (default: INFO)
            **context: Details appended to the message as JSON
        """
        if not self.enabled:
            return

        if context:
            try:
                message = f"{message} {json.dumps(context, sort_keys=True)}"
            except (TypeError, ValueError):
                message = f"{message} {context!r}"

        self.logger.log(
            level,
            message,
            extra={"event_type": event_type, "event_category": "multicat"},
        )


def setup_diagnostics(
    enabled: bool, log_file: Optional[str] = None
) -> DiagnosticsLogger:
    """Create the diagnostics handle, attaching a text file handler when requested."""
    logger = logging.getLogger(DIAGNOSTICS_LOGGER_NAME)
    logger.setLevel(logging.INFO)

    if enabled and log_file:
        path = os.path.abspath(log_file)
        already_attached = any(
            isinstance(handler, logging.FileHandler) and handler.baseFilename == path
            for handler in logger.handlers
        )
        if not already_attached:
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(message)s", "%Y-%m-%d %H:%M:%S")
            )
            logger.addHandler(file_handler)

    return DiagnosticsLogger(enabled=enabled, logger=logger)


def get_diagnostics(request: Request) -> DiagnosticsLogger:
    """FastAPI dependency returning the application's diagnostics handle."""
    return request.app.state.diagnostics


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add correlation IDs to requests."""

    async def dispatch(self, request: Request, call_next):
        # Generate or extract correlation ID
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())

        correlation_id_var.set(correlation_id)
        request.state.correlation_id = correlation_id

        response = await call_next(request)

        response.headers["X-Correlation-ID"] = correlation_id

        return response

"""Structured logging with context injection."""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

# Context variables for correlation IDs
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
target_id_var: ContextVar[str | None] = ContextVar("target_id", default=None)
channel_var: ContextVar[str | None] = ContextVar("channel", default=None)


def set_request_context(
    request_id: str | None = None,
    run_id: str | None = None,
    target_id: str | None = None,
    channel: str | None = None,
) -> None:
    """Set context variables for log correlation."""
    if request_id is not None:
        request_id_var.set(request_id)
    if run_id is not None:
        run_id_var.set(run_id)
    if target_id is not None:
        target_id_var.set(target_id)
    if channel is not None:
        channel_var.set(channel)


def clear_request_context() -> None:
    """Clear all context variables."""
    request_id_var.set(None)
    run_id_var.set(None)
    target_id_var.set(None)
    channel_var.set(None)


class StructuredFormatter(logging.Formatter):
    """JSON formatter with automatic context injection."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add correlation IDs from context
        if request_id := request_id_var.get():
            log_data["request_id"] = request_id
        if run_id := run_id_var.get():
            log_data["run_id"] = run_id
        if target_id := target_id_var.get():
            log_data["target_id"] = target_id
        if channel := channel_var.get():
            log_data["channel"] = channel

        # Add exception info if present
        if record.exc_info:
            log_data["exc_info"] = self.formatException(record.exc_info)

        # Add extra fields collected by ContextLogger
        fields = getattr(record, "fields", None)
        if isinstance(fields, dict):
            log_data.update(fields)

        # Filter out None values
        log_data = {k: v for k, v in log_data.items() if v is not None}

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for development."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname
        name = record.name
        message = record.getMessage()

        # Build context string
        context_parts = []
        if run_id := run_id_var.get():
            context_parts.append(f"run={run_id[:8]}")
        if target_id := target_id_var.get():
            context_parts.append(f"target={target_id[:8]}")
        if channel := channel_var.get():
            context_parts.append(f"channel={channel}")

        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        base = f"{timestamp} | {level:8} | {name}{context_str} | {message}"

        fields = getattr(record, "fields", None)
        if isinstance(fields, dict) and fields:
            base += " | " + " ".join(f"{k}={v}" for k, v in fields.items())

        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)

        return base


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that supports extra fields.

    Extra fields are nested under ``record.fields`` so they never collide
    with built-in LogRecord attributes.
    """

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        fields: dict[str, Any] = dict(self.extra or {})
        fields.update(kwargs.get("extra") or {})
        kwargs["extra"] = {"fields": fields}
        return msg, kwargs


def configure_logging(
    level: str = "INFO",
    format_type: str = "json",
    service_name: str = "idl-sentinel",
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        format_type: Output format ('json' or 'text')
        service_name: Service name for log identification
    """
    handler = logging.StreamHandler(sys.stdout)

    if format_type == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = TextFormatter()

    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    # Reduce noise from external libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level == "DEBUG" else logging.WARNING
    )

    logging.getLogger(service_name).debug("Logging configured")


def get_logger(name: str, **extra: Any) -> ContextLogger:
    """Get a context-aware logger.

    Args:
        name: Logger name (usually __name__)
        **extra: Additional fields to include in every log message

    Returns:
        ContextLogger instance
    """
    logger = logging.getLogger(name)
    return ContextLogger(logger, extra)

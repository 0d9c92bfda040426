"""
Structured logging configuration with trace IDs
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import contextvars

from pythonjsonlogger import jsonlogger

from event_booking.core.config import settings

# Context variable to store trace ID across async calls
trace_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "trace_id", default=None
)

# Extra attributes promoted to top-level JSON fields
CONTEXT_FIELDS = ("user_id", "event_id", "booking_id", "seat_count", "duration_ms")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with trace ID and booking context fields"""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname

        trace_id = trace_id_var.get()
        if trace_id:
            log_record["trace_id"] = trace_id

        log_record["service"] = "event-booking"
        log_record["environment"] = settings.ENVIRONMENT

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_record[field] = getattr(record, field)


class TraceIdFilter(logging.Filter):
    """Adds trace_id to plain-text records"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = trace_id_var.get() or "-"
        return True


def setup_logging() -> logging.Logger:
    """Configure JSON logging (or readable text when LOG_JSON is off)"""
    if settings.LOG_JSON:
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s"
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(trace_id)s] %(message)s"
        )

    handlers = [logging.StreamHandler()]
    if settings.LOG_FILE:
        handlers.append(logging.FileHandler(settings.LOG_FILE))

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.LOG_LEVEL)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(TraceIdFilter())
        root_logger.addHandler(handler)

    # Reduce noise from libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return root_logger


def set_trace_id(trace_id: str):
    """Set trace ID for current context"""
    trace_id_var.set(trace_id)


def generate_trace_id() -> str:
    """Generate a new trace ID"""
    return str(uuid.uuid4())

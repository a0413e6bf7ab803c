"""Logging configuration for the TSDB JSON decoder."""

import contextlib
import contextvars
import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Iterator

# Context variable holding the URI of the object being decoded in this invocation
object_uri_context: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "object_uri", default=None
)

_STANDARD_RECORD_FIELDS = frozenset(
    [
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName",
        "relativeCreated", "thread", "threadName", "exc_info",
        "exc_text", "stack_info", "getMessage", "taskName",
    ]
)


@contextlib.contextmanager
def bind_object_uri(uri: str) -> Iterator[str]:
    """Attach an object URI to every log record emitted inside the block.

    The binding is scoped to the current context, so concurrent invocations
    (threads or asyncio tasks) each see only their own URI.

    Args:
        uri: Object URI, e.g. ``s3://bucket/key``

    Yields:
        The bound URI
    """
    token = object_uri_context.set(uri)
    try:
        yield uri
    finally:
        object_uri_context.reset(token)


class ObjectUriFilter(logging.Filter):
    """Copy the bound object URI onto records for text formatters."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.object_uri = object_uri_context.get() or "-"
        return True


class CloudLoggingFormatter(logging.Formatter):
    """JSON formatter for cloud log ingestion (CloudWatch, Cloud Logging).

    Formats log records as single-line JSON objects. Exceptions and
    tracebacks are included as strings within the JSON structure.
    """

    # Map Python logging levels to cloud severity names
    SEVERITY_MAP = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARNING",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as single-line JSON.

        Args:
            record: Log record to format

        Returns:
            Single-line JSON string
        """
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "severity": self.SEVERITY_MAP.get(record.levelno, "DEFAULT"),
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        object_uri = object_uri_context.get()
        if object_uri:
            log_entry["object_uri"] = object_uri

        # Add extra fields from logger.info(..., extra={...})
        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_FIELDS or key in log_entry or key == "object_uri":
                continue
            log_entry[key] = value

        if record.exc_info:
            exc_text = "".join(traceback.format_exception(*record.exc_info))
            log_entry["exception"] = exc_text
            log_entry["exception_type"] = (
                record.exc_info[0].__name__ if record.exc_info[0] else "Unknown"
            )
            log_entry["exception_message"] = (
                str(record.exc_info[1]) if record.exc_info[1] else ""
            )

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def setup_logging() -> None:
    """Configure structured logging for the application.

    Cloud environments (any ENV other than "local") get single-line JSON on
    stdout; local development gets a readable text format that still shows
    the bound object URI.
    """
    from tsdbjson.core.config import settings

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ObjectUriFilter())

    if settings.is_local:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(object_uri)s] %(message)s"
        )
    else:
        formatter = CloudLoggingFormatter()

    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for logger_name in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.setLevel(settings.log_level)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.addHandler(handler)
        uvicorn_logger.propagate = False

    # botocore is chatty at DEBUG
    logging.getLogger("botocore").setLevel(max(settings.log_level, logging.INFO))

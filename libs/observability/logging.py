"""Structured logging helpers shared by command line services."""

from __future__ import annotations

import contextvars
import json
import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Optional

_CORRELATION_ID_CTX: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)
_CONFIGURED_SERVICES: set[str] = set()


class CorrelationIdFilter(logging.Filter):
    """Inject the service name and run correlation identifier into log records."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self._service_name
        record.correlation_id = _CORRELATION_ID_CTX.get()
        return True


class JsonLogFormatter(logging.Formatter):
    """Format log records as JSON with a consistent schema."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "service": getattr(record, "service", self._service_name),
            "message": record.getMessage(),
        }
        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            payload["correlation_id"] = correlation_id
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info

        reserved = _reserved_log_keys()
        for key, value in record.__dict__.items():
            if key in reserved or key in payload:
                continue
            try:
                json.dumps(value)
                payload[key] = value
            except TypeError:
                payload[key] = str(value)
        return json.dumps(payload, default=str)


def _reserved_log_keys() -> set[str]:
    return {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "correlation_id",
    }


@contextmanager
def run_context(correlation_id: str | None = None) -> Iterator[str]:
    """Bind a correlation identifier to every record logged inside the block."""

    value = correlation_id or uuid.uuid4().hex
    token = _CORRELATION_ID_CTX.set(value)
    try:
        yield value
    finally:
        _CORRELATION_ID_CTX.reset(token)


def configure_logging(service_name: str, level: int | str = logging.INFO) -> None:
    """Configure structured logging on stderr for the current service.

    Handlers are installed once per service; later calls only change the level.
    """

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)

    if service_name in _CONFIGURED_SERVICES:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonLogFormatter(service_name))
    handler.addFilter(CorrelationIdFilter(service_name))

    root_logger.handlers = [handler]

    # hvac and urllib3 log request details at DEBUG; keep them quiet.
    for logger_name in ("hvac", "urllib3"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    _CONFIGURED_SERVICES.add(service_name)


def get_correlation_id() -> Optional[str]:
    """Return the correlation identifier for the active run."""

    return _CORRELATION_ID_CTX.get()

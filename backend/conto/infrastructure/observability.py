"""Structured Logging — JSON formatter, correlation context and setup.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - correlation_id is attached to every record emitted while one is bound,
      including records from dispatch bus handlers serving that request
    - Extra fields (topic, status_code, error_code, transaction_count) surfaced when present
    - JSON format in production, human-readable in development

Design Decisions:
    - ContextVar for the correlation id: each asyncio task sees the value of the
      request it serves, without threading the id through every call
    - Filter injects the id into records so third-party loggers carry it too
    - setup_logging called once on startup via lifespan
"""

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone

_correlation_id: ContextVar[str | None] = ContextVar(
    "correlation_id", default=None,
)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


@contextmanager
def bind_correlation_id(correlation_id: str | None) -> Iterator[None]:
    """Bind a correlation id for the current task; restores the previous one on exit."""
    token = _correlation_id.set(correlation_id)
    try:
        yield
    finally:
        _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Copy the bound correlation id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "correlation_id", None) is None:
            record.correlation_id = _correlation_id.get()
        return True


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in (
            "correlation_id", "topic", "status_code", "error_code",
            "transaction_count", "path",
        ):
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(correlation_id)s] %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))

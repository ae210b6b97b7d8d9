"""Structured Logging — JSON formatter, setup, and the logging-backed event sink.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (actor, action, subject, package, error_code, path) surfaced when present
    - JSON format in production, human-readable in development
    - Domain events go to the "maintainership.events" logger at INFO

Design Decisions:
    - setup_logging called once on startup via lifespan
    - LoggingEventSink is the EventSink the service gets by default; tests swap in a list
"""

import logging
import json
from datetime import datetime, timezone

from maintainership.core.domain_types import PackageRef
from maintainership.core.format_messages import event_line

_EXTRA_FIELDS = (
    "actor", "action", "subject", "package", "error_code", "path",
    "error_kind", "operation",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s — %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))


class LoggingEventSink:
    """EventSink that records domain events as structured log lines."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger("maintainership.events")

    def emit(
        self, action: str, actor: str, subject: str, package: PackageRef,
    ) -> None:
        self._logger.info(
            event_line(action, actor, subject, package),
            extra={
                "action": action,
                "actor": actor,
                "subject": subject,
                "package": str(package),
            },
        )

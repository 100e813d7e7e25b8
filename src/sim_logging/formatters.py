"""Log formatters for JSON and human-readable output."""

import json
import logging
from datetime import UTC, datetime
from typing import Any

# Fields attached by log_context() / log_connection_context()
CONTEXT_FIELDS = ("connection_id", "correlation_id", "tick")


def record_timestamp(record: logging.LogRecord) -> str:
    """Creation time of ``record`` in the same millisecond ``Z`` form as the API payloads."""
    created = datetime.fromtimestamp(record.created, UTC)
    return created.strftime("%Y-%m-%dT%H:%M:%S.") + f"{created.microsecond // 1000:03d}Z"


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    context = {}
    for field in CONTEXT_FIELDS:
        value = getattr(record, field, None)
        if value is not None and value != "-":
            context[field] = value
    return context


class JSONFormatter(logging.Formatter):
    """One JSON object per line for log shipping in production."""

    def __init__(self, environment: str = "production", service: str = "fleet-tracking"):
        super().__init__()
        self.environment = environment
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": record_timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "service": self.service,
            "env": self.environment,
            "message": record.getMessage(),
        }
        entry.update(record_context(record))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class DevFormatter(logging.Formatter):
    """Human-readable lines; the connection or tick is appended when known."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        context = record_context(record)
        # For connections the correlation id repeats connection_id
        if context.get("correlation_id") == context.get("connection_id"):
            context.pop("correlation_id", None)
        if not context:
            return line
        suffix = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} [{suffix}]"

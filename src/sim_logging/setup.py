"""Logging setup and configuration."""

import logging
import sys
from typing import TextIO

from .context import ContextFilter
from .filters import DefaultCorrelationFilter, PIIFilter
from .formatters import DevFormatter, JSONFormatter

# uvicorn runs with log_config=None, so its loggers propagate to the root handler
QUIET_LOGGERS = ("uvicorn.access", "faker")


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    environment: str = "development",
    stream: TextIO | None = None,
) -> logging.Handler:
    """Install the single root handler every service and uvicorn record goes through."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter(environment) if json_output else DevFormatter())

    handler.addFilter(ContextFilter())
    handler.addFilter(DefaultCorrelationFilter())
    handler.addFilter(PIIFilter())

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler

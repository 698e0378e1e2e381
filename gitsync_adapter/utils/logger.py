"""structlog setup for the git-sync reloader adapter.

Environment:
  LOG_LEVEL: minimum level (default INFO, or DEBUG when DEBUG=true)
  DEBUG:     "true" lowers the default level to DEBUG
  JSON_LOGS: "true" (default) for JSON lines, anything else for the
             coloured console renderer

The request id is carried in structlog's contextvars, so every line logged
while a webhook call is in flight includes ``request_id``.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog
from structlog.types import Processor


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=True),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def configure_from_env() -> None:
    """Configure logging from LOG_LEVEL / DEBUG / JSON_LOGS."""
    debug = os.getenv("DEBUG", "false").lower() == "true"
    configure_logging(
        log_level=os.getenv("LOG_LEVEL", "DEBUG" if debug else "INFO"),
        json_output=os.getenv("JSON_LOGS", "true").lower() == "true",
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_id(request_id: str) -> None:
    structlog.contextvars.bind_contextvars(request_id=request_id)


def clear_request_id() -> None:
    structlog.contextvars.unbind_contextvars("request_id")

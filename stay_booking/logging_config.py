"""
Structured logging for the API process and the auto-confirm poller.

structlog events and plain stdlib records (uvicorn, apscheduler, sqlalchemy)
go through one ProcessorFormatter, so both come out as JSON at INFO and as
coloured console lines at DEBUG.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any

import structlog

from stay_booking.config import LOG_LEVEL

# Libraries whose INFO chatter drowns out booking events
QUIET_LOGGERS = ("urllib3", "requests", "apscheduler", "sqlalchemy.engine", "uvicorn.access")

# Applied to every event, whether it came from structlog or stdlib logging
SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
]


def _renderer(level: str) -> Any:
    if level == "INFO":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def build_logging_config(level: str = LOG_LEVEL) -> dict[str, Any]:
    """dictConfig for the root handler; `level` picks JSON (INFO) or console output."""
    processors: list[Any] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if level == "INFO":
        processors.append(structlog.processors.format_exc_info)
    processors.append(_renderer(level))

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "foreign_pre_chain": SHARED_PROCESSORS,
                "processors": processors,
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    }


def setup_logging() -> None:
    """
    Configures structured logging globally using structlog.

    Request-scoped values bound with structlog.contextvars (request_id) are
    merged into every event emitted while the request is being handled.
    """
    logging.config.dictConfig(build_logging_config(LOG_LEVEL))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *SHARED_PROCESSORS,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.dev.set_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

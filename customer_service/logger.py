"""Logging setup for customer-service.

structlog is configured once, on first use: events below LOG_LEVEL are
filtered out, the rest are rendered as JSON lines on stdout with an ISO UTC
timestamp. Modules call `get_logger(__name__)`; the name is bound as the
`logger` key of every event.
"""

import logging

import structlog

from .config import LOG_LEVEL

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}

_configured = False


def configure_logging(level: str = LOG_LEVEL) -> None:
    global _configured
    min_level = _LEVELS.get(level.upper(), logging.INFO)

    # keep uvicorn / pymongo output at the same level
    logging.basicConfig(level=min_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str | None = None):
    if not _configured:
        configure_logging()
    if name:
        return structlog.get_logger().bind(logger=name)
    return structlog.get_logger()

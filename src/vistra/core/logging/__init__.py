"""Logging module with structured logging and request tracking."""

import logging

import structlog

from vistra.core.logging.middleware import RequestLoggingMiddleware, get_client_ip


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog for the whole process.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ...)
        json_logs: Render JSON lines instead of the console format
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            (
                structlog.processors.JSONRenderer()
                if json_logs
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping().get(log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


__all__ = [
    "RequestLoggingMiddleware",
    "configure_logging",
    "get_client_ip",
]

# ABOUTME: Structured logging configuration for the music gateway with request ID tracking
# ABOUTME: Provides JSON or console logging via structlog and context management for correlation IDs

import logging
import sys
from contextlib import contextmanager
from typing import Optional

import structlog


def configure_logging(
    log_level: str = "info",
    log_file: Optional[str] = None,
    enable_json: bool = True
) -> None:
    """
    Configure structured logging for the music gateway.

    Args:
        log_level: Logging level (debug, info, warning, error, critical)
        log_file: Optional file path for log output (defaults to stdout)
        enable_json: Whether to use JSON formatting (default True)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    # Clear any existing configuration
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()

    if log_file:
        handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.setLevel(numeric_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.addHandler(handler)

    if enable_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def request_id_context(request_id: str):
    """
    Context manager for request ID tracking in logs.

    Args:
        request_id: Unique identifier for the request
    """
    tokens = structlog.contextvars.bind_contextvars(request_id=request_id)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)

#!/usr/bin/env python3
"""
Structured Logging Module using structlog

This module provides structured logging with:
- Stage labels for every cache operation
- JSON formatting for log aggregation
- Context variables merged into every entry

Architectural Decision: structlog for production logging
- Context-aware logging with automatic field injection
- JSON output for log aggregation (ELK, Splunk, etc.)
"""

import logging
import sys
from datetime import datetime, timezone

import structlog
from structlog.types import EventDict, WrappedLogger

from cache_facade.core.config.settings import get_settings


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def add_log_level_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Upper-case the level added by structlog.stdlib.add_log_level."""
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Setup structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'console')

    Note:
        The facade's own ``debug`` flag decides whether per-operation debug
        events are emitted at all; LOG_LEVEL decides whether they are printed.
    """
    settings = get_settings()

    # Use settings if not provided
    log_level = log_level or settings.logging.LOG_LEVEL
    log_format = log_format or settings.logging.LOG_FORMAT

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=getattr(logging, log_level.upper())
    )

    # Choose renderer based on format
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,  # Merge context variables
            add_timestamp,
            structlog.stdlib.add_log_level,
            add_log_level_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Usage:
        logger = get_logger(__name__)
        logger.info("message", key="value", stage="CACHE.GET")
    """
    return structlog.get_logger(name)


def log_stage(
    logger: structlog.stdlib.BoundLogger, stage: str, message: str, level: str = "info", **kwargs
) -> None:
    """
    Log a message with stage information.

    Args:
        logger: Logger instance
        stage: Stage identifier (e.g., "CACHE.SET")
        message: Log message
        level: Log level (debug, info, warning, error, critical)
        **kwargs: Additional fields to log

    Usage:
        log_stage(logger, Stage.CACHE_GET, "GET hit", key="user:1")
    """
    log_func = getattr(logger, level.lower())
    log_func(message, stage=str(getattr(stage, "value", stage)), **kwargs)

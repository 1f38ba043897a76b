"""Structured logging configuration."""

import logging
import sys
from typing import TextIO

import structlog

from treeconf.settings import get_settings


def configure_logging(
    level: int | None = None,
    output: TextIO = sys.stderr,
    json_format: bool | None = None,
) -> None:
    """Configure structured logging for applications using the framework.

    Sets up structlog with JSON output format and standard processors
    for timestamps, log levels, and context binding. Omitted arguments
    fall back to the environment settings.

    Args:
        level: Logging level (default: TREECONF_LOG_LEVEL, INFO).
        output: Output stream (default: stderr).
        json_format: Whether to use JSON format (default: TREECONF_LOG_JSON, True).
    """
    settings = get_settings()
    if level is None:
        level = settings.log_level_number()
    if json_format is None:
        json_format = settings.log_json

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

    # Configure standard library logging to share the stream
    logging.basicConfig(
        format="%(message)s",
        stream=output,
        level=level,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a bound logger instance.

    Args:
        name: Optional logger name.

    Returns:
        Bound logger instance.
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


def bind_configuration_context(configuration: str) -> None:
    """Bind a configuration label to all subsequent log messages.

    Args:
        configuration: Label identifying the configuration tree in use.
    """
    structlog.contextvars.bind_contextvars(configuration_context=configuration)


def clear_configuration_context() -> None:
    """Clear the configuration label from log messages."""
    structlog.contextvars.unbind_contextvars("configuration_context")

"""Structured logging configuration for SubScalpel."""

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog

from subscalpel.config import LoggingConfig


def _file_handler(output: str, level: int) -> logging.Handler:
    log_path = Path(output)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
    handler.setLevel(level)
    return handler


def setup_logging(config: LoggingConfig, verbose: bool = False) -> None:
    """Configure structured logging.

    Log records go to stderr so stdout carries only user-facing output.
    An optional log file receives the same records.

    Args:
        config: Logging configuration
        verbose: Force debug level regardless of the configured level
    """
    level = logging.DEBUG if verbose else getattr(logging, config.level.upper())

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if config.format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Colors only for an interactive terminal and never in a log file
        colors = sys.stderr.isatty() and not config.output
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    handlers: list[logging.Handler] = [console_handler]

    file_error = None
    if config.output:
        try:
            handlers.append(_file_handler(config.output, level))
        except OSError as e:
            file_error = e

    logging.basicConfig(format="%(message)s", level=level, handlers=handlers, force=True)

    if file_error is not None:
        get_logger(__name__).warning(
            "Could not create log file, logging to stderr only",
            output=config.output,
            error=str(file_error),
        )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    Args:
        name: Logger name (defaults to caller's module name)

    Returns:
        Structured logger instance
    """
    return structlog.get_logger(name)

"""Structured logging for loreweaver.

This module provides:
- Structured logging using structlog
- Conversation context propagation through contextvars
- Console or JSON rendering
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, List, TextIO

import structlog
from structlog.types import Processor


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_int(self) -> int:
        """Convert to logging module integer level."""
        return {
            LogLevel.DEBUG: logging.DEBUG,
            LogLevel.INFO: logging.INFO,
            LogLevel.WARNING: logging.WARNING,
            LogLevel.ERROR: logging.ERROR,
            LogLevel.CRITICAL: logging.CRITICAL,
        }[self]


@dataclass
class LogConfig:
    """Configuration for the logging system.

    Attributes:
        level: Minimum log level.
        json_format: Render JSON lines instead of console output.
        include_caller: Whether to include caller info.
        stream: Output stream.
    """

    level: LogLevel = LogLevel.INFO
    json_format: bool = False
    include_caller: bool = False
    stream: TextIO = field(default_factory=lambda: sys.stderr)


def configure_logging(config: LogConfig) -> None:
    """Configure structlog for the whole process.

    Args:
        config: Logging configuration to apply.
    """
    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if config.include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder())

    if config.json_format:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=config.stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(config.level.to_int()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=config.stream),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = "loreweaver", **initial_values: Any) -> Any:
    """Get a structlog logger bound to a module name.

    Args:
        name: Logger name (usually module name).
        **initial_values: Context bound to every entry of this logger.
    """
    return structlog.get_logger(name, **initial_values)


@contextmanager
def conversation_context(conversation_key: str, **extra: Any) -> Iterator[None]:
    """Bind a conversation key to every log entry inside the block."""
    with structlog.contextvars.bound_contextvars(
        conversation_key=conversation_key, **extra
    ):
        yield

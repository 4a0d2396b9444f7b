"""Observability helpers for loreweaver.

Example:
    from loreweaver.observability import LogConfig, LogLevel, configure_logging

    configure_logging(LogConfig(level=LogLevel.DEBUG, json_format=True))
"""

from .logging import (
    LogConfig,
    LogLevel,
    configure_logging,
    conversation_context,
    get_logger,
)

__all__ = [
    "LogConfig",
    "LogLevel",
    "configure_logging",
    "conversation_context",
    "get_logger",
]

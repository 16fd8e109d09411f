"""
Observability Module

Structured logging for the engine.
"""

from agentrun.observability.logging import (
    BufferHandler,
    ConsoleHandler,
    LogHandler,
    LogLevel,
    LogRecord,
    StructuredLogger,
    configure_from_settings,
    configure_logging,
    get_logger,
)

__all__ = [
    "BufferHandler",
    "ConsoleHandler",
    "LogHandler",
    "LogLevel",
    "LogRecord",
    "StructuredLogger",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
]

"""
Structured Logging

JSON-structured logging with context propagation.

Design decisions:
- Structured JSON output
- Log level filtering
- Invocation context (app, user, session, invocation) enrichment
- Process-wide handlers set once by configure_logging()
"""

import contextvars
import json
import sys
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, TextIO


# Record fields filled from the bound context or from keyword arguments
_CONTEXT_FIELDS = ("invocation_id", "app_name", "user_id", "session_id", "agent")


class LogLevel(IntEnum):
    """Log levels matching Python's logging module."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40


@dataclass
class LogRecord:
    """A structured log record."""

    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    logger_name: str = "agentrun"

    # Structured data
    data: dict[str, Any] = field(default_factory=dict)

    # Error info
    error: str | None = None
    error_type: str | None = None
    stack_trace: str | None = None

    # Invocation context
    invocation_id: str | None = None
    app_name: str | None = None
    user_id: str | None = None
    session_id: str | None = None
    agent: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        result = {
            "timestamp": self.timestamp.isoformat(),
            "level": LogLevel(self.level).name,
            "logger": self.logger_name,
            "message": self.message,
        }

        if self.data:
            result["data"] = self.data

        if self.error:
            result["error"] = {
                "message": self.error,
                "type": self.error_type,
                "stack_trace": self.stack_trace,
            }

        for key in _CONTEXT_FIELDS:
            value = getattr(self, key)
            if value:
                result[key] = value

        return result

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), default=str)


class LogHandler:
    """Base class for log handlers."""

    def __init__(self, level: LogLevel = LogLevel.DEBUG):
        self.level = level

    def should_handle(self, level: LogLevel) -> bool:
        return level >= self.level

    def handle(self, record: LogRecord) -> None:
        """Handle a log record."""
        pass


class ConsoleHandler(LogHandler):
    """Outputs logs to a text stream (stderr by default)."""

    def __init__(
        self,
        level: LogLevel = LogLevel.DEBUG,
        stream: TextIO | None = None,
        json_output: bool = True,
    ):
        super().__init__(level)
        self.stream = stream or sys.stderr
        self.json_output = json_output

    def handle(self, record: LogRecord) -> None:
        if not self.should_handle(record.level):
            return

        if self.json_output:
            output = record.to_json()
        else:
            output = (
                f"[{record.timestamp.strftime('%Y-%m-%d %H:%M:%S')}] "
                f"{LogLevel(record.level).name:8s} {record.message}"
            )
            if record.data:
                output += f" | {record.data}"
            if record.error:
                output += f" | ERROR: {record.error}"

        print(output, file=self.stream)


class BufferHandler(LogHandler):
    """Buffers logs in memory for testing."""

    def __init__(self, level: LogLevel = LogLevel.DEBUG):
        super().__init__(level)
        self.records: list[LogRecord] = []

    def handle(self, record: LogRecord) -> None:
        if not self.should_handle(record.level):
            return

        self.records.append(record)

    def messages(self, level: LogLevel | None = None) -> list[str]:
        return [r.message for r in self.records if level is None or r.level == level]


# Context variables for log enrichment
_log_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar(
    "log_context", default={}
)

# Process-wide defaults, replaced by configure_logging()
_default_level: LogLevel = LogLevel.INFO
_default_handlers: list[LogHandler] = [ConsoleHandler()]


class StructuredLogger:
    """
    Main structured logging interface.

    A logger built without explicit handlers follows whatever
    configure_logging() last installed.
    """

    def __init__(
        self,
        name: str = "agentrun",
        level: LogLevel | None = None,
        handlers: list[LogHandler] | None = None,
    ):
        self.name = name
        self._level = level
        self._handlers = handlers

    @property
    def level(self) -> LogLevel:
        return _default_level if self._level is None else self._level

    @property
    def handlers(self) -> list[LogHandler]:
        return _default_handlers if self._handlers is None else self._handlers

    def _log(
        self,
        level: LogLevel,
        message: str,
        data: dict[str, Any] | None = None,
        error: BaseException | None = None,
        **extra: Any,
    ) -> None:
        if level < self.level:
            return

        # Explicit keyword fields win over the bound context
        context = {**_log_context.get()}
        for key in _CONTEXT_FIELDS:
            value = extra.pop(key, None)
            if value is not None:
                context[key] = value

        record = LogRecord(
            level=level,
            message=message,
            logger_name=self.name,
            data={**(data or {}), **extra},
            invocation_id=context.get("invocation_id"),
            app_name=context.get("app_name"),
            user_id=context.get("user_id"),
            session_id=context.get("session_id"),
            agent=context.get("agent"),
        )

        if error is not None:
            record.error = str(error)
            record.error_type = type(error).__name__
            record.stack_trace = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )

        for handler in self.handlers:
            try:
                handler.handle(record)
            except Exception:
                pass  # Logging must never break the event stream

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, error: BaseException | None = None, **kwargs: Any) -> None:
        self._log(LogLevel.WARNING, message, error=error, **kwargs)

    def error(self, message: str, error: BaseException | None = None, **kwargs: Any) -> None:
        self._log(LogLevel.ERROR, message, error=error, **kwargs)

    @staticmethod
    @contextmanager
    def context(**kwargs: Any):
        """
        Context manager for adding context to logs.

        Usage:
            with logger.context(invocation_id="e-123", user_id="u1"):
                logger.info("Relaying events")
        """
        current = _log_context.get()
        token = _log_context.set({**current, **kwargs})

        try:
            yield
        finally:
            _log_context.reset(token)


def get_logger(name: str = "agentrun") -> StructuredLogger:
    """Get a logger bound to the process-wide configuration."""
    return StructuredLogger(name=name)


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    json_output: bool = True,
    handlers: list[LogHandler] | None = None,
) -> None:
    """
    Install process-wide handlers and level.

    Every logger from get_logger() picks these up on its next call.
    """
    global _default_level, _default_handlers

    if isinstance(level, str):
        level = LogLevel[level.upper()]

    _default_level = level
    _default_handlers = handlers or [ConsoleHandler(level=level, json_output=json_output)]


def configure_from_settings() -> None:
    """Configure logging from the observability settings."""
    from agentrun.config.settings import get_settings

    obs = get_settings().observability
    configure_logging(level=obs.log_level, json_output=obs.log_format == "json")

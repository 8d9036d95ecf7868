"""Structured logging for autogenerate.

This module provides consistent, structured logging across all autogenerate
components. It supports both human-readable and JSON output formats.

Library code only logs at DEBUG, so nothing is printed unless an
application opts in with configure_logging().
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

_ROOT = "autogenerate"


class LogFormat(Enum):
    """Log output format."""

    TEXT = "text"
    JSON = "json"


@dataclass
class LogContext:
    """Context information for structured logging."""

    component: str = ""
    operation: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    def with_extra(self, **kwargs: Any) -> "LogContext":
        """Create new context with additional fields."""
        return LogContext(
            component=self.component,
            operation=self.operation,
            extra={**self.extra, **kwargs},
        )


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs structured JSON logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        ctx = getattr(record, "context", None)
        if isinstance(ctx, LogContext):
            if ctx.component:
                log_data["component"] = ctx.component
            if ctx.operation:
                log_data["operation"] = ctx.operation
            log_data.update(ctx.extra)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Formatter that outputs human-readable logs with context."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as human-readable text."""
        prefix_parts = []

        ctx = getattr(record, "context", None)
        if isinstance(ctx, LogContext):
            if ctx.component:
                prefix_parts.append(f"[{ctx.component}]")
            if ctx.operation:
                prefix_parts.append(f"({ctx.operation})")

        prefix = " ".join(prefix_parts)
        if prefix:
            prefix = f"{prefix} "

        base = super().format(record)

        extra_str = ""
        if isinstance(ctx, LogContext) and ctx.extra:
            extra_str = " " + " ".join(f"{k}={v}" for k, v in ctx.extra.items())

        return f"{prefix}{base}{extra_str}"


def _make_handler(level: int, log_format: LogFormat) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if log_format == LogFormat.JSON:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(TextFormatter("%(asctime)s %(levelname)s %(message)s"))
    return handler


class AutoGenLogger:
    """Structured logger for autogenerate components."""

    def __init__(self, name: str):
        """Initialize the logger.

        Args:
            name: Component name; the stdlib logger is ``autogenerate.<name>``
        """
        self._logger = logging.getLogger(f"{_ROOT}.{name}")
        self._context = LogContext(component=name)

    @property
    def name(self) -> str:
        return self._logger.name

    def with_context(self, **kwargs: Any) -> "AutoGenLogger":
        """Create a new logger with additional context."""
        new_logger = AutoGenLogger.__new__(AutoGenLogger)
        new_logger._logger = self._logger
        new_logger._context = self._context.with_extra(**kwargs)
        return new_logger

    def with_operation(self, operation: str) -> "AutoGenLogger":
        """Create a new logger for a specific operation."""
        new_logger = AutoGenLogger.__new__(AutoGenLogger)
        new_logger._logger = self._logger
        new_logger._context = LogContext(
            component=self._context.component,
            operation=operation,
            extra=self._context.extra,
        )
        return new_logger

    def _log(self, level: int, msg: str, **kwargs: Any) -> None:
        """Log a message with context.

        Args:
            level: Logging level
            msg: Log message
            **kwargs: Additional context fields
        """
        if not self._logger.isEnabledFor(level):
            return

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "(unknown file)",
            0,
            msg,
            (),
            None,
        )

        if kwargs:
            record.context = self._context.with_extra(**kwargs)
        else:
            record.context = self._context

        self._logger.handle(record)

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log a debug message."""
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log an info message."""
        self._log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log a warning message."""
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log an error message."""
        self._log(logging.ERROR, msg, **kwargs)

    @contextmanager
    def timed(self, operation: str, level: str = "info", **kwargs: Any):
        """Context manager for timing operations.

        Args:
            operation: Name of the operation being timed
            level: Level name for the completion message
            **kwargs: Additional context fields

        Yields:
            Dict where 'elapsed_ms' will be set after completion
        """
        start = time.perf_counter()
        result: dict[str, Any] = {}
        try:
            yield result
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            result["elapsed_ms"] = elapsed_ms
            self._log(
                logging.getLevelName(level.upper()),
                f"{operation} completed",
                operation=operation,
                elapsed_ms=f"{elapsed_ms:.2f}",
                **kwargs,
            )


_loggers: dict[str, AutoGenLogger] = {}


def get_logger(name: str) -> AutoGenLogger:
    """Get or create a logger for a component.

    Args:
        name: Component name

    Returns:
        AutoGenLogger instance
    """
    if name not in _loggers:
        _loggers[name] = AutoGenLogger(name)
    return _loggers[name]


def configure_logging(
    level: int | str = logging.INFO,
    log_format: LogFormat | str = LogFormat.TEXT,
) -> None:
    """Configure output for all autogenerate loggers.

    Args:
        level: Logging level (number or name such as "DEBUG")
        log_format: Output format
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    if isinstance(log_format, str):
        log_format = LogFormat(log_format)

    root = logging.getLogger(_ROOT)
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(_make_handler(level, log_format))


def log_event(
    component: str,
    event: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a single event quickly.

    Args:
        component: Component name
        event: Event message
        level: Logging level
        **kwargs: Additional context fields
    """
    get_logger(component)._log(level, event, **kwargs)

"""Stencil Logging - structured logging with trace context.

Wraps the standard library ``logging`` module:
- JSON lines (``StructuredLogFormatter``) with OpenTelemetry trace ids
- Colored single-line output for terminals (``ColoredLogFormatter``)

Usage:
    from stencil_core.logging import get_logger

    logger = get_logger("parser")
    logger.debug("Template compiled", template="base.html", nodes=12)
"""

import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TextIO

from opentelemetry import trace

from stencil_core.types import LogFormat, LogLevel

from .colors import CYAN, LEVEL_COLORS, RESET

LOGGER_NAMESPACE = "stencil"

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "thread", "threadName",
        "message", "taskName",
    }
)

_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class StructuredLogFormatter(logging.Formatter):
    """JSON formatter with trace context injection.

    Formats log records as JSON with:
    - timestamp (ISO 8601)
    - level
    - component (logger name)
    - message
    - trace_id / span_id (if a span is recording)
    - Additional fields from extra
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            if ctx.is_valid:
                log_data["trace_id"] = format(ctx.trace_id, "032x")
                log_data["span_id"] = format(ctx.span_id, "016x")

        log_data.update(_extra_fields(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ColoredLogFormatter(logging.Formatter):
    """Single-line colored formatter: ``LEVEL component message key=value``."""

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelname, "")
        line = (
            f"{color}{record.levelname:<7}{RESET} "
            f"{CYAN}{record.name}{RESET} {record.getMessage()}"
        )
        fields = _extra_fields(record)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


@dataclass
class LogConfig:
    """Logger configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    output: TextIO = field(default=sys.stderr)


class StencilLogger:
    """Structured logger.

    Wraps Python logging with keyword fields and trace context support.
    """

    def __init__(self, name: str):
        """Initialize logger.

        Args:
            name: Logger name (component name)
        """
        self._logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")

    @property
    def name(self) -> str:
        return self._logger.name

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        self._logger.log(level, message, extra=kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._logger.exception(message, extra=kwargs)


# Logger cache
_loggers: dict[str, StencilLogger] = {}


def get_logger(name: str) -> StencilLogger:
    """Get or create a structured logger.

    Args:
        name: Logger name (component name)

    Returns:
        StencilLogger instance
    """
    if name not in _loggers:
        _loggers[name] = StencilLogger(name)
    return _loggers[name]


def configure_logging(config: LogConfig | None = None) -> logging.Logger:
    """Attach a single handler to the ``stencil`` logger namespace.

    Calling it again replaces the previous handler, so it is safe to use for
    reconfiguration. Libraries embedding Stencil may skip this entirely and
    configure the ``stencil`` logger themselves.

    Args:
        config: Logger configuration (defaults to LogConfig())

    Returns:
        The configured namespace logger
    """
    config = config or LogConfig()
    root = logging.getLogger(LOGGER_NAMESPACE)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(config.output)
    if config.format == LogFormat.JSON:
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(ColoredLogFormatter())
    root.addHandler(handler)
    root.setLevel(_LEVELS.get(config.level, logging.INFO))
    root.propagate = False
    return root


def reset_loggers() -> None:
    """Reset logger cache and namespace handlers (for testing)."""
    global _loggers  # noqa: PLW0603
    _loggers = {}
    root = logging.getLogger(LOGGER_NAMESPACE)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
    root.propagate = True

"""Stencil Logging - structured and colored logging for compile/render."""

from .colors import LEVEL_COLORS, RESET
from .logger import (
    ColoredLogFormatter,
    LogConfig,
    StencilLogger,
    StructuredLogFormatter,
    configure_logging,
    get_logger,
    reset_loggers,
)

__all__ = [
    # Logger classes
    "StencilLogger",
    "LogConfig",
    "StructuredLogFormatter",
    "ColoredLogFormatter",
    # Functions
    "get_logger",
    "configure_logging",
    "reset_loggers",
    # Colors
    "LEVEL_COLORS",
    "RESET",
]

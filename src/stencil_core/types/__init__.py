"""Shared types for Stencil.

Import from here rather than submodules:
    from stencil_core.types import LogLevel, TokenKind, ValueKind
"""

from .enums import LogFormat, LogLevel, TokenKind, ValueKind
from .validation import ValidationIssue, ValidationResult

__all__ = [
    # Enums
    "LogLevel",
    "LogFormat",
    "TokenKind",
    "ValueKind",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]

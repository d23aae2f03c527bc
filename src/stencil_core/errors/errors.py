"""Stencil error types and error matcher contracts."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error source categories."""

    SYNTAX = "SYNTAX"
    TYPE = "TYPE"
    RESOLUTION = "RESOLUTION"
    REGISTRY = "REGISTRY"
    CONFIG = "CONFIG"
    SYSTEM = "SYSTEM"


@dataclass
class StencilError(Exception):
    """Structured error with context. Base exception for all Stencil errors."""

    # Identity
    code: str  # e.g., "DUPLICATE_BLOCK"
    category: ErrorCategory

    # Messages
    message: str  # Human-readable summary
    detail: str | None = None  # Extended explanation
    suggestion: str | None = None  # Actionable fix

    # Source position
    template: str | None = None  # Template name the error belongs to
    line: int | None = None
    column: int | None = None

    # Error chain
    cause: "StencilError | None" = None

    # Metadata
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Set Exception message."""
        super().__init__(self.message)

    def __str__(self) -> str:
        location = self.location
        text = f"[{self.code}] {self.message}"
        if location:
            text = f"{text} ({location})"
        if self.detail:
            text = f"{text}: {self.detail}"
        return text

    @property
    def location(self) -> str:
        """Human readable `name:line:column` position, empty if unknown."""
        parts: list[str] = []
        if self.template:
            parts.append(self.template)
        if self.line is not None:
            parts.append(f"Line {self.line} Col {self.column or 0}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and API responses.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "detail": self.detail,
            "suggestion": self.suggestion,
            "template": self.template,
            "line": self.line,
            "column": self.column,
            "timestamp": self.timestamp.isoformat(),
            "cause": self.cause.to_dict() if self.cause else None,
        }

    def with_context(
        self,
        template: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> "StencilError":
        """Return copy with additional position context.

        Existing values win: an error raised deep inside an included template
        keeps pointing at that template.

        Args:
            template: Optional template name
            line: Optional line number
            column: Optional column number

        Returns:
            New StencilError instance with updated context
        """
        return StencilError(
            code=self.code,
            category=self.category,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
            template=self.template or template,
            line=self.line if self.line is not None else line,
            column=self.column if self.column is not None else column,
            cause=self.cause,
            timestamp=self.timestamp,
        )


@dataclass
class ErrorTemplate:
    """Template for creating errors."""

    code: str
    category: ErrorCategory
    message_template: str  # "Block '{name}' already defined"
    detail_template: str | None = None
    suggestion_template: str | None = None


@dataclass
class MatchResult:
    """Result of matching an exception."""

    code: str
    context: dict[str, Any]


class ErrorMatcher(ABC):
    """Base class for exception matchers."""

    @abstractmethod
    def matches(self, error: Exception) -> bool:
        """Check if this matcher handles the error.

        Args:
            error: Exception to check

        Returns:
            True if this matcher can handle the error
        """

    @abstractmethod
    def extract(self, error: Exception) -> MatchResult:
        """Extract Stencil error info from the exception.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with error code and context
        """

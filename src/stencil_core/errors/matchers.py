"""Error matchers for converting foreign exceptions to StencilErrors."""

from typing import Any

from .errors import ErrorMatcher, MatchResult


class FileNotFoundMatcher(ErrorMatcher):
    """Matches missing template files."""

    def matches(self, error: Exception) -> bool:
        """Check if error is a missing file or directory."""
        return isinstance(error, (FileNotFoundError, IsADirectoryError, NotADirectoryError))

    def extract(self, error: Exception) -> MatchResult:
        """Extract missing file info.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with TEMPLATE_NOT_FOUND code
        """
        filename = getattr(error, "filename", None)
        return MatchResult(
            code="TEMPLATE_NOT_FOUND",
            context={"path": filename or "unknown", "detail": str(error)},
        )


class UnreadableFileMatcher(ErrorMatcher):
    """Matches files that exist but cannot be read or decoded."""

    def matches(self, error: Exception) -> bool:
        """Check if error is an I/O or decoding error."""
        return isinstance(error, (OSError, UnicodeDecodeError))

    def extract(self, error: Exception) -> MatchResult:
        """Extract I/O error info.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with TEMPLATE_UNREADABLE code
        """
        context: dict[str, Any] = {"detail": str(error)}
        context["path"] = getattr(error, "filename", None) or "unknown"
        return MatchResult(code="TEMPLATE_UNREADABLE", context=context)


class RecursionMatcher(ErrorMatcher):
    """Matches runaway recursion (deeply nested includes or expressions)."""

    def matches(self, error: Exception) -> bool:
        """Check if error is a recursion error."""
        return isinstance(error, RecursionError)

    def extract(self, error: Exception) -> MatchResult:
        """Extract recursion info.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with CIRCULAR_REFERENCE code
        """
        return MatchResult(
            code="CIRCULAR_REFERENCE",
            context={"path": "unknown", "detail": "Maximum recursion depth exceeded"},
        )


class GenericErrorMatcher(ErrorMatcher):
    """Fallback matcher for any exception."""

    def matches(self, error: Exception) -> bool:
        """Always matches.

        Args:
            error: Exception to check

        Returns:
            Always True (fallback matcher)
        """
        return True

    def extract(self, error: Exception) -> MatchResult:
        """Extract generic error info.

        Args:
            error: Exception to extract from

        Returns:
            MatchResult with INTERNAL_ERROR code
        """
        return MatchResult(
            code="INTERNAL_ERROR",
            context={"error_type": type(error).__name__, "detail": str(error)},
        )


class ErrorMatcherChain:
    """Ordered chain of matchers. First match wins."""

    def __init__(self) -> None:
        """Initialize matcher chain with built-in matchers."""
        self.matchers: list[ErrorMatcher] = []
        self._load_builtin_matchers()

    def match(self, error: Exception) -> MatchResult:
        """Find first matching matcher and extract result.

        Args:
            error: Exception to match

        Returns:
            MatchResult from first matching matcher
        """
        for matcher in self.matchers:
            if matcher.matches(error):
                return matcher.extract(error)

        # Should never reach here due to GenericErrorMatcher
        return MatchResult(code="INTERNAL_ERROR", context={"detail": str(error)})

    def _load_builtin_matchers(self) -> None:
        """Load built-in matchers in priority order."""
        # Order matters - FileNotFoundError is an OSError
        self.matchers = [
            FileNotFoundMatcher(),
            UnreadableFileMatcher(),
            RecursionMatcher(),
            GenericErrorMatcher(),  # Fallback - must be last
        ]

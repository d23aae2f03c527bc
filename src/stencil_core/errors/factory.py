"""Error factory for creating StencilErrors from any exception type."""

from typing import Any

from .errors import StencilError
from .matchers import ErrorMatcherChain
from .registry import ErrorRegistry


class ErrorFactory:
    """Creates StencilErrors from any exception type."""

    def __init__(
        self,
        registry: ErrorRegistry | None = None,
        matcher_chain: ErrorMatcherChain | None = None,
    ):
        """Initialize error factory.

        Args:
            registry: Error registry (defaults to new ErrorRegistry())
            matcher_chain: Matcher chain (defaults to new ErrorMatcherChain())
        """
        self.registry = registry or ErrorRegistry()
        self.matcher_chain = matcher_chain or ErrorMatcherChain()

    def from_exception(
        self,
        error: Exception,
        template: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> StencilError:
        """Convert any exception to StencilError.

        Args:
            error: Exception to convert
            template: Optional template name
            line: Optional line number
            column: Optional column number

        Returns:
            StencilError instance
        """
        # If already a StencilError, just add context
        if isinstance(error, StencilError):
            return error.with_context(template=template, line=line, column=column)

        match_result = self.matcher_chain.match(error)

        context = match_result.context.copy()
        if template:
            context["template"] = template
        if line is not None:
            context["line"] = line
            context["column"] = column

        return self.registry.create(code=match_result.code, context=context)

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> StencilError:
        """Create StencilError directly from code.

        Args:
            code: Error code
            context: Context variables for template interpolation
            **kwargs: Additional context variables

        Returns:
            StencilError instance
        """
        merged_context = dict(context or {})
        merged_context.update(kwargs)

        return self.registry.create(code=code, context=merged_context)


# Convenience singleton
_default_factory: ErrorFactory | None = None


def get_error_factory() -> ErrorFactory:
    """Get default error factory singleton.

    Returns:
        Default ErrorFactory instance
    """
    global _default_factory  # noqa: PLW0603
    if _default_factory is None:
        _default_factory = ErrorFactory()
    return _default_factory


def create_error(code: str, **context: Any) -> StencilError:
    """Convenience function to create error.

    Args:
        code: Error code
        **context: Context variables for template interpolation

    Returns:
        StencilError instance
    """
    return get_error_factory().create(code, context)

"""Error registry for creating errors from templates."""

from typing import Any

from .errors import ErrorCategory, ErrorTemplate, StencilError


class ErrorRegistry:
    """Registry of error templates. Creates errors from templates + context."""

    def __init__(self) -> None:
        """Initialize error registry with built-in templates."""
        self._templates: dict[str, ErrorTemplate] = {}
        self._load_builtin_templates()

    def get_template(self, code: str) -> ErrorTemplate | None:
        """Get template by error code.

        Args:
            code: Error code to look up

        Returns:
            ErrorTemplate if found, None otherwise
        """
        return self._templates.get(code)

    def list_codes(self) -> list[str]:
        """List all registered error codes.

        Returns:
            List of error codes
        """
        return list(self._templates.keys())

    def register(self, template: ErrorTemplate) -> None:
        """Add an error template (used by extensions shipping their own tags).

        Raises:
            ValueError: If the code is already registered
        """
        if template.code in self._templates:
            msg = f"Error code already registered: {template.code}"
            raise ValueError(msg)
        self._templates[template.code] = template

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        cause: StencilError | None = None,
    ) -> StencilError:
        """Create error instance from template + context.

        A ``detail`` entry in the context replaces the template's detail text.

        Args:
            code: Error code
            context: Context variables for template interpolation
            cause: Optional cause error

        Returns:
            StencilError instance

        Raises:
            ValueError: If error code not found
        """
        template = self.get_template(code)
        if not template:
            msg = f"Unknown error code: {code}"
            raise ValueError(msg)

        context = context or {}

        message = self._interpolate(template.message_template, context)
        if "detail" in context and context["detail"] is not None:
            detail: str | None = str(context["detail"])
        else:
            detail = self._interpolate(template.detail_template, context)
        suggestion = self._interpolate(template.suggestion_template, context)

        if message is None:
            message = f"Error {code}"

        return StencilError(
            code=template.code,
            category=template.category,
            message=message,
            detail=detail,
            suggestion=suggestion,
            template=context.get("template"),
            line=context.get("line"),
            column=context.get("column"),
            cause=cause,
        )

    def _interpolate(
        self,
        template: str | None,
        context: dict[str, Any],
    ) -> str | None:
        """Safe string interpolation.

        Args:
            template: Template string with {var} placeholders
            context: Context variables

        Returns:
            Interpolated string or None if template is None
        """
        if template is None:
            return None

        try:
            return template.format(**context)
        except (KeyError, IndexError):
            # Missing context variable - return template as-is
            return template

    def _load_builtin_templates(self) -> None:
        """Load hardcoded built-in templates."""
        # SYNTAX Errors
        self._templates["TEMPLATE_SYNTAX"] = ErrorTemplate(
            code="TEMPLATE_SYNTAX",
            category=ErrorCategory.SYNTAX,
            message_template="Template syntax error",
            suggestion_template="Check delimiters, quoting and tag arguments",
        )

        self._templates["UNEXPECTED_TOKEN"] = ErrorTemplate(
            code="UNEXPECTED_TOKEN",
            category=ErrorCategory.SYNTAX,
            message_template="Unexpected token '{token}'",
            detail_template="Only literal text, {{{{ }}}} output and {{% %}} tags are allowed here",
        )

        self._templates["UNCLOSED_TAG"] = ErrorTemplate(
            code="UNCLOSED_TAG",
            category=ErrorCategory.SYNTAX,
            message_template="Unexpected end of template, expected '{expected}'",
            suggestion_template="Close every opened tag with its end tag",
        )

        self._templates["UNKNOWN_TAG"] = ErrorTemplate(
            code="UNKNOWN_TAG",
            category=ErrorCategory.SYNTAX,
            message_template="Tag '{tag_name}' does not exist",
            suggestion_template="Register the tag before compiling templates that use it",
        )

        self._templates["UNKNOWN_FILTER"] = ErrorTemplate(
            code="UNKNOWN_FILTER",
            category=ErrorCategory.SYNTAX,
            message_template="Filter '{filter_name}' does not exist",
            suggestion_template="Register the filter before compiling templates that use it",
        )

        self._templates["TAG_ARGUMENTS"] = ErrorTemplate(
            code="TAG_ARGUMENTS",
            category=ErrorCategory.SYNTAX,
            message_template="Malformed arguments for tag '{tag_name}'",
        )

        self._templates["DUPLICATE_BLOCK"] = ErrorTemplate(
            code="DUPLICATE_BLOCK",
            category=ErrorCategory.SYNTAX,
            message_template="Block named '{name}' already defined",
            suggestion_template="Block names must be unique within a template",
        )

        self._templates["BLOCK_NAME_MISMATCH"] = ErrorTemplate(
            code="BLOCK_NAME_MISMATCH",
            category=ErrorCategory.SYNTAX,
            message_template="Name for 'endblock' must equal to 'block'-tag's name ('{name}' != '{end_name}')",
        )

        # TYPE Errors
        self._templates["UNSUPPORTED_OPERATOR"] = ErrorTemplate(
            code="UNSUPPORTED_OPERATOR",
            category=ErrorCategory.TYPE,
            message_template="Operator '{operator}' is not supported",
            suggestion_template="Use a filter to perform this operation",
        )

        self._templates["FILTER_TYPE_MISMATCH"] = ErrorTemplate(
            code="FILTER_TYPE_MISMATCH",
            category=ErrorCategory.TYPE,
            message_template="Filter '{filter_name}' expects input of type '{expected}'",
        )

        self._templates["FILTER_ARGUMENT"] = ErrorTemplate(
            code="FILTER_ARGUMENT",
            category=ErrorCategory.TYPE,
            message_template="Invalid argument for filter '{filter_name}'",
        )

        self._templates["FILTER_FAILED"] = ErrorTemplate(
            code="FILTER_FAILED",
            category=ErrorCategory.TYPE,
            message_template="Filter '{filter_name}' failed",
        )

        # RESOLUTION Errors
        self._templates["BLOCK_NOT_FOUND"] = ErrorTemplate(
            code="BLOCK_NOT_FOUND",
            category=ErrorCategory.RESOLUTION,
            message_template="Block '{name}' not found in the template chain",
        )

        self._templates["TEMPLATE_NOT_FOUND"] = ErrorTemplate(
            code="TEMPLATE_NOT_FOUND",
            category=ErrorCategory.RESOLUTION,
            message_template="Template '{path}' not found",
            suggestion_template="Paths are resolved relative to the including template's directory",
        )

        self._templates["TEMPLATE_UNREADABLE"] = ErrorTemplate(
            code="TEMPLATE_UNREADABLE",
            category=ErrorCategory.RESOLUTION,
            message_template="Template '{path}' could not be read",
        )

        self._templates["INCLUDE_EMPTY_FILENAME"] = ErrorTemplate(
            code="INCLUDE_EMPTY_FILENAME",
            category=ErrorCategory.RESOLUTION,
            message_template="Filename for 'include'-tag evaluated to an empty string",
        )

        self._templates["CIRCULAR_REFERENCE"] = ErrorTemplate(
            code="CIRCULAR_REFERENCE",
            category=ErrorCategory.RESOLUTION,
            message_template="Circular template reference to '{path}'",
            detail_template="Chain: {chain}",
            suggestion_template="Remove the extends/include cycle",
        )

        # REGISTRY Errors
        self._templates["DUPLICATE_TAG"] = ErrorTemplate(
            code="DUPLICATE_TAG",
            category=ErrorCategory.REGISTRY,
            message_template="Tag '{tag_name}' is already registered",
        )

        self._templates["DUPLICATE_FILTER"] = ErrorTemplate(
            code="DUPLICATE_FILTER",
            category=ErrorCategory.REGISTRY,
            message_template="Filter '{filter_name}' is already registered",
        )

        # CONFIG Errors
        self._templates["CONFIG_INVALID"] = ErrorTemplate(
            code="CONFIG_INVALID",
            category=ErrorCategory.CONFIG,
            message_template="Invalid configuration",
            suggestion_template="Check the configuration file syntax and values",
        )

        # SYSTEM Errors
        self._templates["INTERNAL_ERROR"] = ErrorTemplate(
            code="INTERNAL_ERROR",
            category=ErrorCategory.SYSTEM,
            message_template="Internal error",
            detail_template="Unexpected {error_type}",
        )

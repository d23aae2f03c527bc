"""Tag and filter registries.

Registries are plain objects populated once at startup and only read while
templates compile and render. ``default_registries()`` returns the process
wide pair pre-populated with the built-in tags and filters; an engine may be
given its own ``Registries`` instead.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from stencil_core.errors import create_error
from stencil_core.logging import get_logger

from .lexer import Token
from .value import Value

if TYPE_CHECKING:
    from .nodes import TagNode
    from .parser import Parser

logger = get_logger("registry")

# (document parser, tag name token, argument parser) -> tag node
TagParser = Callable[["Parser", Token, "Parser"], "TagNode"]

# (input, parameter) -> output; the parameter is nil when omitted
FilterFunction = Callable[[Value, Value], Value]


class TagRegistry:
    """Tag name → tag parser function."""

    def __init__(self) -> None:
        self._tags: dict[str, TagParser] = {}

    def register(self, name: str, parser: TagParser) -> None:
        """Register a tag parser.

        Raises:
            StencilError(DUPLICATE_TAG): If the name is taken
        """
        if name in self._tags:
            raise create_error("DUPLICATE_TAG", tag_name=name)
        self._tags[name] = parser
        logger.debug("Tag registered", tag=name)

    def get(self, name: str) -> TagParser | None:
        return self._tags.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tags

    def names(self) -> list[str]:
        return sorted(self._tags)


class FilterRegistry:
    """Filter name → filter function."""

    def __init__(self) -> None:
        self._filters: dict[str, FilterFunction] = {}

    def register(self, name: str, function: FilterFunction) -> None:
        """Register a filter function.

        Raises:
            StencilError(DUPLICATE_FILTER): If the name is taken
        """
        if name in self._filters:
            raise create_error("DUPLICATE_FILTER", filter_name=name)
        self._filters[name] = function
        logger.debug("Filter registered", filter=name)

    def get(self, name: str) -> FilterFunction | None:
        return self._filters.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._filters

    def names(self) -> list[str]:
        return sorted(self._filters)

    def apply(self, name: str, value: Value, param: Value | None = None) -> Value:
        """Apply a filter by name outside of a template (used by composite filters).

        Raises:
            StencilError(UNKNOWN_FILTER): If no filter has that name
        """
        function = self._filters.get(name)
        if function is None:
            raise create_error("UNKNOWN_FILTER", filter_name=name)
        return function(value, param if param is not None else Value())


@dataclass
class Registries:
    """The pair of registries a parser and its templates work with."""

    tags: TagRegistry = field(default_factory=TagRegistry)
    filters: FilterRegistry = field(default_factory=FilterRegistry)

    @classmethod
    def with_builtins(cls) -> "Registries":
        """New registries holding every built-in tag and filter."""
        from .filters import register_builtin_filters
        from .tags import register_builtin_tags

        registries = cls()
        register_builtin_tags(registries.tags)
        register_builtin_filters(registries.filters)
        return registries


_default_registries: Registries | None = None


def default_registries() -> Registries:
    """Get the process-wide registries, creating them on first use."""
    global _default_registries  # noqa: PLW0603
    if _default_registries is None:
        _default_registries = Registries.with_builtins()
    return _default_registries


def register_tag(name: str, parser: TagParser) -> None:
    """Register a tag in the default registries (startup only)."""
    default_registries().tags.register(name, parser)


def register_filter(name: str, function: FilterFunction) -> None:
    """Register a filter in the default registries (startup only)."""
    default_registries().filters.register(name, function)

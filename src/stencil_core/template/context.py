"""Execution context and context builder."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .document import Template


@dataclass
class ExecutionContext:
    """Per-render state, passed by reference through the node tree.

    Access patterns:
    - {{ user.name }} → self.public["user"] then key/attribute "name"
    - {% block content %} → looked up through self.template's child chain
    """

    public: dict[str, Any]  # Variables visible to the template
    template: "Template"  # Template whose document is being executed
    depth: int = 0  # Include nesting, guards runaway deferred includes

    def lookup(self, name: str) -> Any:
        """Resolve the first segment of a variable path; ``None`` when unbound."""
        return self.public.get(name)

    def derive(self, bindings: Mapping[str, Any]) -> "ExecutionContext":
        """Copy of this context with extra public bindings (loop bodies)."""
        public = dict(self.public)
        public.update(bindings)
        return ExecutionContext(
            public=public,
            template=self.template,
            depth=self.depth,
        )


class ContextBuilder:
    """Build the public mapping for an included template.

    By default every binding of the caller is copied (shallow) so the included
    template can never rebind the caller's names. ``only`` starts from an
    empty mapping instead. ``with`` pairs are applied last and override
    inherited names.
    """

    def __init__(self, caller: ExecutionContext, only: bool = False):
        """Initialize context builder.

        Args:
            caller: Context of the including template
            only: Do not inherit the caller's bindings
        """
        self._caller = caller
        self._public: dict[str, Any] = {} if only else dict(caller.public)

    def set(self, key: str, value: Any) -> "ContextBuilder":
        """Add or override one binding."""
        self._public[key] = value
        return self

    def get_context(self, template: "Template") -> ExecutionContext:
        """Finish the context for rendering ``template``.

        Returns:
            Fresh ExecutionContext one include level deeper than the caller
        """
        return template.new_context(self._public, depth=self._caller.depth + 1)

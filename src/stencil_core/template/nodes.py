"""Document tree nodes.

Two families share this module:
- ``Node``: renders to text (literal HTML, ``{{ }}`` output, tags)
- ``Evaluator``: computes a ``Value`` (expression trees)

Both are immutable after parsing and hold no per-render state.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import TYPE_CHECKING

from stencil_core.errors import StencilError

from .lexer import Token
from .value import Value

if TYPE_CHECKING:
    from .context import ExecutionContext


class Node(ABC):
    """Anything that can appear in a document body."""

    @abstractmethod
    def execute(self, ctx: "ExecutionContext") -> str:
        """Render this node against the context."""

    def references(self) -> Iterator[str]:
        """Yield dotted variable paths this node reads."""
        return iter(())


class Evaluator(ABC):
    """Expression tree node."""

    @abstractmethod
    def evaluate(self, ctx: "ExecutionContext") -> Value:
        """Compute the value of this expression."""

    def references(self) -> Iterator[str]:
        """Yield dotted variable paths this expression reads."""
        return iter(())


class TagNode(Node):
    """Base class for nodes produced by registered tag parsers."""


def locate(error: StencilError, template: str | None, token: Token | None) -> StencilError:
    """Attach a source position to an error raised while rendering."""
    if token is None:
        return error.with_context(template=template)
    return error.with_context(template=template, line=token.line, column=token.column)


class NodeHTML(Node):
    """Literal text, output unchanged."""

    def __init__(self, token: Token):
        self.token = token

    def execute(self, ctx: "ExecutionContext") -> str:
        return self.token.value


class NodeOutput(Node):
    """``{{ expression }}``."""

    def __init__(self, expression: Evaluator, token: Token, template: str):
        self.expression = expression
        self.token = token
        self.template = template

    def execute(self, ctx: "ExecutionContext") -> str:
        try:
            return self.expression.evaluate(ctx).to_str()
        except StencilError as e:
            raise locate(e, self.template, self.token) from e

    def references(self) -> Iterator[str]:
        return self.expression.references()


class NodeWrapper(Node):
    """Ordered list of nodes rendered one after another.

    Used for the document root and for every tag body (block, if, for, ...).
    """

    def __init__(self, nodes: list[Node] | None = None):
        self.nodes: list[Node] = nodes or []

    def execute(self, ctx: "ExecutionContext") -> str:
        return "".join(node.execute(ctx) for node in self.nodes)

    def references(self) -> Iterator[str]:
        for node in self.nodes:
            yield from node.references()


class NodeDocument(NodeWrapper):
    """Root of a parsed template."""

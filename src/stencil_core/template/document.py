"""Compiled template."""

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from stencil_core.errors import StencilError
from stencil_core.logging import get_logger

from .context import ExecutionContext
from .lexer import tokenize
from .nodes import NodeDocument, NodeWrapper
from .parser import Parser

if TYPE_CHECKING:
    from .engine import TemplateEngine

logger = get_logger("template")


class Template:
    """A parsed template: document tree, named blocks and inheritance links.

    Inheritance is a chain of private instances: a child that extends a base
    owns its own copy of the base (``parent``), and that copy points back at
    the child (``child``) so blocks can be overridden. Both links are set
    once while compiling and never change afterwards.
    """

    def __init__(
        self,
        name: str,
        source: str,
        engine: "TemplateEngine",
        chain: tuple[str, ...] = (),
    ):
        """Compile a template.

        Args:
            name: Template name (file templates use their path, for relative includes)
            source: Template source text
            engine: Engine providing registries, loader and limits
            chain: Names of the templates that are statically loading this one

        Raises:
            StencilError: On any lexing or parsing error
        """
        self.name = name
        self.engine = engine
        self.chain = (*chain, name)
        self.blocks: dict[str, NodeWrapper] = {}
        self.parent: Template | None = None
        self.child: Template | None = None

        tokens = tokenize(name, source)
        parser = Parser(name, tokens, self, engine.registries)
        self.document: NodeDocument = parser.parse_document()

    def __repr__(self) -> str:
        return f"Template({self.name!r})"

    # -- inheritance ------------------------------------------------------

    def link_child(self, child: "Template") -> None:
        """Make this template the base that ``child`` extends."""
        self.child = child
        child.parent = self

    def root_template(self) -> "Template":
        """Topmost base of the extends chain (``self`` when nothing is extended)."""
        template = self
        for _ in range(self.engine.max_inheritance_depth):
            if template.parent is None:
                break
            template = template.parent
        return template

    def lookup_block(self, name: str) -> NodeWrapper | None:
        """Deepest body defined for ``name`` from this template down the child chain."""
        chain: list[Template] = []
        template: Template | None = self
        while template is not None and len(chain) < self.engine.max_inheritance_depth:
            chain.append(template)
            template = template.child

        for candidate in reversed(chain):
            body = candidate.blocks.get(name)
            if body is not None:
                return body
        return None

    # -- rendering --------------------------------------------------------

    def new_context(self, public: dict[str, Any], depth: int = 0) -> ExecutionContext:
        """Execution context whose active template is the root of the extends chain."""
        return ExecutionContext(public=public, template=self.root_template(), depth=depth)

    def execute(self, ctx: ExecutionContext) -> str:
        """Render with a prepared context (used by includes)."""
        return self.root_template().document.execute(ctx)

    def render(self, context: Mapping[str, Any] | None = None) -> str:
        """Render the template.

        Args:
            context: Variables visible to the template; never modified

        Returns:
            Rendered text

        Raises:
            StencilError: On any render-time error; nothing is partially returned
        """
        with self.engine.instrument("render", self.name):
            ctx = self.new_context(dict(context or {}))
            try:
                return self.execute(ctx)
            except StencilError as e:
                logger.error("Render failed", template=self.name, code=e.code, location=e.location)
                raise

    def references(self) -> Iterator[str]:
        """Yield dotted variable paths the template reads (duplicates included)."""
        return self.document.references()

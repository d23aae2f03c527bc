"""``{% include "file" [with key=expr ...] [only] %}`` and ``{% include expr ... %}``.

A string literal filename is loaded and parsed together with the including
template. Any other expression is evaluated on every render and the named
template is loaded then.
"""

from collections.abc import Iterator
from typing import TYPE_CHECKING

from stencil_core.errors import StencilError, create_error
from stencil_core.logging import get_logger
from stencil_core.types import TokenKind

from ..context import ContextBuilder
from ..lexer import Token
from ..loader import join_relative
from ..nodes import Evaluator, TagNode, locate

if TYPE_CHECKING:
    from ..context import ExecutionContext
    from ..document import Template
    from ..parser import Parser

logger = get_logger("include")


class IncludeNode(TagNode):
    """Renders another template with a context derived from the caller's."""

    def __init__(
        self,
        including: "Template",
        token: Token,
        template: "Template | None" = None,
        filename: Evaluator | None = None,
        with_pairs: dict[str, Evaluator] | None = None,
        only: bool = False,
    ):
        self.including = including
        self.token = token
        self.template = template  # Static include
        self.filename = filename  # Deferred include
        self.with_pairs = with_pairs or {}
        self.only = only

    @property
    def deferred(self) -> bool:
        return self.template is None

    def execute(self, ctx: "ExecutionContext") -> str:
        builder = ContextBuilder(ctx, only=self.only)
        for key, expression in self.with_pairs.items():
            builder.set(key, expression.evaluate(ctx).raw)

        try:
            template = self.template or self._load(ctx)
        except StencilError as e:
            raise locate(e, self.including.name, self.token) from e
        return template.execute(builder.get_context(template))

    def _load(self, ctx: "ExecutionContext") -> "Template":
        assert self.filename is not None
        filename = self.filename.evaluate(ctx).to_str()
        if not filename:
            raise create_error("INCLUDE_EMPTY_FILENAME")

        engine = self.including.engine
        name = join_relative(self.including.name, filename)
        if ctx.depth >= engine.max_inheritance_depth:
            raise create_error(
                "CIRCULAR_REFERENCE",
                path=name,
                detail=f"Include nesting deeper than {engine.max_inheritance_depth} levels",
            )
        logger.debug("Deferred include", template=self.including.name, include=name)
        return engine.load_deferred(name)

    def references(self) -> Iterator[str]:
        if self.filename is not None:
            yield from self.filename.references()
        for expression in self.with_pairs.values():
            yield from expression.references()


def parse_include(doc: "Parser", start: Token, args: "Parser") -> IncludeNode:
    including = doc.template
    node = IncludeNode(including, start)

    filename_token = args.match_type(TokenKind.STRING)
    if filename_token is not None:
        name = join_relative(including.name, filename_token.value)
        try:
            node.template = including.engine.load_template(name, chain=including.chain)
        except StencilError as e:
            raise locate(e, doc.name, filename_token) from e
    elif args.remaining() > 0:
        node.filename = args.parse_expression()
    else:
        raise args.args_error("include", "Tag 'include' requires a filename")

    if args.match(TokenKind.IDENTIFIER, "with") is not None:
        if args.remaining() == 0:
            raise args.args_error("include", "'with' requires at least one key=value pair")
        while args.remaining() > 0:
            key_token = args.match_type(TokenKind.IDENTIFIER)
            if key_token is None:
                raise args.args_error("include", "Expected an identifier")
            if args.match(TokenKind.SYMBOL, "=") is None:
                raise args.args_error("include", "Expected '='")
            node.with_pairs[key_token.value] = args.parse_expression()

            if args.match(TokenKind.IDENTIFIER, "only") is not None:
                node.only = True
                break
            args.match(TokenKind.SYMBOL, ",")
    elif args.match(TokenKind.IDENTIFIER, "only") is not None:
        node.only = True

    if args.remaining() > 0:
        raise args.args_error("include", "Malformed 'include'-tag arguments")

    return node

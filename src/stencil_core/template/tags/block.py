"""``{% block name %} ... {% endblock [name] %}``."""

from collections.abc import Iterator
from typing import TYPE_CHECKING

from stencil_core.errors import create_error
from stencil_core.types import TokenKind

from ..lexer import Token
from ..nodes import NodeWrapper, TagNode

if TYPE_CHECKING:
    from ..context import ExecutionContext
    from ..parser import Parser


class BlockNode(TagNode):
    """Named, overridable region.

    The node owns only its name: the body to render is looked up at render
    time through the active template's child chain, so the most derived
    template that defines the block wins.
    """

    def __init__(self, name: str, body: NodeWrapper, token: Token, template: str):
        self.name = name
        self.body = body  # Body defined where this tag was parsed
        self.token = token
        self.template = template

    def execute(self, ctx: "ExecutionContext") -> str:
        body = ctx.template.lookup_block(self.name)
        if body is None:
            raise create_error(
                "BLOCK_NOT_FOUND",
                name=self.name,
                template=self.template,
                line=self.token.line,
                column=self.token.column,
            )
        return body.execute(ctx)

    def references(self) -> Iterator[str]:
        return self.body.references()


def parse_block(doc: "Parser", start: Token, args: "Parser") -> BlockNode:
    if args.count() == 0:
        raise args.args_error("block", "Tag 'block' requires an identifier")

    name_token = args.match_type(TokenKind.IDENTIFIER)
    if name_token is None:
        raise args.args_error("block", "First argument for tag 'block' must be an identifier")
    if args.remaining() > 0:
        raise args.args_error("block", "Tag 'block' takes exactly 1 argument (an identifier)")

    body, _, end_args = doc.wrap_until_tag("endblock")
    if end_args.remaining() > 0:
        end_name = end_args.match_type(TokenKind.IDENTIFIER)
        if end_name is None or end_args.remaining() > 0:
            raise end_args.args_error(
                "endblock", "Either no or only one argument (identifier) allowed for 'endblock'"
            )
        if end_name.value != name_token.value:
            raise end_args.error(
                "BLOCK_NAME_MISMATCH", end_name, name=name_token.value, end_name=end_name.value
            )

    template = doc.template
    if name_token.value in template.blocks:
        raise args.error("DUPLICATE_BLOCK", name_token, name=name_token.value)
    template.blocks[name_token.value] = body

    return BlockNode(name_token.value, body, start, doc.name)

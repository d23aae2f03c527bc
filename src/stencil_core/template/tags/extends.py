"""``{% extends "base.html" %}``."""

from typing import TYPE_CHECKING

from stencil_core.errors import StencilError
from stencil_core.types import TokenKind

from ..lexer import Token
from ..loader import join_relative
from ..nodes import TagNode, locate

if TYPE_CHECKING:
    from ..context import ExecutionContext
    from ..parser import Parser


class ExtendsNode(TagNode):
    """Marker left in the child's document; rendering starts at the base instead."""

    def __init__(self, parent: str, token: Token):
        self.parent = parent
        self.token = token

    def execute(self, ctx: "ExecutionContext") -> str:
        return ""


def parse_extends(doc: "Parser", start: Token, args: "Parser") -> ExtendsNode:
    template = doc.template
    if template.parent is not None:
        raise args.args_error("extends", "Only one 'extends' tag is allowed per template")

    # Only whitespace may precede the tag ({# #} comments never reach the parser)
    opener = doc.tokens.index(start) - 1
    for token in doc.tokens[:opener]:
        if token.kind is not TokenKind.HTML or token.value.strip():
            raise args.args_error(
                "extends", "Tag 'extends' must be the first tag in the template", start
            )

    filename_token = args.match_type(TokenKind.STRING)
    if filename_token is None:
        raise args.args_error("extends", "Tag 'extends' requires a string filename")
    if args.remaining() > 0:
        raise args.args_error("extends", "Tag 'extends' takes exactly 1 argument (a string)")

    name = join_relative(template.name, filename_token.value)
    try:
        parent = template.engine.load_template(name, chain=template.chain)
    except StencilError as e:
        raise locate(e, doc.name, filename_token) from e
    parent.link_child(template)

    return ExtendsNode(name, start)

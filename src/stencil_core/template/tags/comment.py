"""``{% comment %} ... {% endcomment %}``; the body is skipped unparsed."""

from typing import TYPE_CHECKING

from ..lexer import Token
from ..nodes import TagNode

if TYPE_CHECKING:
    from ..context import ExecutionContext
    from ..parser import Parser


class CommentNode(TagNode):
    def execute(self, ctx: "ExecutionContext") -> str:
        return ""


def parse_comment(doc: "Parser", start: Token, args: "Parser") -> CommentNode:
    _, end_args = doc.skip_until_tag("endcomment")
    if args.remaining() > 0 or end_args.remaining() > 0:
        raise args.args_error("comment", "Tags 'comment' and 'endcomment' take no arguments")
    return CommentNode()

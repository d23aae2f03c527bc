"""``{% for item in items %} ... {% else %} ... {% endfor %}``.

With two loop variables (``{% for key, value in mapping %}``) the loop
walks key/value pairs; sequences then yield ``(index, item)``.
"""

from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from stencil_core.types import TokenKind

from ..lexer import Token
from ..nodes import Evaluator, NodeWrapper, TagNode

if TYPE_CHECKING:
    from ..context import ExecutionContext
    from ..parser import Parser


def forloop_state(index: int, total: int) -> dict[str, Any]:
    """Values exposed as ``forloop`` inside the loop body."""
    return {
        "counter": index + 1,
        "counter0": index,
        "revcounter": total - index,
        "revcounter0": total - index - 1,
        "first": index == 0,
        "last": index == total - 1,
    }


class ForNode(TagNode):
    def __init__(
        self,
        key: str,
        value: str | None,
        iterable: Evaluator,
        body: NodeWrapper,
        empty: NodeWrapper | None,
    ):
        self.key = key
        self.value = value
        self.iterable = iterable
        self.body = body
        self.empty = empty

    def execute(self, ctx: "ExecutionContext") -> str:
        iterable = self.iterable.evaluate(ctx)
        bindings: list[dict[str, Any]]
        if self.value is None:
            bindings = [{self.key: item.raw} for item in iterable.iterate()]
        else:
            bindings = [{self.key: k.raw, self.value: v.raw} for k, v in iterable.items()]

        if not bindings:
            return self.empty.execute(ctx) if self.empty is not None else ""

        total = len(bindings)
        parts = []
        for index, binding in enumerate(bindings):
            binding["forloop"] = forloop_state(index, total)
            parts.append(self.body.execute(ctx.derive(binding)))
        return "".join(parts)

    def references(self) -> Iterator[str]:
        yield from self.iterable.references()
        yield from self.body.references()
        if self.empty is not None:
            yield from self.empty.references()


def parse_for(doc: "Parser", start: Token, args: "Parser") -> ForNode:
    key_token = args.match_type(TokenKind.IDENTIFIER)
    if key_token is None:
        raise args.args_error("for", "Expected a loop variable name")

    value_name = None
    if args.match(TokenKind.SYMBOL, ",") is not None:
        value_token = args.match_type(TokenKind.IDENTIFIER)
        if value_token is None:
            raise args.args_error("for", "Expected a second loop variable name after ','")
        value_name = value_token.value

    if args.match(TokenKind.KEYWORD, "in") is None:
        raise args.args_error("for", "Expected keyword 'in'")
    if args.remaining() == 0:
        raise args.args_error("for", "Expected an expression to iterate over")
    iterable = args.parse_expression()
    if args.remaining() > 0:
        raise args.args_error("for", "Malformed 'for'-tag arguments")

    body, end_name, end_args = doc.wrap_until_tag("else", "endfor")
    empty = None
    if end_name == "else":
        if end_args.remaining() > 0:
            raise end_args.args_error("else", "Tag 'else' takes no arguments")
        empty, _, end_args = doc.wrap_until_tag("endfor")
    if end_args.remaining() > 0:
        raise end_args.args_error("endfor", "Tag 'endfor' takes no arguments")

    return ForNode(key_token.value, value_name, iterable, body, empty)

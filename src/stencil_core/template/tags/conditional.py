"""``{% if %} ... {% elif %} ... {% else %} ... {% endif %}``."""

from collections.abc import Iterator
from typing import TYPE_CHECKING

from ..lexer import Token
from ..nodes import Evaluator, NodeWrapper, TagNode

if TYPE_CHECKING:
    from ..context import ExecutionContext
    from ..parser import Parser


class IfNode(TagNode):
    """Renders the body of the first truthy condition, or the ``else`` body."""

    def __init__(
        self,
        conditions: list[Evaluator],
        bodies: list[NodeWrapper],
        otherwise: NodeWrapper | None,
    ):
        self.conditions = conditions
        self.bodies = bodies
        self.otherwise = otherwise

    def execute(self, ctx: "ExecutionContext") -> str:
        for condition, body in zip(self.conditions, self.bodies, strict=True):
            if condition.evaluate(ctx).is_true():
                return body.execute(ctx)
        if self.otherwise is not None:
            return self.otherwise.execute(ctx)
        return ""

    def references(self) -> Iterator[str]:
        for condition, body in zip(self.conditions, self.bodies, strict=True):
            yield from condition.references()
            yield from body.references()
        if self.otherwise is not None:
            yield from self.otherwise.references()


def _condition(tag_name: str, args: "Parser") -> Evaluator:
    if args.remaining() == 0:
        raise args.args_error(tag_name, f"Tag '{tag_name}' requires a condition")
    condition = args.parse_expression()
    if args.remaining() > 0:
        raise args.args_error(tag_name, f"Malformed '{tag_name}'-tag condition")
    return condition


def parse_if(doc: "Parser", start: Token, args: "Parser") -> IfNode:
    conditions = [_condition("if", args)]
    bodies: list[NodeWrapper] = []
    otherwise = None

    while True:
        body, end_name, end_args = doc.wrap_until_tag("elif", "else", "endif")
        bodies.append(body)
        if end_name == "elif":
            conditions.append(_condition("elif", end_args))
            continue
        if end_args.remaining() > 0:
            raise end_args.args_error(end_name, f"Tag '{end_name}' takes no arguments")
        if end_name == "else":
            otherwise, _, end_args = doc.wrap_until_tag("endif")
            if end_args.remaining() > 0:
                raise end_args.args_error("endif", "Tag 'endif' takes no arguments")
        break

    return IfNode(conditions, bodies, otherwise)

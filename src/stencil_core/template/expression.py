"""Expression grammar and evaluator tree.

Grammar, lowest precedence first. Every binary level takes at most one
operator; the logical and relational levels recurse on their right side.

    expression := relational (("&&" | "and" | "||" | "or") expression)?
    relational := simple (relop relational | "in" simple)?
    simple     := ("+" | "-")? ("!" | "not")? term (("+" | "-") term)?
    term       := power (("*" | "/") power)?
    power      := factor ("^" factor)?
    factor     := "(" expression ")" | operand ("|" name (":" operand)?)*

Arithmetic at the simple and term levels works on integers; only power
uses floating point.
"""

import math
from collections.abc import Iterator
from typing import TYPE_CHECKING

from stencil_core.errors import StencilError, create_error
from stencil_core.types import TokenKind

from .lexer import Token
from .nodes import Evaluator, locate
from .registry import FilterFunction
from .value import Value

if TYPE_CHECKING:
    from .context import ExecutionContext

LOGICAL_OPERATORS = ("&&", "||")
LOGICAL_KEYWORDS = ("and", "or")
RELATIONAL_OPERATORS = ("==", "<=", ">=", "!=", "<>", ">", "<")


class Literal(Evaluator):
    """Constant value parsed from the template source."""

    def __init__(self, value: Value, token: Token):
        self.value = value
        self.token = token

    def evaluate(self, ctx: "ExecutionContext") -> Value:
        return self.value


class Variable(Evaluator):
    """Dotted path such as ``user.name`` or ``items.0``."""

    def __init__(self, parts: list[str], token: Token):
        self.parts = parts
        self.token = token

    @property
    def path(self) -> str:
        return ".".join(self.parts)

    def evaluate(self, ctx: "ExecutionContext") -> Value:
        value = Value(ctx.lookup(self.parts[0]))
        for part in self.parts[1:]:
            if value.is_nil():
                break
            value = value.get_item(part)
        return value

    def references(self) -> Iterator[str]:
        yield self.path


class FilterCall:
    """One ``|name[:param]`` stage of a filter chain."""

    def __init__(
        self,
        name: str,
        function: FilterFunction,
        param: Evaluator | None,
        token: Token,
    ):
        self.name = name
        self.function = function
        self.param = param
        self.token = token

    def apply(self, value: Value, ctx: "ExecutionContext") -> Value:
        param = self.param.evaluate(ctx) if self.param is not None else Value()
        try:
            result = self.function(value, param)
        except StencilError as e:
            raise locate(e, None, self.token) from e
        except Exception as e:
            raise create_error(
                "FILTER_FAILED",
                filter_name=self.name,
                detail=f"{type(e).__name__}: {e}",
                line=self.token.line,
                column=self.token.column,
            ) from e
        return result if isinstance(result, Value) else Value(result)


class FilteredExpression(Evaluator):
    """Operand followed by a chain of filters, applied left to right."""

    def __init__(self, operand: Evaluator, filters: list[FilterCall]):
        self.operand = operand
        self.filters = filters

    def evaluate(self, ctx: "ExecutionContext") -> Value:
        value = self.operand.evaluate(ctx)
        for call in self.filters:
            value = call.apply(value, ctx)
        return value

    def references(self) -> Iterator[str]:
        yield from self.operand.references()
        for call in self.filters:
            if call.param is not None:
                yield from call.param.references()


class BinaryExpression(Evaluator):
    """Shared shape of the binary levels: left side, optional operator and right side."""

    def __init__(
        self,
        left: Evaluator,
        operator: Token | None = None,
        right: Evaluator | None = None,
    ):
        self.left = left
        self.operator = operator
        self.right = right

    def evaluate(self, ctx: "ExecutionContext") -> Value:
        left = self.left.evaluate(ctx)
        if self.right is None or self.operator is None:
            return left
        # Both sides are always evaluated, even when the left decides the result
        right = self.right.evaluate(ctx)
        return self.combine(left, right)

    def combine(self, left: Value, right: Value) -> Value:
        raise NotImplementedError

    def references(self) -> Iterator[str]:
        yield from self.left.references()
        if self.right is not None:
            yield from self.right.references()

    def _unsupported(self) -> StencilError:
        assert self.operator is not None
        return create_error(
            "UNSUPPORTED_OPERATOR",
            operator=self.operator.value,
            line=self.operator.line,
            column=self.operator.column,
        )


class LogicalExpression(BinaryExpression):
    """``and`` / ``&&`` / ``or`` / ``||``; never short-circuits."""

    def combine(self, left: Value, right: Value) -> Value:
        assert self.operator is not None
        op = self.operator.value
        if op in ("and", "&&"):
            return Value(left.is_true() and right.is_true())
        if op in ("or", "||"):
            return Value(left.is_true() or right.is_true())
        raise self._unsupported()


class RelationalExpression(BinaryExpression):
    """Comparisons and membership."""

    def combine(self, left: Value, right: Value) -> Value:
        assert self.operator is not None
        op = self.operator.value
        if op == "==":
            return Value(left.equal_value_to(right))
        if op in ("!=", "<>"):
            return Value(not left.equal_value_to(right))
        if op == "<":
            return Value(left.to_int() < right.to_int())
        if op == "<=":
            return Value(left.to_int() <= right.to_int())
        if op == ">":
            return Value(left.to_int() > right.to_int())
        if op == ">=":
            return Value(left.to_int() >= right.to_int())
        if op == "in":
            return Value(right.contains(left))
        raise self._unsupported()


class SimpleExpression(BinaryExpression):
    """Additive level; the unary flags apply to the first term only."""

    def __init__(
        self,
        left: Evaluator,
        operator: Token | None = None,
        right: Evaluator | None = None,
        negate: bool = False,
        negative_sign: bool = False,
    ):
        super().__init__(left, operator, right)
        self.negate = negate
        self.negative_sign = negative_sign

    def evaluate(self, ctx: "ExecutionContext") -> Value:
        result = self.left.evaluate(ctx)
        if self.negate:
            result = result.negate()
        if self.negative_sign:
            result = result.negative()
        if self.right is None or self.operator is None:
            return result
        return self.combine(result, self.right.evaluate(ctx))

    def combine(self, left: Value, right: Value) -> Value:
        assert self.operator is not None
        if self.operator.value == "+":
            return Value(left.to_int() + right.to_int())
        if self.operator.value == "-":
            return Value(left.to_int() - right.to_int())
        raise self._unsupported()


class Term(BinaryExpression):
    """Multiplicative level. Division is recognised but not implemented."""

    def combine(self, left: Value, right: Value) -> Value:
        assert self.operator is not None
        if self.operator.value == "*":
            return Value(left.to_int() * right.to_int())
        raise self._unsupported()


class Power(BinaryExpression):
    """``^``, always computed in floating point."""

    def combine(self, left: Value, right: Value) -> Value:
        return Value(float_pow(left.to_float(), right.to_float()))


def float_pow(base: float, exponent: float) -> float:
    """IEEE-style power: overflow gives ±inf, domain errors give nan."""
    try:
        return math.pow(base, exponent)
    except OverflowError:
        odd = exponent.is_integer() and int(exponent) % 2 == 1
        return -math.inf if base < 0 and odd else math.inf
    except ValueError:
        if base == 0 and exponent < 0:
            odd = exponent.is_integer() and int(exponent) % 2 == 1
            return math.copysign(math.inf, base) if odd else math.inf
        return math.nan


class ExpressionParserMixin:
    """Expression rules for ``Parser``.

    Relies on the cursor primitives (``match``, ``peek``, ``current``, ...),
    ``registries`` and ``error`` of the class it is mixed into.
    """

    def parse_expression(self) -> Evaluator:
        """Parse one expression starting at the cursor.

        Returns:
            Evaluator for the consumed tokens; the cursor is left after them

        Raises:
            StencilError: On malformed input, positioned at the offending token
        """
        left = self._parse_relational()
        operator = self.match_one(TokenKind.SYMBOL, *LOGICAL_OPERATORS) or self.match_one(
            TokenKind.KEYWORD, *LOGICAL_KEYWORDS
        )
        if operator is None:
            return left
        return LogicalExpression(left, operator, self.parse_expression())

    def _parse_relational(self) -> Evaluator:
        left = self._parse_simple()
        operator = self.match_one(TokenKind.SYMBOL, *RELATIONAL_OPERATORS)
        if operator is not None:
            return RelationalExpression(left, operator, self._parse_relational())
        operator = self.match(TokenKind.KEYWORD, "in")
        if operator is not None:
            return RelationalExpression(left, operator, self._parse_simple())
        return left

    def _parse_simple(self) -> Evaluator:
        negative_sign = False
        sign = self.match_one(TokenKind.SYMBOL, "+", "-")
        if sign is not None and sign.value == "-":
            negative_sign = True
        negate = bool(self.match(TokenKind.SYMBOL, "!") or self.match(TokenKind.KEYWORD, "not"))

        left = self._parse_term()
        operator = self.match_one(TokenKind.SYMBOL, "+", "-")
        right = self._parse_term() if operator is not None else None

        if operator is None and not negate and not negative_sign:
            return left
        return SimpleExpression(left, operator, right, negate=negate, negative_sign=negative_sign)

    def _parse_term(self) -> Evaluator:
        left = self._parse_power()
        operator = self.match_one(TokenKind.SYMBOL, "*", "/")
        if operator is None:
            return left
        return Term(left, operator, self._parse_power())

    def _parse_power(self) -> Evaluator:
        left = self._parse_factor()
        operator = self.match(TokenKind.SYMBOL, "^")
        if operator is None:
            return left
        return Power(left, operator, self._parse_factor())

    def _parse_factor(self) -> Evaluator:
        if self.match(TokenKind.SYMBOL, "(") is not None:
            expression = self.parse_expression()
            if self.match(TokenKind.SYMBOL, ")") is None:
                raise self.error("TEMPLATE_SYNTAX", detail="Closing bracket expected after expression")
            return expression
        return self._parse_variable_or_literal_with_filter()

    def _parse_variable_or_literal_with_filter(self) -> Evaluator:
        operand = self._parse_variable_or_literal()
        filters: list[FilterCall] = []

        while self.match(TokenKind.SYMBOL, "|") is not None:
            name_token = self.match_type(TokenKind.IDENTIFIER)
            if name_token is None:
                raise self.error("TEMPLATE_SYNTAX", detail="Filter name must be an identifier")
            function = self.registries.filters.get(name_token.value)
            if function is None:
                raise self.error("UNKNOWN_FILTER", name_token, filter_name=name_token.value)

            param = None
            if self.match(TokenKind.SYMBOL, ":") is not None:
                param = self._parse_variable_or_literal()
            filters.append(FilterCall(name_token.value, function, param, name_token))

        if not filters:
            return operand
        return FilteredExpression(operand, filters)

    def _parse_variable_or_literal(self) -> Evaluator:
        token = self.current()
        if token is None or token.kind is TokenKind.EOF:
            raise self.error("UNCLOSED_TAG", expected="a variable or literal")

        # A sign directly in front of a number belongs to the literal
        if token.kind is TokenKind.SYMBOL and token.value in ("+", "-"):
            number = self.peek_n(1, TokenKind.NUMBER)
            if number is not None:
                self.consume(2)
                value = _number(number.value)
                return Literal(value.negative() if token.value == "-" else value, token)

        if token.kind is TokenKind.NUMBER:
            self.consume()
            return Literal(_number(token.value), token)

        if token.kind is TokenKind.STRING:
            self.consume()
            return Literal(Value(token.value), token)

        if token.kind is TokenKind.KEYWORD and token.value in ("true", "false", "nil", "none"):
            self.consume()
            constant = {"true": True, "false": False}.get(token.value)
            return Literal(Value(constant), token)

        if token.kind is TokenKind.IDENTIFIER:
            self.consume()
            parts = [token.value]
            while self.match(TokenKind.SYMBOL, ".") is not None:
                part = (
                    self.match_type(TokenKind.IDENTIFIER)
                    or self.match_type(TokenKind.NUMBER)
                    or self.match_type(TokenKind.KEYWORD)
                )
                if part is None:
                    raise self.error(
                        "TEMPLATE_SYNTAX",
                        detail="This token is not allowed within a variable name",
                    )
                parts.append(part.value)
            return Variable(parts, token)

        raise self.error(
            "UNEXPECTED_TOKEN",
            token,
            detail="Expected a variable, a literal or a parenthesised expression",
        )


def _number(text: str) -> Value:
    if "." in text:
        return Value(float(text))
    return Value(int(text))

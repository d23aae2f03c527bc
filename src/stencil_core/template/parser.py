"""Document parser.

A ``Parser`` is a cursor over a token list with peek/match primitives. The
document parser walks the whole template; every tag gets its own argument
parser scoped to the tokens between the tag name and ``%}``. Both share the
template being built and its registries.
"""

from typing import TYPE_CHECKING

from stencil_core.errors import StencilError, create_error
from stencil_core.types import TokenKind

from .expression import ExpressionParserMixin
from .lexer import Token
from .nodes import Node, NodeDocument, NodeHTML, NodeOutput, NodeWrapper, TagNode
from .registry import Registries

if TYPE_CHECKING:
    from .document import Template


class Parser(ExpressionParserMixin):
    """Token cursor plus document and expression parsing rules."""

    def __init__(
        self,
        name: str,
        tokens: list[Token],
        template: "Template",
        registries: Registries,
        anchor: Token | None = None,
    ):
        """Initialize parser.

        Args:
            name: Template name used in error positions
            tokens: Tokens to parse (argument parsers get no EOF token)
            template: Template being built
            registries: Tags and filters available while parsing
            anchor: Token reported for errors when the stream is empty
        """
        self.name = name
        self.tokens = tokens
        self.template = template
        self.registries = registries
        self.anchor = anchor
        self.idx = 0

    # -- cursor -----------------------------------------------------------

    def current(self) -> Token | None:
        """Token under the cursor; ``None`` past the end."""
        return self.get(self.idx)

    def get(self, index: int) -> Token | None:
        if 0 <= index < len(self.tokens):
            return self.tokens[index]
        return None

    def consume(self, count: int = 1) -> None:
        self.idx += count

    def remaining(self) -> int:
        """Tokens left, not counting a trailing EOF."""
        end = len(self.tokens)
        if end and self.tokens[-1].kind is TokenKind.EOF:
            end -= 1
        return max(end - self.idx, 0)

    def count(self) -> int:
        return len(self.tokens)

    def peek(self, kind: TokenKind, value: str) -> Token | None:
        return self.peek_n(0, kind, value)

    def peek_one(self, kind: TokenKind, *values: str) -> Token | None:
        token = self.current()
        if token is not None and token.kind is kind and token.value in values:
            return token
        return None

    def peek_type(self, kind: TokenKind) -> Token | None:
        return self.peek_n(0, kind)

    def peek_n(self, shift: int, kind: TokenKind, value: str | None = None) -> Token | None:
        """Token ``shift`` places ahead if it has the given kind (and value)."""
        token = self.get(self.idx + shift)
        if token is None or token.kind is not kind:
            return None
        if value is not None and token.value != value:
            return None
        return token

    def match(self, kind: TokenKind, value: str) -> Token | None:
        """Consume and return the current token if it is ``kind``/``value``."""
        token = self.peek(kind, value)
        if token is not None:
            self.consume()
        return token

    def match_one(self, kind: TokenKind, *values: str) -> Token | None:
        token = self.peek_one(kind, *values)
        if token is not None:
            self.consume()
        return token

    def match_type(self, kind: TokenKind) -> Token | None:
        token = self.peek_type(kind)
        if token is not None:
            self.consume()
        return token

    def error(self, code: str, token: Token | None = None, **context: object) -> StencilError:
        """Build a positioned error; defaults to the token under the cursor."""
        token = token or self.current() or (self.tokens[-1] if self.tokens else self.anchor)
        if token is not None:
            context.setdefault("line", token.line)
            context.setdefault("column", token.column)
            context.setdefault("token", token.value)
        return create_error(code, template=self.name, **context)

    # -- document ---------------------------------------------------------

    def parse_document(self) -> NodeDocument:
        """Parse the whole token stream into a document tree."""
        document = NodeDocument()
        while self.remaining() > 0:
            document.nodes.append(self.parse_doc_element())
        return document

    def parse_doc_element(self) -> Node:
        """Parse one HTML span, ``{{ }}`` output or ``{% %}`` tag."""
        token = self.current()
        if token is not None and token.kind is TokenKind.HTML:
            self.consume()
            return NodeHTML(token)
        if token is not None and token.kind is TokenKind.SYMBOL:
            if token.value == "{{":
                return self.parse_variable_element()
            if token.value == "{%":
                return self.parse_tag_element()
        raise self.error("UNEXPECTED_TOKEN", token)

    def parse_variable_element(self) -> NodeOutput:
        start = self.current()
        assert start is not None
        self.consume()  # {{
        expression = self.parse_expression()
        if self.match(TokenKind.SYMBOL, "}}") is None:
            raise self.error(
                "TEMPLATE_SYNTAX", detail="'}}' expected after the output expression"
            )
        return NodeOutput(expression, start, self.name)

    def parse_tag_element(self) -> TagNode:
        self.consume()  # {%
        name_token = self.match_type(TokenKind.IDENTIFIER)
        if name_token is None:
            raise self.error("TEMPLATE_SYNTAX", detail="Tag name must be an identifier")

        tag_parser = self.registries.tags.get(name_token.value)
        if tag_parser is None:
            raise self.error("UNKNOWN_TAG", name_token, tag_name=name_token.value)

        args_parser = self._tag_arguments(name_token)
        return tag_parser(self, name_token, args_parser)

    def _tag_arguments(self, name_token: Token) -> "Parser":
        """Collect the tokens up to ``%}`` into an argument parser and skip the closer."""
        args: list[Token] = []
        while self.remaining() > 0:
            if self.match(TokenKind.SYMBOL, "%}") is not None:
                return Parser(
                    self.name, args, self.template, self.registries, anchor=name_token
                )
            token = self.current()
            assert token is not None
            args.append(token)
            self.consume()
        raise self.error("UNCLOSED_TAG", expected="%}")

    def args_error(self, tag_name: str, detail: str, token: Token | None = None) -> StencilError:
        """Positioned TAG_ARGUMENTS error, used by tag parsers on their argument parser."""
        return self.error("TAG_ARGUMENTS", token, tag_name=tag_name, detail=detail)

    def wrap_until_tag(self, *names: str) -> tuple[NodeWrapper, str, "Parser"]:
        """Parse document elements until one of the named end tags.

        Args:
            names: Tag names that end the body (e.g. ``"elif", "else", "endif"``)

        Returns:
            (body, name of the end tag found, argument parser for the end tag)

        Raises:
            StencilError(UNCLOSED_TAG): If the template ends first
        """
        wrapper = NodeWrapper()
        while self.remaining() > 0:
            end = self._peek_end_tag(names)
            if end is not None:
                self.consume(2)  # {% name
                return wrapper, end.value, self._tag_arguments(end)
            wrapper.nodes.append(self.parse_doc_element())

        raise self.error("UNCLOSED_TAG", expected=" or ".join(names))

    def skip_until_tag(self, *names: str) -> tuple[str, "Parser"]:
        """Skip raw tokens until one of the named end tags (no parsing of the body)."""
        while self.remaining() > 0:
            end = self._peek_end_tag(names)
            if end is not None:
                self.consume(2)
                return end.value, self._tag_arguments(end)
            self.consume()

        raise self.error("UNCLOSED_TAG", expected=" or ".join(names))

    def _peek_end_tag(self, names: tuple[str, ...]) -> Token | None:
        if self.peek(TokenKind.SYMBOL, "{%") is None:
            return None
        token = self.peek_n(1, TokenKind.IDENTIFIER)
        if token is not None and token.value in names:
            return token
        return None

"""Unit tests for the template lexer."""

import pytest

from stencil_core.errors import StencilError
from stencil_core.template import tokenize
from stencil_core.types import TokenKind


def kinds_and_values(source: str) -> list[tuple[TokenKind, str]]:
    return [(t.kind, t.value) for t in tokenize("test", source)]


class TestTokenize:
    """Tests for token kinds and values."""

    def test_plain_text_is_one_html_token(self):
        """Test literal text becomes a single HTML token plus EOF."""
        assert kinds_and_values("Hello world") == [
            (TokenKind.HTML, "Hello world"),
            (TokenKind.EOF, ""),
        ]

    def test_empty_source_is_only_eof(self):
        """Test empty input still ends with EOF."""
        assert kinds_and_values("") == [(TokenKind.EOF, "")]

    def test_output_expression(self):
        """Test {{ }} delimiters and inner tokens."""
        assert kinds_and_values("a{{ name }}b") == [
            (TokenKind.HTML, "a"),
            (TokenKind.SYMBOL, "{{"),
            (TokenKind.IDENTIFIER, "name"),
            (TokenKind.SYMBOL, "}}"),
            (TokenKind.HTML, "b"),
            (TokenKind.EOF, ""),
        ]

    def test_tag(self):
        """Test {% %} delimiters."""
        assert kinds_and_values("{% block content %}") == [
            (TokenKind.SYMBOL, "{%"),
            (TokenKind.IDENTIFIER, "block"),
            (TokenKind.IDENTIFIER, "content"),
            (TokenKind.SYMBOL, "%}"),
            (TokenKind.EOF, ""),
        ]

    def test_keywords(self):
        """Test reserved words are KEYWORD tokens."""
        tokens = kinds_and_values("{{ true and not x or nil in none }}")[1:-2]
        assert tokens == [
            (TokenKind.KEYWORD, "true"),
            (TokenKind.KEYWORD, "and"),
            (TokenKind.KEYWORD, "not"),
            (TokenKind.IDENTIFIER, "x"),
            (TokenKind.KEYWORD, "or"),
            (TokenKind.KEYWORD, "nil"),
            (TokenKind.KEYWORD, "in"),
            (TokenKind.KEYWORD, "none"),
        ]

    @pytest.mark.parametrize("op", ["==", "!=", "<>", "<=", ">=", "&&", "||"])
    def test_two_character_operators(self, op):
        """Test longest-match on operators."""
        tokens = kinds_and_values(f"{{{{ a {op} b }}}}")
        assert (TokenKind.SYMBOL, op) in tokens

    def test_operators_without_spaces(self):
        """Test adjacent operators split correctly."""
        tokens = kinds_and_values("{{ a<=-1 }}")[1:-2]
        assert tokens == [
            (TokenKind.IDENTIFIER, "a"),
            (TokenKind.SYMBOL, "<="),
            (TokenKind.SYMBOL, "-"),
            (TokenKind.NUMBER, "1"),
        ]

    def test_numbers(self):
        """Test integer and float literals."""
        tokens = kinds_and_values("{{ 12 + 1.5 }}")[1:-2]
        assert tokens == [
            (TokenKind.NUMBER, "12"),
            (TokenKind.SYMBOL, "+"),
            (TokenKind.NUMBER, "1.5"),
        ]

    def test_dotted_integer_path(self):
        """Test items.0.1 is two index lookups, not the float 0.1."""
        tokens = kinds_and_values("{{ items.0.1 }}")[1:-2]
        assert tokens == [
            (TokenKind.IDENTIFIER, "items"),
            (TokenKind.SYMBOL, "."),
            (TokenKind.NUMBER, "0"),
            (TokenKind.SYMBOL, "."),
            (TokenKind.NUMBER, "1"),
        ]

    def test_strings_are_unescaped(self):
        """Test both quote styles and backslash escapes."""
        tokens = kinds_and_values(r"""{{ "a\"b\n" 'it\'s' }}""")[1:-2]
        assert tokens == [
            (TokenKind.STRING, 'a"b\n'),
            (TokenKind.STRING, "it's"),
        ]

    def test_closer_inside_string(self):
        """Test a string may contain the tag closer."""
        tokens = kinds_and_values('{{ "}}" }}')
        assert tokens[2] == (TokenKind.STRING, "}}")
        assert tokens[3] == (TokenKind.SYMBOL, "}}")

    def test_comments_are_dropped(self):
        """Test {# #} produces no tokens."""
        assert kinds_and_values("a{# {{ not parsed }} #}b") == [
            (TokenKind.HTML, "a"),
            (TokenKind.HTML, "b"),
            (TokenKind.EOF, ""),
        ]


class TestPositions:
    """Tests for line/column tracking."""

    def test_positions_after_newline(self):
        """Test tokens after a newline report the next line."""
        tokens = tokenize("test", "ab\n{{ x }}")
        assert (tokens[0].line, tokens[0].column) == (1, 1)
        assert (tokens[1].line, tokens[1].column) == (2, 1)
        assert (tokens[2].line, tokens[2].column) == (2, 4)

    def test_multiline_tag(self):
        """Test newlines inside a tag advance the line."""
        tokens = tokenize("test", "{{\n  x }}")
        assert (tokens[1].line, tokens[1].column) == (2, 3)


class TestLexerErrors:
    """Tests for lexer failures."""

    def test_unclosed_output(self):
        """Test a missing }} is reported."""
        with pytest.raises(StencilError) as exc_info:
            tokenize("page", "Hello {{ name")
        assert exc_info.value.code == "UNCLOSED_TAG"
        assert exc_info.value.template == "page"
        assert "}}" in exc_info.value.message

    def test_unclosed_comment(self):
        """Test a missing #} is reported."""
        with pytest.raises(StencilError) as exc_info:
            tokenize("page", "{# never closed")
        assert exc_info.value.code == "UNCLOSED_TAG"

    def test_unterminated_string(self):
        """Test a string without closing quote."""
        with pytest.raises(StencilError) as exc_info:
            tokenize("page", '{{ "abc }}')
        assert exc_info.value.code == "TEMPLATE_SYNTAX"

    def test_unexpected_character_position(self):
        """Test the offending character's position is reported."""
        with pytest.raises(StencilError) as exc_info:
            tokenize("page", "{{ a @ b }}")
        error = exc_info.value
        assert error.code == "TEMPLATE_SYNTAX"
        assert (error.line, error.column) == (1, 6)
        assert "@" in error.detail

"""Template lexer.

Splits template source into a flat token list:
- HTML: literal text between tags
- SYMBOL: delimiters (``{{``, ``}}``, ``{%``, ``%}``) and operators
- IDENTIFIER / KEYWORD: names; keywords are a fixed reserved set
- STRING / NUMBER: literals (strings are unescaped here)

``{# ... #}`` comments are dropped entirely. The token list always ends with
a single EOF token.
"""

import re
from dataclasses import dataclass

from stencil_core.errors import create_error
from stencil_core.types import TokenKind

KEYWORDS = frozenset({"in", "and", "or", "not", "true", "false", "nil", "none"})

# Longest operators first so that "<=" wins over "<"
SYMBOLS = (
    "==", "!=", "<>", "<=", ">=", "&&", "||",
    "(", ")", "+", "-", "*", "/", "^", "<", ">", "!", "|", ":", ",", ".", "=",
)

OPENERS = {"{{": "}}", "{%": "%}"}

_WHITESPACE = re.compile(r"\s+")
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER = re.compile(r"\d+(?:\.\d+)?")
_INTEGER = re.compile(r"\d+")
_MARKUP_START = re.compile(r"\{[{%#]")

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"', "'": "'"}


@dataclass(frozen=True)
class Token:
    """Token with source position for diagnostics."""

    kind: TokenKind
    value: str
    line: int  # 1-based
    column: int  # 1-based

    def __repr__(self) -> str:
        return f"Token({self.kind.value}, {self.value!r}, {self.line}:{self.column})"


class Lexer:
    """Tokenizer for one template source."""

    def __init__(self, name: str, source: str):
        self.name = name
        self.source = source
        self._pos = 0
        self._line = 1
        self._column = 1
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Scan the whole source.

        Returns:
            List of tokens, ending with EOF

        Raises:
            StencilError: On unterminated tags, strings or comments and on
                characters that cannot start any token
        """
        source = self.source
        while self._pos < len(source):
            match = _MARKUP_START.search(source, self._pos)
            if match is None:
                self._emit(TokenKind.HTML, source[self._pos:])
                break
            if match.start() > self._pos:
                self._emit(TokenKind.HTML, source[self._pos:match.start()])

            opener = match.group(0)
            if opener == "{#":
                self._skip_comment()
            else:
                self._emit(TokenKind.SYMBOL, opener)
                self._lex_tag(OPENERS[opener])

        self._tokens.append(Token(TokenKind.EOF, "", self._line, self._column))
        return self._tokens

    def _emit(self, kind: TokenKind, text: str, value: str | None = None) -> None:
        self._tokens.append(
            Token(kind, text if value is None else value, self._line, self._column)
        )
        self._advance(len(text))

    def _advance(self, count: int) -> None:
        chunk = self.source[self._pos:self._pos + count]
        newlines = chunk.count("\n")
        if newlines:
            self._line += newlines
            self._column = len(chunk) - chunk.rfind("\n")
        else:
            self._column += len(chunk)
        self._pos += count

    def _error(self, code: str, **context: object) -> Exception:
        return create_error(
            code, template=self.name, line=self._line, column=self._column, **context
        )

    def _skip_comment(self) -> None:
        end = self.source.find("#}", self._pos + 2)
        if end < 0:
            raise self._error("UNCLOSED_TAG", expected="#}")
        self._advance(end + 2 - self._pos)

    def _lex_tag(self, closer: str) -> None:
        source = self.source
        while self._pos < len(source):
            if source.startswith(closer, self._pos):
                self._emit(TokenKind.SYMBOL, closer)
                return

            whitespace = _WHITESPACE.match(source, self._pos)
            if whitespace:
                self._advance(whitespace.end() - self._pos)
                continue

            char = source[self._pos]
            if char in "\"'":
                self._lex_string(char)
                continue

            # After a "." only an integer may follow: items.0.1 is two lookups
            after_dot = bool(self._tokens) and self._tokens[-1].value == "." and (
                self._tokens[-1].kind is TokenKind.SYMBOL
            )
            number = (_INTEGER if after_dot else _NUMBER).match(source, self._pos)
            if number:
                self._emit(TokenKind.NUMBER, number.group(0))
                continue

            identifier = _IDENTIFIER.match(source, self._pos)
            if identifier:
                word = identifier.group(0)
                kind = TokenKind.KEYWORD if word in KEYWORDS else TokenKind.IDENTIFIER
                self._emit(kind, word)
                continue

            symbol = next((s for s in SYMBOLS if source.startswith(s, self._pos)), None)
            if symbol is None:
                raise self._error(
                    "TEMPLATE_SYNTAX", detail=f"Unexpected character '{char}'"
                )
            self._emit(TokenKind.SYMBOL, symbol)

        raise self._error("UNCLOSED_TAG", expected=closer)

    def _lex_string(self, quote: str) -> None:
        source = self.source
        i = self._pos + 1
        chars: list[str] = []
        while i < len(source):
            char = source[i]
            if char == "\\" and i + 1 < len(source):
                chars.append(_ESCAPES.get(source[i + 1], "\\" + source[i + 1]))
                i += 2
                continue
            if char == quote:
                self._emit(TokenKind.STRING, source[self._pos:i + 1], "".join(chars))
                return
            chars.append(char)
            i += 1
        raise self._error("TEMPLATE_SYNTAX", detail="Unterminated string literal")


def tokenize(name: str, source: str) -> list[Token]:
    """Convenience wrapper around ``Lexer(name, source).tokenize()``."""
    return Lexer(name, source).tokenize()

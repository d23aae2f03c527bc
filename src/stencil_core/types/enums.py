"""Shared enumerations for Stencil."""

from enum import Enum


class LogLevel(str, Enum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output format."""

    COLORED = "colored"
    JSON = "json"


class TokenKind(str, Enum):
    """Lexical token kinds produced by the template lexer."""

    HTML = "HTML"
    SYMBOL = "SYMBOL"
    IDENTIFIER = "IDENTIFIER"
    KEYWORD = "KEYWORD"
    STRING = "STRING"
    NUMBER = "NUMBER"
    EOF = "EOF"


class ValueKind(str, Enum):
    """Variants of the runtime value union."""

    NIL = "nil"
    BOOL = "bool"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OPAQUE = "opaque"

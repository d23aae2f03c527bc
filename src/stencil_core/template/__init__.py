"""Stencil template language: lexer, parser, evaluator and engine."""

from pathlib import Path

from .context import ContextBuilder, ExecutionContext
from .document import Template
from .engine import TemplateEngine, get_default_engine, reset_default_engine
from .expression import float_pow
from .filters import FILTERS
from .lexer import Lexer, Token, tokenize
from .loader import FileSystemLoader, join_relative
from .nodes import Evaluator, Node, NodeWrapper, TagNode
from .parser import Parser
from .registry import (
    FilterFunction,
    FilterRegistry,
    Registries,
    TagParser,
    TagRegistry,
    default_registries,
    register_filter,
    register_tag,
)
from .value import Value


def compile(name: str, source: str) -> Template:  # noqa: A001
    """Compile template source with the default engine."""
    return get_default_engine().from_string(source, name)


def compile_file(path: str | Path) -> Template:
    """Load and compile a template file with the default engine."""
    return get_default_engine().from_file(path)


__all__ = [
    # Entry points
    "compile",
    "compile_file",
    "register_tag",
    "register_filter",
    # Engine
    "TemplateEngine",
    "Template",
    "get_default_engine",
    "reset_default_engine",
    # Runtime
    "Value",
    "ExecutionContext",
    "ContextBuilder",
    # Parsing
    "Lexer",
    "Token",
    "tokenize",
    "Parser",
    "Node",
    "NodeWrapper",
    "TagNode",
    "Evaluator",
    "float_pow",
    # Registries
    "Registries",
    "TagRegistry",
    "FilterRegistry",
    "TagParser",
    "FilterFunction",
    "default_registries",
    "FILTERS",
    # Loading
    "FileSystemLoader",
    "join_relative",
]

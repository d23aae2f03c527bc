"""Stencil Core - template language engine.

Compiles templates made of literal text, ``{{ expression }}`` output and
``{% tag %}`` constructs into document trees and renders them against a
variable context.

Usage:
    from stencil_core import compile
    compile("greeting", "Hello {{ name|capfirst }}!").render({"name": "ada"})
"""

from stencil_core.errors import StencilError
from stencil_core.template import (
    Template,
    TemplateEngine,
    Value,
    compile,
    compile_file,
    register_filter,
    register_tag,
)

__version__ = "0.1.0"
__all__ = [
    "__version__",
    "compile",
    "compile_file",
    "register_tag",
    "register_filter",
    "Template",
    "TemplateEngine",
    "Value",
    "StencilError",
]

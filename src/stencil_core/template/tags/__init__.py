"""Built-in tags."""

from typing import TYPE_CHECKING

from .block import BlockNode, parse_block
from .comment import CommentNode, parse_comment
from .conditional import IfNode, parse_if
from .extends import ExtendsNode, parse_extends
from .include import IncludeNode, parse_include
from .loop import ForNode, parse_for

if TYPE_CHECKING:
    from ..registry import TagParser, TagRegistry

BUILTIN_TAGS: dict[str, "TagParser"] = {
    "block": parse_block,
    "comment": parse_comment,
    "extends": parse_extends,
    "for": parse_for,
    "if": parse_if,
    "include": parse_include,
}


def register_builtin_tags(registry: "TagRegistry") -> None:
    """Register every built-in tag."""
    for name, parser in BUILTIN_TAGS.items():
        registry.register(name, parser)


__all__ = [
    "BUILTIN_TAGS",
    "register_builtin_tags",
    "BlockNode",
    "CommentNode",
    "ExtendsNode",
    "ForNode",
    "IfNode",
    "IncludeNode",
]

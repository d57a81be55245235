"""Tree building engine for lenient HTML parsing.

This module assembles token streams into a forest of document nodes using an
explicit stack of open elements.

Key Components:
    HTMLTreeBuilder: Tree construction from a token stream
    Element, Text, Comment: Node types of the resulting forest
    ParseResult: Forest with diagnostics and performance metrics
"""

from .builder import (
    Frame,
    HTMLTreeBuilder,
    ParseResult,
)
from .nodes import (
    Comment,
    Element,
    Node,
    Text,
    iter_elements,
)

__all__ = [
    "Comment",
    "Element",
    "Frame",
    "HTMLTreeBuilder",
    "Node",
    "ParseResult",
    "Text",
    "iter_elements",
]

"""Lenient HTML Parser.

A best-effort parser that turns HTML-like fragments into a simple forest of
element and text nodes. Malformed markup never raises: unclosed elements are
closed, stray end tags are dropped and comments are discarded.

Progressive API Disclosure:
- Level 1: Simple functions - parse(), parse_document()
- Level 2: Configured parser - LenientHTMLParser class
"""

__version__ = "0.1.0"
__author__ = "Lenient HTML Parser Team"

from .api import LenientHTMLParser, parse, parse_document
from .shared.config import ParserConfig, TokenizerConfig, TreeConfig
from .tree import Comment, Element, Node, ParseResult, Text

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_document",

    # Level 2: Configured parser
    "LenientHTMLParser",

    # Result objects and node types
    "Comment",
    "Element",
    "Node",
    "ParseResult",
    "Text",

    # Configuration classes
    "ParserConfig",
    "TokenizerConfig",
    "TreeConfig",
]

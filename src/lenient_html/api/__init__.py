"""Public parsing API for lenient HTML parsing."""

from .parser import LenientHTMLParser, parse, parse_document

__all__ = [
    "LenientHTMLParser",
    "parse",
    "parse_document",
]

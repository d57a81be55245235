"""Tokenization engine for lenient HTML parsing.

This module converts raw markup into a lazy stream of lexical tokens that the
tree builder pulls one at a time.

Key Components:
    HTMLTokenizer: Pull-based tokenizer over a markup string
    Token: Individual token with attributes, position and repairs
    TokenType: Enumeration of the supported token types
    TokenPosition: Line/column/offset of a token in the source
    TokenRepair: Record of a best-effort fix applied to malformed markup
"""

from .tokenizer import (
    HTMLTokenizer,
    Token,
    TokenizationResult,
    TokenPosition,
    TokenRepair,
    TokenType,
)

__all__ = [
    "HTMLTokenizer",
    "Token",
    "TokenPosition",
    "TokenRepair",
    "TokenType",
    "TokenizationResult",
]

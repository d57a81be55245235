"""Lenient HTML tokenization with a pull-based cursor.

This module turns raw markup into a lazy stream of tag, text and comment
tokens. Scanning is a single left-to-right pass with one character of
lookahead; malformed markup is never rejected, the tokenizer records what it
had to repair and keeps going.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional, Tuple

from lenient_html.shared.config import TokenizerConfig

COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"
QUOTE_CHARS = "\"'"

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Token types produced by the tokenizer."""

    START_TAG = auto()          # <name attr=value>
    END_TAG = auto()            # </name>
    SELF_CLOSING_TAG = auto()   # <name attr=value/>
    TEXT = auto()               # Character run between markup
    COMMENT = auto()            # <!-- ... -->, <!...> and <?...>


class _MarkupKind(Enum):
    COMMENT = auto()
    BOGUS_COMMENT = auto()
    START_TAG = auto()
    END_TAG = auto()


@dataclass
class TokenPosition:
    """Position of the first character of a token."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")

    def to_dict(self) -> Dict[str, int]:
        """Convert position to dictionary representation."""
        return {"line": self.line, "column": self.column, "offset": self.offset}


@dataclass
class TokenRepair:
    """A best-effort fix applied while scanning malformed markup."""

    repair_type: str
    description: str


@dataclass
class Token:
    """Single lexical token with its source position.

    ``value`` holds the tag name for tag tokens and the content for text and
    comment tokens. Only start and self-closing tags carry attributes.
    """

    type: TokenType
    value: str
    position: TokenPosition
    attributes: Dict[str, str] = field(default_factory=dict)
    repairs: List[TokenRepair] = field(default_factory=list)
    raw_content: str = ""

    @property
    def has_repairs(self) -> bool:
        """Check if this token has any repairs."""
        return len(self.repairs) > 0

    @property
    def is_tag(self) -> bool:
        """Check if this token is a start, end or self-closing tag."""
        return self.type in (
            TokenType.START_TAG,
            TokenType.END_TAG,
            TokenType.SELF_CLOSING_TAG,
        )


@dataclass
class TokenizationResult:
    """Tokens drained from a tokenizer together with scan statistics."""

    tokens: List[Token]
    character_count: int = 0
    processing_time: float = 0.0

    @property
    def token_count(self) -> int:
        """Get the total number of tokens."""
        return len(self.tokens)

    @property
    def total_repairs(self) -> int:
        """Get the number of repairs applied across all tokens."""
        return sum(len(token.repairs) for token in self.tokens)

    def count_by_type(self) -> Dict[str, int]:
        """Count tokens per token type name."""
        distribution: Dict[str, int] = {}
        for token in self.tokens:
            distribution[token.type.name] = distribution.get(token.type.name, 0) + 1
        return distribution


def _is_name_start_char(char: str) -> bool:
    return char.isalnum()


def _is_name_char(char: str) -> bool:
    return char.isalnum() or char == "-"


class HTMLTokenizer:
    """Pull-based tokenizer for HTML-like markup.

    Each call to :meth:`next_token` advances a cursor past exactly one token
    and returns it, or returns ``None`` once the input is exhausted. The
    tokenizer is also an iterator over the same stream; the stream cannot be
    restarted.
    """

    def __init__(
        self,
        source: str,
        correlation_id: Optional[str] = None,
        config: Optional[TokenizerConfig] = None
    ) -> None:
        """Initialize the tokenizer.

        Args:
            source: Markup to scan
            correlation_id: Optional correlation ID for tracking requests
            config: Tokenizer configuration, defaults apply when omitted
        """
        self.source = source
        self.correlation_id = correlation_id
        self.config = config or TokenizerConfig()

        self._length = len(source)
        self._pos = 0
        # Line bookkeeping for the last offset a position was computed for
        self._mark = 0
        self._line = 1
        self._line_start = 0
        self._tokens_emitted = 0
        self._finished = False

        logger.debug(
            "Tokenizer created",
            extra={
                "component": "html_tokenizer",
                "correlation_id": self.correlation_id,
                "char_count": self._length,
            }
        )

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        token = self.next_token()
        if token is None:
            raise StopIteration
        return token

    @property
    def offset(self) -> int:
        """Offset of the next character to be scanned."""
        return self._pos

    @property
    def tokens_emitted(self) -> int:
        """Number of tokens produced so far."""
        return self._tokens_emitted

    def next_token(self) -> Optional[Token]:
        """Scan and return the next token, or ``None`` at end of input."""
        if self._pos >= self._length:
            if not self._finished:
                self._finished = True
                logger.debug(
                    "Tokenization completed",
                    extra={
                        "component": "html_tokenizer",
                        "correlation_id": self.correlation_id,
                        "token_count": self._tokens_emitted,
                    }
                )
            return None

        start = self._pos
        position = self._position_at(start)
        kind = self._markup_kind(start) if self.source[start] == "<" else None

        if kind is _MarkupKind.COMMENT:
            token = self._scan_comment(start, position)
        elif kind is _MarkupKind.BOGUS_COMMENT:
            token = self._scan_bogus_comment(start, position)
        elif kind is not None:
            token = self._scan_tag(start, position, kind is _MarkupKind.END_TAG)
        else:
            token = self._scan_text(start, position)

        token.raw_content = self.source[start:self._pos]
        self._tokens_emitted += 1

        for repair in token.repairs:
            logger.debug(
                "Token repaired",
                extra={
                    "component": "html_tokenizer",
                    "correlation_id": self.correlation_id,
                    "repair_type": repair.repair_type,
                    "offset": position.offset,
                }
            )

        return token

    def tokenize(self) -> TokenizationResult:
        """Drain the remaining stream into a :class:`TokenizationResult`."""
        start_time = time.time()
        tokens = list(self)
        return TokenizationResult(
            tokens=tokens,
            character_count=self._length,
            processing_time=time.time() - start_time,
        )

    def _position_at(self, offset: int) -> TokenPosition:
        newlines = self.source.count("\n", self._mark, offset)
        if newlines:
            self._line += newlines
            self._line_start = self.source.rfind("\n", self._mark, offset) + 1
        self._mark = offset
        return TokenPosition(self._line, offset - self._line_start + 1, offset)

    def _char_at(self, index: int) -> str:
        return self.source[index] if index < self._length else ""

    def _markup_kind(self, index: int) -> Optional[_MarkupKind]:
        """Classify the markup starting with the ``<`` at ``index``.

        Returns ``None`` when the ``<`` starts no markup and is literal text.
        """
        if self.source.startswith(COMMENT_OPEN, index):
            return _MarkupKind.COMMENT

        next_char = self._char_at(index + 1)
        if next_char in ("!", "?") and self.config.recognize_bogus_comments:
            return _MarkupKind.BOGUS_COMMENT
        if next_char and _is_name_start_char(next_char):
            return _MarkupKind.START_TAG
        if next_char == "/":
            after_slash = self._char_at(index + 2)
            if after_slash and _is_name_start_char(after_slash):
                return _MarkupKind.END_TAG
        return None

    def _scan_comment(self, start: int, position: TokenPosition) -> Token:
        repairs = []
        content_start = start + len(COMMENT_OPEN)
        # Searching from just after "<!" lets "<!-->" close immediately
        end = self.source.find(COMMENT_CLOSE, start + 2)
        if end == -1:
            content = self.source[content_start:]
            self._pos = self._length
            repairs.append(TokenRepair(
                "unterminated_comment",
                "Comment not closed before end of input",
            ))
        else:
            content = self.source[content_start:end] if end > content_start else ""
            self._pos = end + len(COMMENT_CLOSE)
        return Token(TokenType.COMMENT, content, position, repairs=repairs)

    def _scan_bogus_comment(self, start: int, position: TokenPosition) -> Token:
        repairs = []
        end = self.source.find(">", start + 2)
        if end == -1:
            content = self.source[start + 2:]
            self._pos = self._length
            repairs.append(TokenRepair(
                "unterminated_declaration",
                "Declaration not closed before end of input",
            ))
        else:
            content = self.source[start + 2:end]
            self._pos = end + 1
        return Token(TokenType.COMMENT, content, position, repairs=repairs)

    def _scan_text(self, start: int, position: TokenPosition) -> Token:
        # A '<' that starts no markup stays part of the surrounding text run
        end = self._length
        search_from = start + 1
        while search_from < self._length:
            candidate = self.source.find("<", search_from)
            if candidate == -1:
                break
            if self._markup_kind(candidate) is not None:
                end = candidate
                break
            search_from = candidate + 1
        self._pos = end
        return Token(TokenType.TEXT, self.source[start:end], position)

    def _scan_tag(self, start: int, position: TokenPosition, is_end_tag: bool) -> Token:
        source = self.source
        length = self._length
        i = start + (2 if is_end_tag else 1)

        name_start = i
        while i < length and _is_name_char(source[i]):
            i += 1
        name = source[name_start:i]

        attributes: Dict[str, str] = {}
        repairs: List[TokenRepair] = []
        self_closing = False
        closed = False

        while i < length:
            char = source[i]
            if char.isspace():
                i += 1
            elif char == ">":
                i += 1
                closed = True
                break
            elif char == "/":
                if self._char_at(i + 1) == ">":
                    self_closing = True
                    i += 2
                    closed = True
                    break
                repairs.append(TokenRepair(
                    "stray_slash", f"Ignored '/' inside <{name}>"
                ))
                i += 1
            elif char == "=":
                _, i, value_repair = self._scan_attribute_value(i + 1)
                repairs.append(TokenRepair(
                    "nameless_attribute", f"Dropped attribute value without a name in <{name}>"
                ))
                if value_repair:
                    repairs.append(value_repair)
            else:
                attr_start = i
                while i < length and source[i] not in "=/>" and not source[i].isspace():
                    i += 1
                attr_name = source[attr_start:i].lower()

                j = i
                while j < length and source[j].isspace():
                    j += 1
                value = ""
                if j < length and source[j] == "=":
                    value, i, value_repair = self._scan_attribute_value(j + 1)
                    if value_repair:
                        repairs.append(value_repair)
                attributes[attr_name] = value

        if not closed:
            repairs.append(TokenRepair(
                "unterminated_tag", f"Tag <{name}> not closed before end of input"
            ))
        self._pos = i

        if is_end_tag:
            return Token(TokenType.END_TAG, name, position, repairs=repairs)
        token_type = TokenType.SELF_CLOSING_TAG if self_closing else TokenType.START_TAG
        return Token(token_type, name, position, attributes=attributes, repairs=repairs)

    def _scan_attribute_value(self, index: int) -> Tuple[str, int, Optional[TokenRepair]]:
        """Scan an attribute value starting after its ``=``.

        Returns:
            The unquoted value, the offset just past it, and a repair when the
            value was cut short by the end of input
        """
        source = self.source
        length = self._length
        i = index
        while i < length and source[i].isspace():
            i += 1
        if i >= length:
            return "", i, None

        quote = source[i]
        if quote in QUOTE_CHARS:
            end = source.find(quote, i + 1)
            if end == -1:
                return source[i + 1:], length, TokenRepair(
                    "unterminated_quote",
                    "Quoted attribute value not closed before end of input",
                )
            return source[i + 1:end], end + 1, None

        value_start = i
        while i < length and source[i] != ">" and not source[i].isspace():
            if source[i] == "/" and self._char_at(i + 1) == ">":
                break
            i += 1
        return source[value_start:i], i, None

"""Tree building for lenient HTML parsing.

The builder pulls tokens one at a time and assembles them into a forest of
:class:`~lenient_html.tree.nodes.Node` values with an explicit stack of open
elements. An element is only materialized when it closes: explicitly by a
matching end tag, implicitly when an end tag further down the stack matches,
or at end of input. Unmatched end tags and comments are dropped. No token
sequence makes the builder fail.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional

from lenient_html.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    ParserConfig,
    PerformanceMetrics,
    get_logger,
)
from lenient_html.tokenization import Token, TokenPosition, TokenType
from lenient_html.tree.nodes import Element, Node, Text, iter_elements

TOKENIZER_COMPONENT = "html_tokenizer"
STRUCTURE_COMPONENT = "structure_repair"


@dataclass
class Frame:
    """An element whose start tag was seen but which has not closed yet."""

    tag_name: str
    match_key: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List[Node] = field(default_factory=list)
    position: Optional[TokenPosition] = None

    def close(self) -> Element:
        """Turn the frame into an element owning the accumulated children."""
        return Element(self.tag_name, self.attributes, self.children)


@dataclass
class ParseResult:
    """Parsed forest together with diagnostics and performance metrics.

    Diagnostics describe leniency decisions made while parsing; ``success``
    is only false when tree building hit an internal failure, in which case
    ``nodes`` holds whatever was built up to that point.
    """

    nodes: List[Node] = field(default_factory=list)
    success: bool = True
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    @property
    def element_count(self) -> int:
        """Get total number of elements in the forest."""
        return sum(1 for _ in self.iter_elements())

    @property
    def repair_count(self) -> int:
        """Get the number of leniency repairs applied while parsing."""
        return self.performance.recovery_operations

    @property
    def has_repairs(self) -> bool:
        """Check if any leniency repair was applied."""
        return self.repair_count > 0

    @property
    def processing_time_ms(self) -> float:
        """Get processing time in milliseconds."""
        return self.performance.processing_time_ms

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id,
        ))

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def iter_elements(self) -> Iterator[Element]:
        """Iterate over all elements in document order."""
        return iter_elements(self.nodes)

    def find(self, tag_name: str) -> Optional[Element]:
        """Find first element in the forest with matching tag name."""
        return next(
            (element for element in self.iter_elements() if element.matches(tag_name)),
            None,
        )

    def find_all(self, tag_name: str) -> List[Element]:
        """Find all elements in the forest with matching tag name."""
        return [element for element in self.iter_elements() if element.matches(tag_name)]

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the parse result."""
        by_severity: Dict[str, int] = {}
        for diagnostic in self.diagnostics:
            name = diagnostic.severity.name
            by_severity[name] = by_severity.get(name, 0) + 1

        return {
            "success": self.success,
            "top_level_nodes": len(self.nodes),
            "element_count": self.element_count,
            "repair_count": self.repair_count,
            "has_errors": self.has_errors(),
            "diagnostics_by_severity": by_severity,
            "processing_time_ms": self.performance.processing_time_ms,
            "characters_processed": self.performance.characters_processed,
            "tokens_generated": self.performance.tokens_generated,
            "correlation_id": self.correlation_id,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary representation."""
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
            "summary": self.summary(),
        }


class HTMLTreeBuilder:
    """Assembles a token stream into a node forest.

    A builder instance may be reused; every :meth:`build` call starts from an
    empty stack and output.
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Parser configuration, defaults apply when omitted
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig()
        if not self.config.global_.enable_correlation_tracking:
            correlation_id = None
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "html_tree_builder")

        self._stack: List[Frame] = []
        self._output: List[Node] = []
        self._result = ParseResult(correlation_id=correlation_id)

    def build(self, tokens: Iterable[Token]) -> ParseResult:
        """Build the node forest from a token stream.

        Args:
            tokens: Tokens to assemble; an :class:`HTMLTokenizer` is consumed
                lazily, one token per step

        Returns:
            ParseResult holding the forest, diagnostics and metrics
        """
        start_time = time.time()
        self._reset_state()
        result = self._result

        try:
            for token in tokens:
                result.performance.tokens_generated += 1
                self._process_token(token)
            self._close_unclosed_elements()
        except Exception as e:
            # Keep whatever was built; the caller still gets a forest
            self.logger.exception(
                "Tree building failed",
                extra={"tokens_processed": result.performance.tokens_generated}
            )
            result.success = False
            result.add_diagnostic(
                DiagnosticSeverity.CRITICAL,
                f"Tree building failed: {e}",
                "html_tree_builder",
                details={"exception_type": type(e).__name__},
            )
            self._pop_frames_to(0)

        result.nodes = self._output
        result.performance.processing_time_ms = (time.time() - start_time) * 1000

        self.logger.debug(
            "Tree building completed",
            extra={
                "top_level_nodes": len(result.nodes),
                "elements_created": result.performance.elements_created,
                "repair_count": result.repair_count,
            }
        )
        return result

    def _reset_state(self) -> None:
        self._stack = []
        self._output = []
        self._result = ParseResult(correlation_id=self.correlation_id)

    def _process_token(self, token: Token) -> None:
        if token.repairs:
            self._record_token_repairs(token)

        if token.type is TokenType.START_TAG:
            self._stack.append(Frame(
                tag_name=self._stored_tag_name(token.value),
                match_key=token.value.lower(),
                attributes=dict(token.attributes),
                position=token.position,
            ))
        elif token.type is TokenType.SELF_CLOSING_TAG:
            self._append(Element(
                self._stored_tag_name(token.value), dict(token.attributes)
            ))
            self._result.performance.elements_created += 1
        elif token.type is TokenType.TEXT:
            if self.config.tree.drop_whitespace_text and not token.value.strip():
                return
            self._append(Text(token.value))
        elif token.type is TokenType.END_TAG:
            self._process_end_tag(token)
        # Comments never reach the forest

    def _stored_tag_name(self, name: str) -> str:
        return name if self.config.tree.preserve_tag_case else name.lower()

    def _append(self, node: Node) -> None:
        if self._stack:
            self._stack[-1].children.append(node)
        else:
            self._output.append(node)

    def _process_end_tag(self, token: Token) -> None:
        match_key = token.value.lower()
        match_index = -1
        for index in range(len(self._stack) - 1, -1, -1):
            if self._stack[index].match_key == match_key:
                match_index = index
                break

        if match_index < 0:
            self._result.performance.recovery_operations += 1
            self._record(
                DiagnosticSeverity.WARNING,
                f"Unmatched end tag </{token.value}> discarded",
                position=token.position.to_dict(),
            )
            return

        implicitly_closed = self._stack[match_index + 1:]
        if implicitly_closed:
            self._result.performance.recovery_operations += 1
            self._record(
                DiagnosticSeverity.INFO,
                f"Implicitly closed {len(implicitly_closed)} element(s) "
                f"at </{token.value}>",
                position=token.position.to_dict(),
                details={"closed_tags": [frame.tag_name for frame in reversed(implicitly_closed)]},
            )
        self._pop_frames_to(match_index)

    def _close_unclosed_elements(self) -> None:
        if not self._stack:
            return
        self._result.performance.recovery_operations += 1
        self._record(
            DiagnosticSeverity.INFO,
            f"Closed {len(self._stack)} unclosed element(s) at end of input",
            details={"closed_tags": [frame.tag_name for frame in reversed(self._stack)]},
        )
        self._pop_frames_to(0)

    def _pop_frames_to(self, depth: int) -> None:
        """Close frames from the top down until the stack has ``depth`` frames."""
        while len(self._stack) > depth:
            frame = self._stack.pop()
            self._append(frame.close())
            self._result.performance.elements_created += 1

    def _record_token_repairs(self, token: Token) -> None:
        self._result.performance.recovery_operations += len(token.repairs)
        for repair in token.repairs:
            self._record(
                DiagnosticSeverity.WARNING,
                repair.description,
                component=TOKENIZER_COMPONENT,
                position=token.position.to_dict(),
                details={"repair_type": repair.repair_type},
            )

    def _record(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str = STRUCTURE_COMPONENT,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        if not self.config.global_.enable_diagnostics:
            return
        self._result.add_diagnostic(severity, message, component, position, details)

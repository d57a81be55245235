"""Parser API with progressive disclosure for lenient HTML parsing.

Level 1 is the pair of module-level functions :func:`parse` (forest only)
and :func:`parse_document` (forest plus diagnostics and metrics). Level 2 is
:class:`LenientHTMLParser`, which binds a configuration and correlation ID
and keeps running statistics over the documents it parsed.
"""

import logging
from typing import Any, Dict, List, Optional

from lenient_html.shared import (
    ParserConfig,
    get_logger,
    set_package_log_level,
)
from lenient_html.tokenization import HTMLTokenizer
from lenient_html.tree import HTMLTreeBuilder, Node, ParseResult

PREVIEW_LENGTH = 100  # Max length for content preview in logs


def _ensure_text(html: Any) -> None:
    if not isinstance(html, str):
        raise TypeError(
            f"Markup must be a str, got {type(html).__name__}"
        )


def parse(html: str) -> List[Node]:
    """Parse markup into a forest of nodes.

    Parsing never fails on malformed markup: unclosed elements are closed,
    stray end tags are dropped and comments are discarded.

    Args:
        html: Markup to parse

    Returns:
        Top-level nodes in document order

    Examples:
        >>> nodes = parse('<a><b>x</a>')
        >>> nodes[0].tag_name, nodes[0].children[0].tag_name
        ('a', 'b')
        >>> parse('x</b>y')
        [Text(content='x'), Text(content='y')]
    """
    return parse_document(html).nodes


def parse_document(
    html: str,
    correlation_id: Optional[str] = None,
    config: Optional[ParserConfig] = None
) -> ParseResult:
    """Parse markup and return the forest with diagnostics and metrics.

    Args:
        html: Markup to parse
        correlation_id: Optional correlation ID for request tracking
        config: Parser configuration, defaults apply when omitted

    Returns:
        ParseResult containing the forest, diagnostics and metrics

    Examples:
        >>> result = parse_document('<p>unclosed')
        >>> result.find('p').text_content
        'unclosed'
        >>> result.repair_count
        1
    """
    _ensure_text(html)
    config = config or ParserConfig()
    if not config.global_.enable_correlation_tracking:
        correlation_id = None

    logger = get_logger(__name__, correlation_id, "parse_document")
    if logger.is_enabled_for(logging.DEBUG):
        logger.debug(
            "Starting parse",
            extra={
                "content_length": len(html),
                "preview": (
                    html[:PREVIEW_LENGTH] + "..."
                    if len(html) > PREVIEW_LENGTH else html
                ),
            }
        )

    tokenizer = HTMLTokenizer(html, correlation_id, config.tokenizer)
    builder = HTMLTreeBuilder(config, correlation_id)
    result = builder.build(tokenizer)
    result.performance.characters_processed = len(html)
    return result


class LenientHTMLParser:
    """Configured parser for repeated use.

    Examples:
        >>> parser = LenientHTMLParser(ParserConfig.web_scraping())
        >>> parser.parse('<ul>\\n  <li>one</li>\\n</ul>')[0].children
        [Element(tag_name='li', attributes={}, children=[Text(content='one')])]
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the parser.

        Args:
            config: Parser configuration, defaults apply when omitted
            correlation_id: Optional correlation ID attached to every parse
        """
        if config is not None and not isinstance(config, ParserConfig):
            raise TypeError(
                f"config must be a ParserConfig, got {type(config).__name__}"
            )
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "lenient_html_parser")

        if self.config.global_.logging_level is not None:
            set_package_log_level(self.config.global_.logging_level)

        self._documents_parsed = 0
        self._total_processing_time_ms = 0.0
        self._total_repairs = 0

    def parse(self, html: str) -> List[Node]:
        """Parse markup into a forest of nodes using this parser's configuration."""
        return self.parse_document(html).nodes

    def parse_document(self, html: str) -> ParseResult:
        """Parse markup and return the full :class:`ParseResult`."""
        result = parse_document(html, self.correlation_id, self.config)

        self._documents_parsed += 1
        self._total_processing_time_ms += result.performance.processing_time_ms
        self._total_repairs += result.repair_count

        if not result.success:
            self.logger.warning(
                "Parse returned a partial result",
                extra={"diagnostic_count": len(result.diagnostics)}
            )
        return result

    @property
    def statistics(self) -> Dict[str, Any]:
        """Running statistics over every document parsed by this instance."""
        average = (
            self._total_processing_time_ms / self._documents_parsed
            if self._documents_parsed else 0.0
        )
        return {
            "documents_parsed": self._documents_parsed,
            "total_processing_time_ms": self._total_processing_time_ms,
            "average_processing_time_ms": average,
            "total_repairs": self._total_repairs,
            "config_name": self.config.name,
        }

    def reset_statistics(self) -> None:
        """Reset the running statistics."""
        self._documents_parsed = 0
        self._total_processing_time_ms = 0.0
        self._total_repairs = 0

"""Tests for the parser API with progressive disclosure.

Tests the module-level parse functions and LenientHTMLParser class against
the documented leniency guarantees.
"""

import logging
import threading

import pytest

from lenient_html.api.parser import LenientHTMLParser, parse, parse_document
from lenient_html.shared.config import ParserConfig
from lenient_html.tree import Comment, Element, ParseResult, Text, iter_elements


class TestParse:
    """Test Level 1: the parse function."""

    def test_balanced_nesting(self):
        assert parse("<a><b>x</b></a>") == [
            Element("a", {}, [Element("b", {}, [Text("x")])])
        ]

    def test_self_closing_sibling(self):
        nodes = parse('<img src="x.png"/><span>after</span>')
        assert len(nodes) == 2
        img, span = nodes
        assert img.tag_name == "img"
        assert img.get_attribute("src") == "x.png"
        assert img.children == []
        assert span.tag_name == "span"

    def test_quoted_and_unquoted_attributes(self):
        assert parse("<a href=foo>")[0].get_attribute("href") == "foo"
        assert parse('<a href="foo">')[0].get_attribute("href") == "foo"

    def test_implicit_close(self):
        assert parse("<a><b>x</a>") == [
            Element("a", {}, [Element("b", {}, [Text("x")])])
        ]

    def test_comments_dropped(self):
        nodes = parse("<a><!-- note -->x</a>")
        assert nodes == [Element("a", {}, [Text("x")])]
        assert not any(isinstance(node, Comment) for node in _walk(nodes))

    def test_unclosed_at_end_of_input(self):
        assert parse("<a><b>x") == [
            Element("a", {}, [Element("b", {}, [Text("x")])])
        ]

    def test_unmatched_end_tag_discarded(self):
        assert parse("x</b>y") == [Text("x"), Text("y")]

    def test_empty_input(self):
        assert parse("") == []

    def test_text_only(self):
        assert parse("just text") == [Text("just text")]

    def test_returns_plain_list(self):
        assert isinstance(parse("<a>"), list)

    @pytest.mark.parametrize("markup", [
        "<a><b>x</b></a>",
        "<<<>>>",
        "<a href='x' <b>c</d>",
        "</x></y><z",
        "<!-- unterminated",
        '<p class="a"b=c d>text<br/>more</P>',
        "<div>\n  <ul><li>1<li>2</ul>\n</div>",
    ])
    def test_deterministic(self, markup):
        assert parse(markup) == parse(markup)

    def test_deeply_nested_result_is_usable(self):
        markup = "<d>" * 3000 + "x"
        nodes = parse(markup)
        assert nodes == parse(markup)
        assert nodes != parse("<d>" * 3000 + "y")

        text = repr(nodes)
        assert text.count("Element(tag_name='d'") == 3000

        data = parse_document(markup).to_dict()["nodes"][0]
        for _ in range(2999):
            assert (data["type"], data["tag_name"], data["attributes"]) == ("element", "d", {})
            (data,) = data["children"]
        assert data == {
            "type": "element",
            "tag_name": "d",
            "attributes": {},
            "children": [{"type": "text", "content": "x"}],
        }

    @pytest.mark.parametrize("markup", [
        "<",
        "</",
        "<a",
        "<a href=",
        "<a href='",
        "<!",
        "<!-",
        "<?",
        "a</>b",
        "<a/ /b>",
        "<=>",
        "<a =>",
        "\x00<a\x00>",
    ])
    def test_never_fails_on_fragments(self, markup):
        result = parse_document(markup)
        assert result.success is True
        assert isinstance(result.nodes, list)

    def test_rejects_non_string_input(self):
        with pytest.raises(TypeError, match="Markup must be a str, got bytes"):
            parse(b"<a>")


class TestParseDocument:
    """Test Level 1: parse_document with diagnostics."""

    def test_returns_parse_result(self):
        result = parse_document("<p>unclosed")
        assert isinstance(result, ParseResult)
        assert result.find("p").text_content == "unclosed"
        assert result.repair_count == 1
        assert result.performance.characters_processed == 11
        assert result.performance.tokens_generated == 2
        assert result.processing_time_ms >= 0

    def test_correlation_id(self):
        result = parse_document("</x>", correlation_id="abc")
        assert result.correlation_id == "abc"
        assert result.diagnostics[0].correlation_id == "abc"

    def test_config_is_applied(self):
        result = parse_document("<A>\n</A>", config=ParserConfig.web_scraping())
        assert result.nodes == [Element("a")]

    def test_bogus_comment_config(self):
        config = ParserConfig().override(tokenizer__recognize_bogus_comments=False)
        assert parse_document("<!x><p>", config=config).nodes == [
            Text("<!x>"),
            Element("p"),
        ]

    def test_start_logged_with_preview(self, caplog):
        caplog.set_level(logging.DEBUG, logger="lenient_html")
        parse_document("<a>" * 60, correlation_id="log-1")
        starts = [r for r in caplog.records if r.getMessage() == "Starting parse"]
        assert len(starts) == 1
        assert starts[0].correlation_id == "log-1"
        assert starts[0].component == "parse_document"
        assert starts[0].preview.endswith("...")

    def test_start_record_skipped_above_debug(self, caplog):
        caplog.set_level(logging.INFO, logger="lenient_html")
        parse_document("<a>" * 60)
        assert not [r for r in caplog.records if r.getMessage() == "Starting parse"]


class TestLenientHTMLParser:
    """Test Level 2: configured parser class."""

    def test_default_configuration(self):
        parser = LenientHTMLParser()
        assert parser.config == ParserConfig()
        assert parser.parse("<B>x</b>") == [Element("b", {}, [Text("x")])]

    def test_custom_configuration(self):
        parser = LenientHTMLParser(ParserConfig.source_faithful())
        assert parser.parse("<B>x</b>") == [Element("B", {}, [Text("x")])]

    def test_rejects_invalid_config(self):
        with pytest.raises(TypeError, match="config must be a ParserConfig"):
            LenientHTMLParser(config={"tree": {}})

    def test_statistics(self):
        parser = LenientHTMLParser(ParserConfig.web_scraping())
        parser.parse("<a>")
        parser.parse_document("<b></b>")

        stats = parser.statistics
        assert stats["documents_parsed"] == 2
        assert stats["total_repairs"] == 1
        assert stats["config_name"] == "web_scraping"
        assert stats["average_processing_time_ms"] >= 0

        parser.reset_statistics()
        assert parser.statistics["documents_parsed"] == 0
        assert parser.statistics["average_processing_time_ms"] == 0.0

    def test_correlation_id_bound_to_parser(self):
        parser = LenientHTMLParser(correlation_id="bound")
        assert parser.parse_document("<a>").correlation_id == "bound"

    def test_logging_level_applied_to_package_logger(self):
        package_logger = logging.getLogger("lenient_html")
        previous = package_logger.level
        try:
            LenientHTMLParser(ParserConfig().override(global___logging_level="ERROR"))
            assert package_logger.level == logging.ERROR
        finally:
            package_logger.setLevel(previous)

    def test_logging_level_untouched_by_default(self):
        package_logger = logging.getLogger("lenient_html")
        previous = package_logger.level
        LenientHTMLParser()
        assert package_logger.level == previous


class TestConcurrency:
    """Independent parses on separate threads need no synchronization."""

    def test_parallel_parses_are_independent(self):
        inputs = [f"<div id=d{i}>" + "<p>x" * i for i in range(1, 21)]
        expected = {markup: parse(markup) for markup in inputs}
        failures = []

        def worker(markup):
            for _ in range(20):
                if parse(markup) != expected[markup]:
                    failures.append(markup)

        threads = [threading.Thread(target=worker, args=(m,)) for m in inputs]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert failures == []
        assert sum(1 for _ in iter_elements(expected[inputs[2]])) == 4


def _walk(nodes):
    stack = list(nodes)
    while stack:
        node = stack.pop()
        yield node
        if isinstance(node, Element):
            stack.extend(node.children)

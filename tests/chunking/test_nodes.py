"""Tests for the Markdown structure tree and its source spans."""

import pytest

from mdchunker.chunking.nodes import (
    CodeBlock,
    Document,
    Heading,
    Opaque,
    Paragraph,
    Text,
    parse_markdown,
)
from mdchunker.core.errors import OffsetReconciliationError

pytestmark = pytest.mark.unit


def texts(source, node):
    """Source slices of every Text node under ``node`` in order."""
    found = []
    for child in getattr(node, "children", []):
        if isinstance(child, Text):
            found.append(source[child.start : child.end])
        else:
            found.extend(texts(source, child))
    return found


class TestHeadings:
    """Test heading levels and plain heading text."""

    def test_heading_and_paragraph(self):
        source = "# Title\n\nPara text.\n"
        doc = parse_markdown(source)

        assert isinstance(doc, Document)
        heading, para = doc.children
        assert isinstance(heading, Heading)
        assert heading.level == 1
        assert heading.text == "Title"
        assert heading.children == [Text(2, 7)]
        assert isinstance(para, Paragraph)
        assert para.children == [Text(9, 19)]

    @pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
    def test_levels(self, level):
        doc = parse_markdown("#" * level + " H\n")
        assert doc.children[0].level == level

    def test_inline_markup_flattened(self):
        doc = parse_markdown("## Use `foo` *now*\n")
        assert doc.children[0].text == "Use foo now"

    def test_setext_heading(self):
        doc = parse_markdown("Title\n=====\n")
        heading = doc.children[0]
        assert heading.level == 1
        assert heading.text == "Title"


class TestTextSpans:
    """Test that text nodes point at their exact source characters."""

    def test_emphasis_splits_text(self):
        source = "Hello *world* today."
        assert texts(source, parse_markdown(source)) == ["Hello ", "world", " today."]

    def test_soft_break_splits_text(self):
        source = "line one\nline two\n"
        assert texts(source, parse_markdown(source)) == ["line one", "line two"]

    def test_entity_kept_raw(self):
        source = "AT&amp;T rocks."
        assert texts(source, parse_markdown(source)) == ["AT&amp;T rocks."]

    def test_escape_kept_raw(self):
        source = r"a \*literal\* star"
        assert texts(source, parse_markdown(source)) == [r"a \*literal\* star"]

    def test_code_span_and_image_alt_are_text(self):
        source = "Call `run()` then ![a diagram](d.png) here."
        assert texts(source, parse_markdown(source)) == [
            "Call ",
            "run()",
            " then ",
            "a diagram",
            " here.",
        ]

    def test_link_text_only(self):
        source = "See [the docs](https://example.com) now."
        assert texts(source, parse_markdown(source)) == ["See ", "the docs", " now."]

    def test_multibyte_positions_are_characters(self):
        source = "# 見出し\n\n本文です。"
        doc = parse_markdown(source)
        para = doc.children[1]
        (text,) = para.children
        assert source[text.start : text.end] == "本文です。"
        assert text.start == 7


class TestCodeBlocks:
    """Test code block content ranges."""

    def test_fenced_block(self):
        source = "Intro\n\n```go\nfunc main() {}\n```\n"
        block = parse_markdown(source).children[1]

        assert isinstance(block, CodeBlock)
        assert block.info == "go"
        assert block.body == "func main() {}\n"
        assert block.fenced
        assert (block.content_start, block.content_end) == (13, 28)
        assert source[block.content_start : block.content_end] == block.body

    def test_tilde_fence(self):
        source = "~~~\nx = 1\n~~~\n"
        block = parse_markdown(source).children[0]
        assert block.body == "x = 1\n"
        assert (block.content_start, block.content_end) == (4, 10)

    def test_empty_fence(self):
        block = parse_markdown("```\n```\n").children[0]
        assert block.body == ""
        assert block.content_start == block.content_end == 4

    def test_unclosed_fence_runs_to_end(self):
        source = "```\nabc\n"
        block = parse_markdown(source).children[0]
        assert block.body == "abc\n"
        assert (block.content_start, block.content_end) == (4, len(source))

    def test_indented_block(self):
        source = "    code line\n"
        block = parse_markdown(source).children[0]
        assert not block.fenced
        assert block.info == ""
        assert block.body == "code line\n"
        assert (block.content_start, block.content_end) == (0, len(source))

    def test_fence_in_blockquote_uses_parsed_body(self):
        source = "> ```\n> inner\n> ```\n"
        quote = parse_markdown(source).children[0]
        block = quote.children[0]
        assert isinstance(block, CodeBlock)
        assert block.body == "inner\n"

    def test_fence_in_blockquote_content_range(self):
        source = "> ```\n> inner\n> ```\n"
        block = parse_markdown(source).children[0].children[0]
        assert source[block.content_start : block.content_end] == "> inner\n"

    def test_carriage_return_lines(self):
        source = "```\rcode\r```\r\rafter\r"
        doc = parse_markdown(source)
        block = doc.children[0]
        assert (block.content_start, block.content_end) == (4, 9)
        assert texts(source, doc) == ["after"]


class TestOpaqueNodes:
    """Test pass-through containers and leaf blocks."""

    def test_bullet_list(self):
        source = "- a\n- b\n"
        (lst,) = parse_markdown(source).children
        assert isinstance(lst, Opaque)
        assert lst.kind == "bullet_list"
        assert [item.kind for item in lst.children] == ["list_item", "list_item"]
        assert texts(source, lst) == ["a", "b"]

    def test_blockquote(self):
        source = "> quote\n"
        (quote,) = parse_markdown(source).children
        assert quote.kind == "blockquote"
        assert texts(source, quote) == ["quote"]

    def test_rule_and_html(self):
        doc = parse_markdown("***\n\n<div>\nhi\n</div>\n")
        assert [node.kind for node in doc.children] == ["hr", "html_block"]


class TestOffsetReconciliation:
    """Test handling of text the parser rewrote."""

    def test_strict_raises(self):
        with pytest.raises(OffsetReconciliationError) as exc_info:
            parse_markdown("`a\nb` end.", strict_offsets=True)
        assert exc_info.value.fragment == "a b"

    def test_lenient_approximates(self):
        source = "`a\nb` end."
        found = texts(source, parse_markdown(source))
        assert found[-1] == " end."
        assert len(found) == 2

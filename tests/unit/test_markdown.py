"""Unit tests for the markdown adapter and frontmatter handling."""

from __future__ import annotations

import logging

import pytest

from itmd.markdown import ItineraryFrontmatter, load_document, normalize_frontmatter, parse_markdown
from itmd.models.blocks import (
    Blockquote,
    Code,
    Heading,
    Html,
    ListNode,
    Paragraph,
    ThematicBreak,
)
from itmd.models.inline import Break, Delete, Emphasis, Image, InlineCode, Link, Strong, Text

# ---------------------------------------------------------------------------
# Block structure
# ---------------------------------------------------------------------------


class TestBlocks:
    """Block token conversion."""

    def test_heading_and_paragraph(self) -> None:
        """Headings keep their depth; paragraphs their inline content."""
        root = parse_markdown("# Title\n\nHello *world*\n")

        heading, paragraph = root.children
        assert heading == Heading(depth=1, children=[Text(value="Title")], position=heading.position)
        assert isinstance(paragraph, Paragraph)
        assert paragraph.children == [Text(value="Hello "), Emphasis(children=[Text(value="world")])]

    def test_lists(self) -> None:
        """Bullet and ordered lists, with the ordered start number."""
        root = parse_markdown("- a\n- b\n\n3. x\n4. y\n")

        bullets, numbers = root.children
        assert isinstance(bullets, ListNode)
        assert (bullets.ordered, bullets.start, len(bullets.children)) == (False, None, 2)
        assert isinstance(bullets.children[0].children[0], Paragraph)
        assert (numbers.ordered, numbers.start) == (True, 3)

    def test_blockquote_nests(self) -> None:
        """Block quotes contain blocks."""
        root = parse_markdown("> quoted\n> - item\n")

        quote = root.children[0]
        assert isinstance(quote, Blockquote)
        assert [child.type for child in quote.children] == ["paragraph", "list"]

    def test_leaf_blocks(self) -> None:
        """Fences, rules and HTML blocks are kept."""
        root = parse_markdown("```python\nprint(1)\n```\n\n---\n\n<div>x</div>\n")

        code, rule, html = root.children
        assert code == Code(lang="python", value="print(1)", position=code.position)
        assert isinstance(rule, ThematicBreak)
        assert isinstance(html, Html)
        assert html.value == "<div>x</div>"

    def test_positions(self) -> None:
        """Positions are 1-based and span the block's lines."""
        root = parse_markdown("para\n\n> quote\n> more\n")

        quote = root.children[1]
        assert (quote.position.start.line, quote.position.start.column) == (3, 1)
        assert (quote.position.end.line, quote.position.end.column) == (4, 7)

    def test_line_offset(self) -> None:
        """A line offset shifts every reported line."""
        root = parse_markdown("para\n", line_offset=5)

        assert root.children[0].position.start.line == 6


# ---------------------------------------------------------------------------
# Inline content
# ---------------------------------------------------------------------------


class TestInline:
    """Inline token conversion."""

    def test_rich_inline(self) -> None:
        """Code spans, strikethrough, links and strong text."""
        root = parse_markdown('a `b` ~~c~~ [d](https://x.test "t") **e**\n')

        assert root.children[0].children == [
            Text(value="a "),
            InlineCode(value="b"),
            Text(value=" "),
            Delete(children=[Text(value="c")]),
            Text(value=" "),
            Link(url="https://x.test", title="t", children=[Text(value="d")]),
            Text(value=" "),
            Strong(children=[Text(value="e")]),
        ]

    def test_soft_break_is_newline_text(self) -> None:
        """Soft breaks merge into the surrounding text as ``\\n``."""
        root = parse_markdown("one\ntwo\n")

        assert root.children[0].children == [Text(value="one\ntwo")]

    def test_hard_break(self) -> None:
        """Two trailing spaces give a Break node."""
        root = parse_markdown("one  \ntwo\n")

        assert root.children[0].children == [Text(value="one"), Break(), Text(value="two")]

    def test_image(self) -> None:
        """Images keep their alt text."""
        root = parse_markdown("![Tower](tower.png)\n")

        assert root.children[0].children == [Image(url="tower.png", alt="Tower")]

    def test_brackets_stay_text(self) -> None:
        """Header time brackets are not links."""
        root = parse_markdown("[08:00] lunch :: Cafe\n")

        assert root.children[0].children == [Text(value="[08:00] lunch :: Cafe")]


# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------


FRONTMATTER_DOC = """\
---
title: Japan
timezone: Asia/Tokyo
currency: jpy
stayMode: header
---

# Day
"""


class TestFrontmatter:
    """Frontmatter splitting and normalization."""

    def test_frontmatter_is_read(self) -> None:
        """Recognized keys are normalized; the body is parsed."""
        document = load_document(FRONTMATTER_DOC)

        assert document.frontmatter == ItineraryFrontmatter(
            title="Japan",
            timezone="Asia/Tokyo",
            currency="jpy",
            stay_mode="header",
        )
        assert document.metadata["stayMode"] == "header"
        assert isinstance(document.root.children[0], Heading)

    def test_body_lines_match_source(self) -> None:
        """Positions count the frontmatter lines."""
        document = load_document(FRONTMATTER_DOC)

        assert document.root.children[0].position.start.line == 8

    def test_no_frontmatter(self) -> None:
        """Plain markdown has no frontmatter."""
        document = load_document("# Day\n")

        assert document.frontmatter is None
        assert document.metadata == {}

    def test_invalid_yaml_is_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        """Broken YAML is logged and treated as absent."""
        with caplog.at_level(logging.WARNING, logger="itmd.markdown"):
            document = load_document("---\ntitle: [unclosed\n---\n\nbody\n")

        assert document.frontmatter is None
        assert "frontmatter" in caplog.text

    def test_aliases(self) -> None:
        """Short key aliases are accepted."""
        fm = normalize_frontmatter({"name": "Trip", "tz": "UTC", "cur": "usd", "stay": "Default"})

        assert fm == ItineraryFrontmatter(title="Trip", timezone="UTC", currency="usd", stay_mode="default")

    def test_unknown_values_are_dropped(self) -> None:
        """Non-string values and unknown stay modes are ignored."""
        fm = normalize_frontmatter({"title": 5, "timezone": "  ", "stay_mode": "sometimes"})

        assert fm == ItineraryFrontmatter()

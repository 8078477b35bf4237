"""Unit tests for admonition conversion."""

from __future__ import annotations

from itmd.alerts import convert_alerts
from itmd.markdown import parse_markdown
from itmd.models.blocks import AlertNode, Blockquote, DateContext, EventNode, Paragraph, Root
from itmd.models.inline import Text
from itmd.pipeline.run import run_pipeline


def _alerts(text: str) -> Root:
    return convert_alerts(parse_markdown(text))


class TestConvertAlerts:
    """``> [!VARIANT]`` block quotes."""

    def test_one_line_alert(self) -> None:
        """Text after the tag becomes the inline title."""
        alert = _alerts("> [!WARNING] lorem ipsum\n").children[0]

        assert isinstance(alert, AlertNode)
        assert alert.variant == "warning"
        assert alert.title == "WARNING"
        assert alert.inline_title == [Text(value="lorem ipsum")]
        assert alert.children == []

    def test_case_and_leading_spaces(self) -> None:
        """The tag is case-insensitive and may be indented."""
        alert = _alerts(">   [!tip]  lorem\n").children[0]

        assert isinstance(alert, AlertNode)
        assert alert.variant == "tip"
        assert alert.inline_title == [Text(value="lorem")]

    def test_following_paragraphs_are_children(self) -> None:
        """Paragraphs after the tag paragraph are kept as children."""
        alert = _alerts("> [!NOTE]\n>\n> line1\n>\n> line2\n").children[0]

        assert alert.inline_title is None
        assert len(alert.children) == 2
        assert isinstance(alert.children[0], Paragraph)
        assert alert.children[0].children == [Text(value="line1")]

    def test_position_is_kept(self) -> None:
        """The alert takes the block quote's position."""
        root = parse_markdown("intro\n\n> [!CAUTION] hot\n")
        position = root.children[1].position

        convert_alerts(root)

        assert root.children[1].position == position

    def test_plain_quote_is_untouched(self) -> None:
        """Ordinary block quotes stay block quotes."""
        assert isinstance(_alerts("> Just quote\n").children[0], Blockquote)

    def test_unknown_variant(self) -> None:
        """Only the five GitHub variants are recognized."""
        assert isinstance(_alerts("> [!DANGER] no\n").children[0], Blockquote)

    def test_nested_in_list(self) -> None:
        """Alerts inside list items are converted too."""
        root = _alerts("- item\n\n  > [!TIP] hint\n")

        item = root.children[0].children[0]
        assert isinstance(item.children[1], AlertNode)


class TestWithPipeline:
    """Interaction with event assembly."""

    def test_alert_keeps_date_context(self) -> None:
        """An alert under a date heading carries that date."""
        root = run_pipeline(parse_markdown("## 2025-03-15\n\n> [!NOTE] bring cash\n"))

        alert = root.children[1]
        assert isinstance(alert, AlertNode)
        assert alert.date_context == DateContext(date_iso="2025-03-15")

    def test_event_children_are_not_rewritten(self) -> None:
        """Quotes absorbed into an event stay verbatim."""
        root = run_pipeline(parse_markdown("> [08:00] lunch\n> > [!NOTE] inner\n"))

        event = root.children[0]
        assert isinstance(event, EventNode)
        assert isinstance(event.children[1], Blockquote)

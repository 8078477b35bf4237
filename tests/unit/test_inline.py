"""Unit tests for rich-inline flattening and slicing."""

from __future__ import annotations

from itmd.inline import masked_text, normalize_soft_breaks, plain_text, slice_inline, text_span
from itmd.models.inline import Break, Emphasis, Image, InlineCode, Link, Strong, Text

# "Visit " + link("Tokyo Tower") + " and " + em("eat") + " `ramen`"
FOREST = [
    Text(value="Visit "),
    Link(url="https://example.com/tower", children=[Text(value="Tokyo Tower")]),
    Text(value=" and "),
    Emphasis(children=[Text(value="eat")]),
    Text(value=" "),
    InlineCode(value="ramen"),
]


class TestPlainText:
    """Flattening an inline forest."""

    def test_flattens_nested_nodes(self) -> None:
        """Containers contribute their children's text; code its value."""
        assert plain_text(FOREST) == "Visit Tokyo Tower and eat ramen"

    def test_break_and_image(self) -> None:
        """A hard break flattens to newline, an image to its alt text."""
        nodes = [Text(value="a"), Break(), Image(url="x.png", alt="pic")]

        assert plain_text(nodes) == "a\npic"

    def test_text_span_empty(self) -> None:
        """An empty string becomes an empty span."""
        assert text_span("") == []
        assert text_span("x") == [Text(value="x")]


class TestMaskedText:
    """Flattening with code spans and link labels hidden."""

    def test_code_and_links_are_masked(self) -> None:
        """Hidden text becomes underscores; offsets match the plain text."""
        masked = masked_text(FOREST)

        assert masked == "Visit ___________ and eat _____"
        assert len(masked) == len(plain_text(FOREST))

    def test_masked_inside_containers(self) -> None:
        """Code nested in strong text is hidden too."""
        nodes = [Strong(children=[Text(value="a "), InlineCode(value="x - y")]), Break()]

        assert masked_text(nodes) == "a _____\n"


class TestSliceInline:
    """Offset-exact slicing."""

    def test_full_range_is_equivalent(self) -> None:
        """Slicing [0, len) returns an equal forest."""
        full = slice_inline(FOREST, 0, len(plain_text(FOREST)))

        assert full == FOREST

    def test_link_survives_partial_overlap(self) -> None:
        """A range cutting into a link keeps the link with clipped children."""
        # "Tokyo" only
        result = slice_inline(FOREST, 6, 11)

        assert len(result) == 1
        assert isinstance(result[0], Link)
        assert result[0].url == "https://example.com/tower"
        assert result[0].children == [Text(value="Tokyo")]

    def test_range_across_containers(self) -> None:
        """Leaves are split at both boundaries."""
        text = plain_text(FOREST)
        start = text.index("Tower")
        end = text.index("eat") + 2

        result = slice_inline(FOREST, start, end)

        assert plain_text(result) == "Tower and ea"
        assert isinstance(result[0], Link)
        assert isinstance(result[-1], Emphasis)
        assert result[-1].children == [Text(value="ea")]

    def test_inline_code_is_clipped(self) -> None:
        """Inline code is a leaf and is clipped like text."""
        text = plain_text(FOREST)
        result = slice_inline(FOREST, text.index("ramen") + 1, len(text))

        assert result == [InlineCode(value="amen")]

    def test_empty_and_out_of_range(self) -> None:
        """Empty or out-of-range requests return an empty forest."""
        assert slice_inline(FOREST, 5, 5) == []
        assert slice_inline(FOREST, 8, 3) == []
        assert slice_inline(FOREST, 100, 120) == []

    def test_atomic_nodes_kept_whole(self) -> None:
        """An image overlapping the range is kept in full."""
        nodes = [Text(value="ab"), Image(url="i.png", alt="xyz"), Text(value="cd")]

        result = slice_inline(nodes, 3, 6)

        assert result == [Image(url="i.png", alt="xyz"), Text(value="c")]

    def test_input_not_mutated(self) -> None:
        """The source forest is unchanged after slicing."""
        nested = [Strong(children=[Text(value="hello world")])]

        slice_inline(nested, 0, 5)

        assert nested == [Strong(children=[Text(value="hello world")])]

    def test_container_dropped_when_nothing_survives(self) -> None:
        """A container outside the range disappears entirely."""
        result = slice_inline(FOREST, 0, 5)

        assert result == [Text(value="Visit")]


class TestNormalizeSoftBreaks:
    """Line-break handling inside extracted spans."""

    def test_break_between_words_becomes_space(self) -> None:
        """A break after punctuation or before a space becomes one space."""
        result = normalize_soft_breaks([Text(value="Tokyo,\nJapan")])

        assert result == [Text(value="Tokyo, Japan")]

    def test_break_inside_word_is_removed(self) -> None:
        """A break between two word characters joins them."""
        result = normalize_soft_breaks([Text(value="Shin\njuku")])

        assert result == [Text(value="Shinjuku")]

    def test_nested_text_is_normalized(self) -> None:
        """Breaks inside container children are normalized too."""
        nodes = [Link(url="u", children=[Text(value="A,\nB")])]

        result = normalize_soft_breaks(nodes)

        assert result == [Link(url="u", children=[Text(value="A, B")])]

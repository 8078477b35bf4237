"""Rich-inline helpers: flattening and offset-exact slicing.

Every offset used by the header parser and the body assembler is an
index into the *flattened* plain text of an inline forest, as produced
by :func:`plain_text`.  :func:`slice_inline` maps such a character range
back onto the forest so that links and emphasis survive extraction into
titles, destinations and metadata values.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from itmd.models.inline import (
    Break,
    Image,
    InlineCode,
    InlineHtml,
    InlineNode,
    Link,
    Text,
)

_WORD_BREAK_RE = re.compile(r"(?<=\w)\n(?=\w)")


def node_text(node: InlineNode) -> str:
    """Return the flattened plain text of a single inline node."""
    if isinstance(node, (Text, InlineCode, InlineHtml)):
        return node.value
    if isinstance(node, Break):
        return "\n"
    if isinstance(node, Image):
        return node.alt
    return "".join(node_text(child) for child in node.children)


def plain_text(nodes: Sequence[InlineNode]) -> str:
    """Flatten an inline forest into plain text."""
    return "".join(node_text(node) for node in nodes)


def masked_text(nodes: Sequence[InlineNode]) -> str:
    """Flatten like :func:`plain_text`, hiding code spans and link labels.

    Hidden characters become ``_``, so offsets still match
    :func:`plain_text` and no header separator can be found inside them.
    """
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, (InlineCode, Link)):
            parts.append("_" * len(node_text(node)))
        elif hasattr(node, "children"):
            parts.append(masked_text(node.children))
        else:
            parts.append(node_text(node))
    return "".join(parts)


def text_span(value: str) -> list[InlineNode]:
    """Wrap a plain string as a rich span (empty string -> empty span)."""
    return [Text(value=value)] if value else []


def _slice_node(
    node: InlineNode,
    start: int,
    end: int,
    offset: int,
) -> tuple[list[InlineNode], int]:
    """Clip *node* (beginning at *offset*) to ``[start, end)``.

    Returns the surviving nodes and the offset just past *node*.
    """
    if hasattr(node, "children"):
        # Containers contribute nothing themselves; the offset advances
        # through their leaves only.
        kept: list[InlineNode] = []
        for child in node.children:
            sliced, offset = _slice_node(child, start, end, offset)
            kept.extend(sliced)
        if not kept:
            return [], offset
        return [node.model_copy(update={"children": kept})], offset

    node_start = offset
    node_end = node_start + len(node_text(node))
    if end <= node_start or start >= node_end:
        return [], node_end

    if isinstance(node, (Text, InlineCode)):
        rel_start = max(start, node_start) - node_start
        rel_end = min(end, node_end) - node_start
        clipped = node.value[rel_start:rel_end]
        if not clipped:
            return [], node_end
        return [node.model_copy(update={"value": clipped})], node_end

    # Break, image and raw HTML are atomic: kept whole when they overlap.
    return [node], node_end


def slice_inline(nodes: Sequence[InlineNode], start: int, end: int) -> list[InlineNode]:
    """Extract the sub-forest covering ``[start, end)`` of the flat text.

    Text and code leaves are split at the boundaries; containers such
    as links are kept (with clipped children) as long as any descendant
    survives.  The input forest is never modified.

    Args:
        nodes: The inline forest.
        start: Inclusive start offset into ``plain_text(nodes)``.
        end: Exclusive end offset.

    Returns:
        A new forest; empty when ``end <= start``.
    """
    if end <= start:
        return []
    out: list[InlineNode] = []
    offset = 0
    for node in nodes:
        if offset >= end:
            break
        sliced, offset = _slice_node(node, start, end, offset)
        out.extend(sliced)
    return out


def _normalize_text(value: str) -> str:
    return _WORD_BREAK_RE.sub("", value).replace("\n", " ")


def normalize_soft_breaks(nodes: Sequence[InlineNode]) -> list[InlineNode]:
    """Replace literal line breaks inside text leaves.

    A break between two word characters is removed (the source wrapped
    mid-word); any other break becomes a single space.
    """
    out: list[InlineNode] = []
    for node in nodes:
        if isinstance(node, Text):
            if "\n" in node.value:
                node = node.model_copy(update={"value": _normalize_text(node.value)})
        elif hasattr(node, "children"):
            node = node.model_copy(update={"children": normalize_soft_breaks(node.children)})
        out.append(node)
    return out

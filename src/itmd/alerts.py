"""GitHub-style admonitions (``> [!NOTE]``) as :class:`AlertNode` blocks."""

from __future__ import annotations

import logging
import re

from itmd.models.blocks import (
    AlertNode,
    BlockNode,
    Blockquote,
    ListItem,
    ListNode,
    Paragraph,
    Root,
)
from itmd.models.inline import InlineNode, Text

logger = logging.getLogger(__name__)

_ALERT_RE = re.compile(r"^\s*\[!(NOTE|TIP|IMPORTANT|WARNING|CAUTION)\]\s*", re.IGNORECASE)


def _to_alert(block: Blockquote) -> AlertNode | None:
    if not block.children or not isinstance(block.children[0], Paragraph):
        return None
    paragraph = block.children[0]
    if not paragraph.children or not isinstance(paragraph.children[0], Text):
        return None
    match = _ALERT_RE.match(paragraph.children[0].value)
    if not match:
        return None

    variant = match.group(1).lower()
    inline_title: list[InlineNode] = []
    remaining = paragraph.children[0].value[match.end() :]
    if remaining.strip():
        inline_title.append(Text(value=remaining))
    inline_title.extend(paragraph.children[1:])

    return AlertNode(
        variant=variant,
        title=variant.upper(),
        inline_title=inline_title or None,
        children=list(block.children[1:]),
        position=block.position,
        date_context=block.date_context,
    )


def _convert(children: list[BlockNode]) -> int:
    converted = 0
    for idx, node in enumerate(children):
        if isinstance(node, Blockquote):
            alert = _to_alert(node)
            if alert is not None:
                children[idx] = alert
                converted += 1
                node = alert
        # Event children are kept verbatim, so events are not descended.
        if isinstance(node, (Blockquote, ListNode, ListItem, AlertNode)):
            converted += _convert(node.children)
    return converted


def convert_alerts(root: Root) -> Root:
    """Replace admonition block quotes anywhere in *root*, in place."""
    converted = _convert(root.children)
    if converted:
        logger.debug("Converted %d admonition(s)", converted)
    return root

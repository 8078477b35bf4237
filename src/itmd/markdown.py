"""Markdown adapter: source text to the block tree the pipeline consumes.

Uses ``markdown-it-py`` (CommonMark plus strikethrough) for parsing and
``python-frontmatter`` for the optional YAML header.  Only the node types
listed in :mod:`itmd.models.blocks` are produced; anything else
markdown-it emits (tables are not enabled) is skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

import frontmatter
import yaml
from markdown_it import MarkdownIt
from markdown_it.token import Token
from pydantic import BaseModel, ConfigDict

from itmd.models.blocks import (
    BlockNode,
    Blockquote,
    Code,
    Heading,
    Html,
    ListItem,
    ListNode,
    Paragraph,
    Point,
    Position,
    Root,
    ThematicBreak,
)
from itmd.models.inline import (
    Break,
    Delete,
    Emphasis,
    Image,
    InlineCode,
    InlineHtml,
    InlineNode,
    Link,
    Strong,
    Text,
)

logger = logging.getLogger(__name__)

StayMode = Literal["default", "header"]


def _make_parser() -> MarkdownIt:
    return MarkdownIt("commonmark").enable("strikethrough")


# ---------------------------------------------------------------------------
# Inline tokens
# ---------------------------------------------------------------------------


def _append_text(out: list[InlineNode], value: str) -> None:
    if not value:
        return
    if out and isinstance(out[-1], Text):
        out[-1] = Text(value=out[-1].value + value)
    else:
        out.append(Text(value=value))


def _container(kind: str, token: Token, children: list[InlineNode]) -> list[InlineNode]:
    if kind == "link":
        return [Link(url=str(token.attrGet("href") or ""), title=token.attrGet("title"), children=children)]
    if kind == "em":
        return [Emphasis(children=children)]
    if kind == "strong":
        return [Strong(children=children)]
    if kind == "s":
        return [Delete(children=children)]
    return children


def convert_inline(tokens: Sequence[Token] | None) -> list[InlineNode]:
    """Convert the children of a markdown-it ``inline`` token."""
    stack: list[tuple[str, Token | None, list[InlineNode]]] = [("root", None, [])]
    for token in tokens or []:
        out = stack[-1][2]
        kind = token.type
        if kind in ("text", "text_special"):
            _append_text(out, token.content)
        elif kind == "softbreak":
            _append_text(out, "\n")
        elif kind == "hardbreak":
            out.append(Break())
        elif kind == "code_inline":
            out.append(InlineCode(value=token.content))
        elif kind == "html_inline":
            out.append(InlineHtml(value=token.content))
        elif kind == "image":
            title = token.attrGet("title")
            out.append(Image(url=str(token.attrGet("src") or ""), alt=token.content, title=title))
        elif kind.endswith("_open"):
            stack.append((kind[: -len("_open")], token, []))
        elif kind.endswith("_close") and len(stack) > 1:
            name, opener, children = stack.pop()
            for node in _container(name, opener, children):
                if isinstance(node, Text):
                    _append_text(stack[-1][2], node.value)
                else:
                    stack[-1][2].append(node)

    # Unbalanced markup: keep the content, drop the wrapper.
    while len(stack) > 1:
        _, _, children = stack.pop()
        stack[-1][2].extend(children)
    return stack[0][2]


# ---------------------------------------------------------------------------
# Block tokens
# ---------------------------------------------------------------------------


_CONTAINER_CLOSERS = {
    "blockquote_open": "blockquote_close",
    "bullet_list_open": "bullet_list_close",
    "ordered_list_open": "ordered_list_close",
    "list_item_open": "list_item_close",
}


@dataclass
class _BlockReader:
    """Recursive-descent reader over markdown-it's flat block token stream."""

    tokens: list[Token]
    lines: list[str]
    line_offset: int = 0
    pos: int = 0

    def position(self, token: Token) -> Position | None:
        if not token.map:
            return None
        first, last = token.map
        end_line = max(first, last - 1)
        end_column = len(self.lines[end_line]) + 1 if end_line < len(self.lines) else 1
        return Position(
            start=Point(line=first + 1 + self.line_offset, column=1),
            end=Point(line=end_line + 1 + self.line_offset, column=end_column),
        )

    def read(self, closer: str | None = None) -> list[BlockNode]:
        nodes: list[BlockNode] = []
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            if closer is not None and token.type == closer:
                self.pos += 1
                return nodes
            node = self._read_one(token)
            if node is not None:
                nodes.append(node)
        return nodes

    def _inline_after(self) -> list[InlineNode]:
        # Layout: <x>_open, inline, <x>_close.
        inline = self.tokens[self.pos + 1] if self.pos + 1 < len(self.tokens) else None
        self.pos += 3
        if inline is None or inline.type != "inline":
            return []
        return convert_inline(inline.children)

    def _read_one(self, token: Token) -> BlockNode | None:
        kind = token.type
        position = self.position(token)

        if kind == "heading_open":
            return Heading(depth=int(token.tag[1:]), children=self._inline_after(), position=position)
        if kind == "paragraph_open":
            return Paragraph(children=self._inline_after(), position=position)

        if kind in _CONTAINER_CLOSERS:
            self.pos += 1
            children = self.read(_CONTAINER_CLOSERS[kind])
            if kind == "blockquote_open":
                return Blockquote(children=children, position=position)
            if kind == "list_item_open":
                return ListItem(children=children, position=position)
            ordered = kind == "ordered_list_open"
            start = int(token.attrGet("start") or 1) if ordered else None
            items = [child for child in children if isinstance(child, ListItem)]
            return ListNode(ordered=ordered, start=start, children=items, position=position)

        self.pos += 1
        if kind == "fence":
            lang = token.info.strip().split()[0] if token.info.strip() else None
            return Code(lang=lang, value=token.content.rstrip("\n"), position=position)
        if kind == "code_block":
            return Code(value=token.content.rstrip("\n"), position=position)
        if kind == "hr":
            return ThematicBreak(position=position)
        if kind == "html_block":
            return Html(value=token.content.rstrip("\n"), position=position)
        logger.debug("Skipping unsupported markdown token %s", kind)
        return None


def parse_markdown(text: str, line_offset: int = 0) -> Root:
    """Parse markdown *text* into a :class:`Root` block tree.

    Args:
        text: Markdown source (without frontmatter).
        line_offset: Lines preceding *text* in the full file, added
            to every reported line number.

    Returns:
        The document tree.
    """
    tokens = _make_parser().parse(text)
    reader = _BlockReader(tokens=tokens, lines=text.splitlines(), line_offset=line_offset)
    return Root(children=reader.read())


# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------


class ItineraryFrontmatter(BaseModel):
    """Document-level settings read from YAML frontmatter.

    Attributes:
        title: Itinerary title (``title`` or ``name``).
        timezone: Default timezone for the document (``timezone``/``tz``).
        currency: Default currency (``currency``/``cur``).
        stay_mode: ``"default"`` or ``"header"`` (``stayMode``/``stay``).
    """

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    timezone: str | None = None
    currency: str | None = None
    stay_mode: StayMode | None = None


def _str_value(raw: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def normalize_frontmatter(raw: dict[str, Any]) -> ItineraryFrontmatter:
    """Pick the recognized keys (and their aliases) out of raw metadata."""
    stay = (_str_value(raw, "stay_mode", "stayMode", "stay") or "").lower()
    return ItineraryFrontmatter(
        title=_str_value(raw, "title", "name"),
        timezone=_str_value(raw, "timezone", "tz"),
        currency=_str_value(raw, "currency", "cur"),
        stay_mode=stay if stay in ("default", "header") else None,
    )


@dataclass(frozen=True)
class MarkdownDocument:
    """A parsed markdown source.

    Attributes:
        root: Block tree of the body.
        frontmatter: Normalized frontmatter, or ``None`` when absent or
            unparseable.
        metadata: The raw frontmatter mapping.
    """

    root: Root
    frontmatter: ItineraryFrontmatter | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def load_document(text: str) -> MarkdownDocument:
    """Split frontmatter from *text* and parse the body.

    Invalid YAML is logged and treated as absent frontmatter; the whole
    text is then parsed as markdown.
    """
    try:
        post = frontmatter.loads(text)
    except (yaml.YAMLError, ValueError) as exc:
        logger.warning("Ignoring unparseable frontmatter: %s", exc)
        return MarkdownDocument(root=parse_markdown(text))

    metadata = dict(post.metadata)
    if not metadata:
        return MarkdownDocument(root=parse_markdown(text))

    body = post.content
    start = text.rfind(body) if body else len(text)
    line_offset = text.count("\n", 0, max(start, 0))
    return MarkdownDocument(
        root=parse_markdown(body, line_offset=line_offset),
        frontmatter=normalize_frontmatter(metadata),
        metadata=metadata,
    )

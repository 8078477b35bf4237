"""Block assembler: turns a markdown block tree into itinerary nodes.

Walks the root's top-level children once, left to right:

- ``# Heading`` clears the active date;
- ``## 2025-03-15 @Europe/Madrid`` becomes a :class:`DateHeading` and sets
  the active date (and timezone);
- every other sibling is stamped with the active :class:`DateContext`;
- a block quote whose first line opens with time brackets is parsed as an
  event header and replaced by an :class:`EventNode`, with its remaining
  paragraphs and lists grouped into body segments.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from datetime import date

from itmd.inline import masked_text, plain_text, slice_inline, text_span
from itmd.models.blocks import (
    BlockNode,
    Blockquote,
    DateContext,
    DateHeading,
    EventNode,
    Heading,
    ListItem,
    ListNode,
    Paragraph,
    Root,
)
from itmd.models.event import (
    BodySegment,
    InlineSegment,
    ListSegment,
    MetaEntry,
    MetaSegment,
)
from itmd.models.inline import RichSpan, Text
from itmd.models.price import PriceEntry
from itmd.pipeline.build import build_event_node
from itmd.pipeline.lex import lex_line
from itmd.pipeline.normalize import normalize_header
from itmd.pipeline.parse import parse_header, parse_time_span
from itmd.pipeline.validate import validate_header
from itmd.price import normalize_price_line
from itmd.services import Services, Shadow, identity_shadow, make_default_services
from itmd.timezones import coerce_timezone

logger = logging.getLogger(__name__)

INVALID_TZ_WARNING = "invalid-tz"
PRICE_KEYS = frozenset({"price", "cost"})

_DATE_HEADING_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:\s*@([A-Za-z0-9_./+:-]+))?")
_ADMONITION_RE = re.compile(r"^\s*\[!\w+\]")
_KEY_PREFIX_RE = re.compile(r"^[-\s]+")
_DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass
class _ScanState:
    """Date context carried across siblings during one scan."""

    date_iso: str | None = None
    timezone: str | None = None
    tz_invalid_on_heading: bool = False

    def clear(self) -> None:
        self.date_iso = None
        self.timezone = None
        self.tz_invalid_on_heading = False

    @property
    def context(self) -> DateContext | None:
        if self.date_iso is None:
            return None
        return DateContext(date_iso=self.date_iso, timezone=self.timezone)


# ---------------------------------------------------------------------------
# Date headings
# ---------------------------------------------------------------------------


def _date_heading(node: Heading, state: _ScanState, services: Services) -> DateHeading | None:
    """Update *state* from a depth-2 heading; return its replacement node."""
    match = _DATE_HEADING_RE.match(plain_text(node.children).strip())
    if not match:
        return None
    try:
        day = date.fromisoformat(match.group(1))
    except ValueError:
        logger.debug("Heading %r is not a calendar date", match.group(1))
        return None

    tz_raw = match.group(2)
    timezone: str | None = None
    tz_valid = True
    if tz_raw:
        timezone, tz_valid = coerce_timezone(tz_raw, services.policy.default_timezone)

    state.date_iso = day.isoformat()
    state.timezone = timezone or state.timezone
    state.tz_invalid_on_heading = bool(tz_raw) and not tz_valid
    logger.debug("Date context %s (timezone %s)", state.date_iso, state.timezone)

    return DateHeading(
        date_iso=state.date_iso,
        timezone=timezone,
        day_of_week=_DAY_NAMES[day.weekday()],
        position=node.position,
    )


# ---------------------------------------------------------------------------
# Body segments
# ---------------------------------------------------------------------------


def _strip_list_marker(nodes: RichSpan) -> RichSpan:
    """Drop a literal leading ``"- "`` from the first text node (copying)."""
    if nodes and isinstance(nodes[0], Text) and nodes[0].value.startswith("- "):
        first = nodes[0].model_copy(update={"value": nodes[0].value[2:]})
        return [first, *nodes[1:]]
    return list(nodes)


def _item_inline(item: ListItem) -> tuple[RichSpan, str]:
    para = next((child for child in item.children if isinstance(child, Paragraph)), None)
    if para is not None:
        return list(para.children), plain_text(para.children)
    return [], _flatten_blocks(item.children)


def _flatten_blocks(nodes: list[BlockNode]) -> str:
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, (Paragraph, Heading)):
            parts.append(plain_text(node.children))
        elif hasattr(node, "children"):
            parts.append(_flatten_blocks(node.children))
        elif hasattr(node, "value"):
            parts.append(node.value)
    return "".join(parts)


def _list_segments(node: ListNode) -> list[BodySegment]:
    """Group one list's items into alternating meta/list runs."""
    segments: list[BodySegment] = []
    entries: list[MetaEntry] = []
    items: list[RichSpan] = []

    def flush() -> None:
        if entries:
            segments.append(MetaSegment(entries=list(entries)))
            entries.clear()
        if items:
            segments.append(ListSegment(items=list(items), ordered=node.ordered, start=node.start))
            items.clear()

    for item in node.children:
        inline, raw = _item_inline(item)
        colon = raw.find(":")
        key = _KEY_PREFIX_RE.sub("", raw[:colon].strip().lower()) if colon > 0 else ""
        if key:
            value_start = colon + 1
            if raw[value_start : value_start + 1] == " ":
                value_start += 1
            if inline:
                value = slice_inline(inline, value_start, len(raw))
            else:
                value = text_span(raw[value_start:].strip())
            if items:
                flush()
            entries.append(MetaEntry(key=key, value=value))
        else:
            content = inline if inline else text_span(raw.strip())
            if entries:
                flush()
            items.append(_strip_list_marker(content))
    flush()
    return segments


def _body_segments(children: list[BlockNode], header_para: Paragraph) -> list[BodySegment]:
    segments: list[BodySegment] = []
    for child in children:
        if child is header_para:
            continue
        if isinstance(child, Paragraph):
            segments.append(InlineSegment(content=list(child.children)))
        elif isinstance(child, ListNode):
            segments.extend(_list_segments(child))
    return segments


def _price_entries(segments: list[BodySegment], services: Services) -> list[PriceEntry]:
    prices: list[PriceEntry] = []
    for segment in segments:
        if not isinstance(segment, MetaSegment):
            continue
        for entry in segment.entries:
            if entry.key not in PRICE_KEYS:
                continue
            raw = plain_text(entry.value).strip()
            price = normalize_price_line(raw, services.policy.default_currency)
            prices.append(PriceEntry(key=entry.key, raw=raw, price=price))
    return prices


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def _header_paragraph(block: Blockquote) -> Paragraph | None:
    """Return the block's first paragraph if its first line opens with a time span."""
    para = next((child for child in block.children if isinstance(child, Paragraph)), None)
    if para is None:
        return None
    first_line = plain_text(para.children).split("\n", 1)[0].lstrip()
    if _ADMONITION_RE.match(first_line):
        return None
    if parse_time_span(first_line).consumed == 0:
        return None
    return para


def _header_services(para: Paragraph, services: Services) -> Services:
    """Scan the header with code spans and link labels hidden.

    A caller-supplied shadow hook is used as is.
    """
    if services.make_shadow is not identity_shadow:
        return services
    shadow = Shadow(text=masked_text(para.children), index_map=lambda idx: idx)
    return replace(services, make_shadow=lambda _line: shadow)


def _build_event(block: Blockquote, state: _ScanState, services: Services) -> EventNode | None:
    para = _header_paragraph(block)
    if para is None:
        return None

    text = plain_text(para.children)
    tokens = lex_line(text, _header_services(para, services))
    parsed = parse_header(tokens, para.children)
    normalized = normalize_header(parsed, state.date_iso, state.timezone, services)
    header, warnings = validate_header(normalized)
    if not header.event_type:
        logger.debug("Block quote header %r has no event type; left as is", text)
        return None

    event = build_event_node(header, block.children, block.position)
    body = _body_segments(block.children, para)
    event.body = body or None
    event.prices = _price_entries(body, services)
    event.warnings = [*event.warnings, *warnings]
    if state.tz_invalid_on_heading:
        event.warnings.append(INVALID_TZ_WARNING)
    event.date_context = state.context
    logger.debug("Event %r (%s) on %s", header.event_type, event.base_type, state.date_iso)
    return event


def assemble_events(root: Root, services: Services | None = None) -> Root:
    """Replace date headings and event block quotes in *root*, in place.

    Args:
        root: Document root; its ``children`` list is modified.
        services: Pipeline services; defaults are used when omitted.

    Returns:
        The same *root*, for chaining.
    """
    services = services or make_default_services()
    state = _ScanState()
    events = 0

    for idx, node in enumerate(root.children):
        if isinstance(node, Heading) and node.depth == 1:
            state.clear()
            continue
        if isinstance(node, Heading) and node.depth == 2:
            heading = _date_heading(node, state, services)
            if heading is None:
                state.clear()
            else:
                root.children[idx] = heading
            continue

        if isinstance(node, Blockquote):
            event = _build_event(node, state, services)
            if event is not None:
                root.children[idx] = event
                events += 1
                continue

        if state.date_iso is not None:
            node.date_context = state.context

    logger.debug("Assembled %d event(s) from %d block(s)", events, len(root.children))
    return root

"""Block-level document tree models.

The consumed tree is a plain markdown block tree (headings, paragraphs,
lists, block quotes, ...).  The produced tree additionally contains the
itinerary nodes synthesized by the pipeline:

- :class:`DateHeading` -- replaces a ``## YYYY-MM-DD`` heading;
- :class:`EventNode` -- replaces a qualifying block quote;
- :class:`AlertNode` -- replaces a GitHub-style admonition.

Unlike inline nodes, block nodes are mutable: the assembler replaces
siblings of the root in place and stamps ``date_context`` on them.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from itmd.models.event import BodySegment, Destination, EventTime, HeaderPositions
from itmd.models.inline import RichSpan
from itmd.models.price import PriceEntry

# ---------------------------------------------------------------------------
# Positions and context
# ---------------------------------------------------------------------------


class Point(BaseModel):
    """A 1-based line/column location in the source text."""

    model_config = ConfigDict(frozen=True)

    line: int
    column: int


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Point
    end: Point


class DateContext(BaseModel):
    """The date (and timezone) in effect for a node.

    Attributes:
        date_iso: ``YYYY-MM-DD`` of the nearest preceding date heading.
        timezone: Resolved timezone of that heading, or ``None``.
    """

    model_config = ConfigDict(frozen=True)

    date_iso: str
    timezone: str | None = None


class _Block(BaseModel):
    position: Position | None = None
    date_context: DateContext | None = None


# ---------------------------------------------------------------------------
# Consumed (generic markdown) blocks
# ---------------------------------------------------------------------------


class Heading(_Block):
    type: Literal["heading"] = "heading"
    depth: int
    children: RichSpan = Field(default_factory=list)


class Paragraph(_Block):
    type: Literal["paragraph"] = "paragraph"
    children: RichSpan = Field(default_factory=list)


class ListItem(_Block):
    type: Literal["listItem"] = "listItem"
    children: list[BlockNode] = Field(default_factory=list)


class ListNode(_Block):
    """An ordered or bullet list.

    Attributes:
        ordered: ``True`` for ``1.``-style lists.
        start: First number of an ordered list, ``None`` otherwise.
        children: The list items.
    """

    type: Literal["list"] = "list"
    ordered: bool = False
    start: int | None = None
    children: list[ListItem] = Field(default_factory=list)


class Blockquote(_Block):
    type: Literal["blockquote"] = "blockquote"
    children: list[BlockNode] = Field(default_factory=list)


class Code(_Block):
    type: Literal["code"] = "code"
    lang: str | None = None
    value: str = ""


class ThematicBreak(_Block):
    type: Literal["thematicBreak"] = "thematicBreak"


class Html(_Block):
    type: Literal["html"] = "html"
    value: str = ""


# ---------------------------------------------------------------------------
# Produced (itinerary) blocks
# ---------------------------------------------------------------------------


class DateHeading(_Block):
    """Replacement for a ``## YYYY-MM-DD(@tz)`` heading.  Has no children."""

    type: Literal["itmdHeading"] = "itmdHeading"
    date_iso: str
    timezone: str | None = None
    day_of_week: str = ""


class EventNode(_Block):
    """A structured itinerary event built from one block quote.

    Attributes:
        event_type: Event-type token as written (e.g. ``"flight"``).
        base_type: ``"transportation"``, ``"stay"`` or ``"activity"``.
        title: Rich title, or ``None``.
        destination: Resolved destination, or ``None``.
        time: Normalized time descriptor, or ``None``.
        positions: Offsets of title/destination/time in the header line.
        body: Ordered body segments, or ``None`` when the block had only
            a header.
        warnings: Advisory warnings collected while building the event.
        prices: Normalized ``price``/``cost`` metadata entries.
        children: The absorbed source nodes, verbatim.
        version: Node schema version.
    """

    type: Literal["itmdEvent"] = "itmdEvent"
    event_type: str
    base_type: Literal["transportation", "stay", "activity"]
    title: RichSpan | None = None
    destination: Destination | None = None
    time: EventTime | None = None
    positions: HeaderPositions = Field(default_factory=HeaderPositions)
    body: list[BodySegment] | None = None
    warnings: list[str] = Field(default_factory=list)
    prices: list[PriceEntry] = Field(default_factory=list)
    children: list[BlockNode] = Field(default_factory=list)
    version: Literal["1"] = "1"


class AlertNode(_Block):
    """A GitHub-style admonition (``> [!NOTE]``)."""

    type: Literal["itmdAlert"] = "itmdAlert"
    variant: Literal["note", "tip", "important", "warning", "caution"]
    title: str
    inline_title: RichSpan | None = None
    children: list[BlockNode] = Field(default_factory=list)


BlockNode = Annotated[
    Union[
        Heading,
        Paragraph,
        ListNode,
        ListItem,
        Blockquote,
        Code,
        ThematicBreak,
        Html,
        DateHeading,
        EventNode,
        AlertNode,
    ],
    Field(discriminator="type"),
]


class Root(BaseModel):
    """Document root."""

    type: Literal["root"] = "root"
    children: list[BlockNode] = Field(default_factory=list)


for _model in (ListItem, ListNode, Blockquote, EventNode, AlertNode, Root):
    _model.model_rebuild()

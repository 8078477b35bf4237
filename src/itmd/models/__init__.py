"""Data models for itmd."""

from __future__ import annotations

from itmd.models.blocks import (
    AlertNode,
    Blockquote,
    BlockNode,
    Code,
    DateContext,
    DateHeading,
    EventNode,
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
from itmd.models.event import (
    BodySegment,
    DashPairDestination,
    Destination,
    DestinationPositions,
    EventTime,
    FromToDestination,
    Header,
    HeaderPositions,
    InlineSegment,
    ListSegment,
    MarkerTime,
    MetaEntry,
    MetaSegment,
    NoTime,
    PointTime,
    RangeTime,
    SingleDestination,
    TextSpan,
    TimePoint,
    TimePositions,
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
    RichSpan,
    Strong,
    Text,
)
from itmd.models.price import (
    MoneyFragment,
    NumberToken,
    PriceEntry,
    PriceFlags,
    PriceResult,
)

__all__ = [
    "AlertNode",
    "BlockNode",
    "Blockquote",
    "BodySegment",
    "Break",
    "Code",
    "DashPairDestination",
    "DateContext",
    "DateHeading",
    "Delete",
    "Destination",
    "DestinationPositions",
    "Emphasis",
    "EventNode",
    "EventTime",
    "FromToDestination",
    "Header",
    "HeaderPositions",
    "Heading",
    "Html",
    "Image",
    "InlineCode",
    "InlineHtml",
    "InlineNode",
    "InlineSegment",
    "Link",
    "ListItem",
    "ListNode",
    "ListSegment",
    "MarkerTime",
    "MetaEntry",
    "MetaSegment",
    "MoneyFragment",
    "NoTime",
    "NumberToken",
    "Paragraph",
    "Point",
    "PointTime",
    "Position",
    "PriceEntry",
    "PriceFlags",
    "PriceResult",
    "RangeTime",
    "RichSpan",
    "Root",
    "SingleDestination",
    "Strong",
    "Text",
    "TextSpan",
    "ThematicBreak",
    "TimePoint",
    "TimePositions",
]

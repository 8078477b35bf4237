"""Event builder: base-type classification and event node construction."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from itmd.models.blocks import BlockNode, EventNode, Position
from itmd.models.event import Header

BaseType = Literal["transportation", "stay", "activity"]

TRANSPORTATION_TYPES = frozenset(
    {
        "flight",
        "train",
        "drive",
        "ferry",
        "bus",
        "taxi",
        "subway",
        "cablecar",
        "rocket",
        "spaceship",
    }
)
STAY_TYPES = frozenset({"stay", "hotel", "ryokan", "hostel", "dormitory"})


def determine_base_type(event_type: str | None) -> BaseType:
    """Classify an event-type token (case-insensitive).

    Examples:
        >>> determine_base_type("Flight")
        'transportation'
        >>> determine_base_type("ryokan")
        'stay'
        >>> determine_base_type("lunch")
        'activity'
    """
    key = (event_type or "").lower()
    if key in TRANSPORTATION_TYPES:
        return "transportation"
    if key in STAY_TYPES:
        return "stay"
    return "activity"


def build_event_node(
    header: Header,
    absorbed: Sequence[BlockNode],
    position: Position | None = None,
) -> EventNode:
    """Create the event node for a header and its absorbed source nodes.

    The header must carry an event type; the assembler never builds an
    event otherwise.  Body, prices and extra warnings are attached by
    the caller.
    """
    if not header.event_type:
        raise ValueError("Cannot build an event without an event type")
    return EventNode(
        event_type=header.event_type,
        base_type=determine_base_type(header.event_type),
        title=header.title,
        destination=header.destination,
        time=header.time,
        positions=header.positions,
        warnings=list(header.warnings),
        children=list(absorbed),
        position=position,
    )

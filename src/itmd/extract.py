"""Helpers for pulling event records back out of a transformed tree."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from pydantic import BaseModel, ConfigDict, Field

from itmd.inline import plain_text
from itmd.models.blocks import AlertNode, BlockNode, Blockquote, EventNode, ListItem, ListNode, Root
from itmd.models.event import PointTime, RangeTime


class EventSummary(BaseModel):
    """A flat, render-free view of one event.

    Attributes:
        event_type: Event-type token as written.
        base_type: ``transportation``, ``stay`` or ``activity``.
        title_text: Title flattened to plain text, if any.
        start_iso: Resolved start timestamp, if any.
        end_iso: Resolved end timestamp (ranges only).
        date_iso: Date of the enclosing date heading, if any.
        warnings: Warnings carried by the event.
    """

    model_config = ConfigDict(frozen=True)

    event_type: str
    base_type: str
    title_text: str | None = None
    start_iso: str | None = None
    end_iso: str | None = None
    date_iso: str | None = None
    warnings: list[str] = Field(default_factory=list)


def _walk(nodes: Sequence[BlockNode]) -> Iterator[EventNode]:
    for node in nodes:
        if isinstance(node, EventNode):
            yield node
        elif isinstance(node, (Blockquote, ListNode, ListItem, AlertNode)):
            yield from _walk(node.children)


def iter_events(root: Root) -> Iterator[EventNode]:
    """Yield every event node in document order."""
    yield from _walk(root.children)


def summarize_event(event: EventNode) -> EventSummary:
    time = event.time
    start_iso = time.start_iso if isinstance(time, (PointTime, RangeTime)) else None
    end_iso = time.end_iso if isinstance(time, RangeTime) else None
    return EventSummary(
        event_type=event.event_type,
        base_type=event.base_type,
        title_text=plain_text(event.title) if event.title is not None else None,
        start_iso=start_iso,
        end_iso=end_iso,
        date_iso=event.date_context.date_iso if event.date_context else None,
        warnings=list(event.warnings),
    )


def summarize_events(root: Root) -> list[EventSummary]:
    return [summarize_event(event) for event in iter_events(root)]

"""Structural checks on a parsed header.  Warnings only, never errors."""

from __future__ import annotations

from itmd.models.event import Header

MISSING_EVENT_TYPE = "Missing event type"


def validate_header(header: Header) -> tuple[Header, list[str]]:
    """Return *header* unchanged together with any structural warnings."""
    warnings: list[str] = []
    if not header.event_type:
        warnings.append(MISSING_EVENT_TYPE)
    return header, warnings

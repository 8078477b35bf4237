"""Pydantic models for parsed itinerary headers and event bodies.

Defines the tagged unions produced by the header pipeline:

- time descriptors -- :class:`NoTime`, :class:`MarkerTime`,
  :class:`PointTime`, :class:`RangeTime` (discriminated on ``kind``);
- destination descriptors -- :class:`SingleDestination`,
  :class:`DashPairDestination`, :class:`FromToDestination`;
- body segments -- :class:`InlineSegment`, :class:`MetaSegment`,
  :class:`ListSegment`;
- :class:`Header` -- the parser/normalizer output carrying offset
  provenance in :class:`HeaderPositions`.

Each variant carries only its own fields, so e.g. a single-place
destination can never hold ``vias`` and a marker time can never hold an
ISO timestamp.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from itmd.models.inline import RichSpan

# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


class TimePoint(BaseModel):
    """A clock time as written in a header bracket.

    Attributes:
        hour: Hour as written (not range-checked here; the normalizer
            rejects impossible values).
        minute: Minute as written.
        timezone: Raw ``@zone`` token, or ``None``.
        day_offset: ``+N`` suffix, or ``None``.
    """

    model_config = ConfigDict(frozen=True)

    hour: int
    minute: int
    timezone: str | None = None
    day_offset: int | None = None


class NoTime(BaseModel):
    """Empty brackets: the event has no time at all."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class MarkerTime(BaseModel):
    """A coarse ``am``/``pm`` marker."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["marker"] = "marker"
    marker: Literal["am", "pm"]


class PointTime(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["point"] = "point"
    start: TimePoint
    start_iso: str | None = None


class RangeTime(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["range"] = "range"
    start: TimePoint
    end: TimePoint
    start_iso: str | None = None
    end_iso: str | None = None


EventTime = Annotated[
    Union[NoTime, MarkerTime, PointTime, RangeTime],
    Field(discriminator="kind"),
]

# ---------------------------------------------------------------------------
# Destination
# ---------------------------------------------------------------------------


class SingleDestination(BaseModel):
    """A single place (``:: Cafe`` or ``at Cafe``)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["single"] = "single"
    at: RichSpan


class DashPairDestination(BaseModel):
    """A route written with dashes: ``A - B`` or ``A - X - B``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["dashPair"] = "dashPair"
    from_: RichSpan = Field(alias="from")
    to: RichSpan
    vias: list[RichSpan] = Field(default_factory=list)


class FromToDestination(BaseModel):
    """A route written with words: ``from A via X to B``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["fromTo"] = "fromTo"
    from_: RichSpan = Field(alias="from")
    to: RichSpan
    vias: list[RichSpan] = Field(default_factory=list)


Destination = Annotated[
    Union[SingleDestination, DashPairDestination, FromToDestination],
    Field(discriminator="kind"),
]

# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------


class TextSpan(BaseModel):
    """Half-open ``[start, end)`` character range into the header line."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int


class TimePositions(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: TextSpan | None = None
    end: TextSpan | None = None
    marker: TextSpan | None = None


class DestinationPositions(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    at: TextSpan | None = None
    from_: TextSpan | None = Field(default=None, alias="from")
    to: TextSpan | None = None
    vias: list[TextSpan] = Field(default_factory=list)


class HeaderPositions(BaseModel):
    """Offset provenance for every resolved header field."""

    model_config = ConfigDict(frozen=True)

    title: TextSpan | None = None
    destination: DestinationPositions | None = None
    time: TimePositions | None = None


class Header(BaseModel):
    """A parsed (and possibly normalized) event header line.

    Attributes:
        event_type: First token of the head, e.g. ``"flight"``; ``None``
            when the header has nothing after the time brackets.
        title: Rich title, or ``None`` when the head has no residual
            text.  Never defaulted to the event type.
        destination: Resolved destination, or ``None``.
        time: Time descriptor, or ``None`` when the brackets held
            something that is neither a time nor ``am``/``pm``.
        positions: Character ranges of each field in the header line.
        warnings: Non-fatal parse/validation warnings.
    """

    model_config = ConfigDict(frozen=True)

    event_type: str | None = None
    title: RichSpan | None = None
    destination: Destination | None = None
    time: EventTime | None = None
    positions: HeaderPositions = Field(default_factory=HeaderPositions)
    warnings: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Body segments
# ---------------------------------------------------------------------------


class MetaEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    value: RichSpan


class InlineSegment(BaseModel):
    """A free paragraph inside the event block."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["inline"] = "inline"
    content: RichSpan


class MetaSegment(BaseModel):
    """A run of consecutive ``key: value`` list items.

    Duplicate keys stay as separate entries, in source order.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["meta"] = "meta"
    entries: list[MetaEntry] = Field(default_factory=list)


class ListSegment(BaseModel):
    """A run of consecutive plain (non key:value) list items."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["list"] = "list"
    items: list[RichSpan] = Field(default_factory=list)
    ordered: bool = False
    start: int | None = None


BodySegment = Annotated[
    Union[InlineSegment, MetaSegment, ListSegment],
    Field(discriminator="kind"),
]

"""Header parser for itinerary event lines.

Parses lines in the format::

    [TIME] TYPE [TITLE] [SEP DESTINATION]

where ``TIME`` is ``[]``, ``[am]``/``[pm]``, ``[HH:MM(@tz)(+N)]`` or two
such brackets joined by ``-``, and the destination is introduced by
``::``, ``at`` or ``from ... to ...``.  Examples::

    [08:00] flight IB6800 :: NRT - MAD
    [am] activity walk from Park via Bridge to Museum
    [06:30] breakfast Traditional Japanese breakfast at hotel
    [23:30] - [00:30+1] train night train :: Paris - Nice

Every span (title, places) is cut from the parallel inline forest with
:func:`~itmd.inline.slice_inline`, so links and emphasis survive.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from itmd.inline import normalize_soft_breaks, plain_text, slice_inline, text_span
from itmd.models.event import (
    DashPairDestination,
    DestinationPositions,
    FromToDestination,
    Header,
    HeaderPositions,
    MarkerTime,
    NoTime,
    PointTime,
    RangeTime,
    SingleDestination,
    TextSpan,
    TimePoint,
    TimePositions,
)
from itmd.models.inline import InlineNode, RichSpan
from itmd.pipeline.lex import LexTokens, Separator
from itmd.timezones import normalize_timezone

logger = logging.getLogger(__name__)

INVALID_TIME_WARNING = "invalid-time"

# A leading "[...]" optionally followed by "- [...]"; brackets never span
# lines.  Trailing whitespace (including a wrapped line break) is consumed.
_TIME_SPAN_RE = re.compile(r"\[([^\]\n]*)\](?:[ \t]*-[ \t]*\[([^\]\n]*)\])?\s*")
_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})(.*)$")
_TZ_CHARS_RE = re.compile(r"^[A-Za-z0-9_./:+-]+$")
_DAY_OFFSET_RE = re.compile(r"^\+(\d+)$")
_TRAILING_OFFSET_RE = re.compile(r"^(.+?)\+(\d+)$")
_EVENT_TYPE_RE = re.compile(r"\S+")


# ---------------------------------------------------------------------------
# Time span
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimeSpan:
    """Result of matching the leading time brackets.

    Attributes:
        time: Parsed descriptor, or ``None`` when the bracket content is
            not a time (``invalid`` is then set).
        consumed: Offset just past the brackets and trailing whitespace;
            ``0`` when the line has no leading bracket.
        start: Range of the first bracket's content.
        end: Range of the second bracket's content, if any.
        invalid: ``True`` when some bracket content could not be parsed.
    """

    time: NoTime | MarkerTime | PointTime | RangeTime | None
    consumed: int
    start: TextSpan | None = None
    end: TextSpan | None = None
    invalid: bool = False

    @property
    def positions(self) -> TimePositions | None:
        if self.start is None and self.end is None:
            return None
        marker = self.start if isinstance(self.time, MarkerTime) else None
        return TimePositions(start=self.start, end=self.end, marker=marker)


def parse_time_token(raw: str) -> TimePoint | None:
    """Parse ``HH:MM``, ``HH:MM@tz``, ``HH:MM+N`` or ``HH:MM@tz+N``.

    A trailing ``+N`` after a timezone is a day offset unless the zone
    including it resolves (``UTC+9`` is a zone, ``Asia/Tokyo+1`` is
    Tokyo plus one day).
    """
    match = _CLOCK_RE.match(raw.strip())
    if not match:
        return None
    hour, minute, rest = int(match.group(1)), int(match.group(2)), match.group(3)

    timezone: str | None = None
    day_offset: int | None = None
    if rest.startswith("@"):
        zone = rest[1:]
        if not zone or not _TZ_CHARS_RE.match(zone):
            return None
        split = _TRAILING_OFFSET_RE.match(zone)
        if split and normalize_timezone(zone) is None:
            zone, day_offset = split.group(1), int(split.group(2))
        timezone = zone
    elif rest:
        offset = _DAY_OFFSET_RE.match(rest)
        if not offset:
            return None
        day_offset = int(offset.group(1))

    return TimePoint(hour=hour, minute=minute, timezone=timezone, day_offset=day_offset)


def parse_time_span(line: str, pos: int = 0) -> TimeSpan:
    """Match the time brackets at *pos* of *line*.

    Empty brackets give :class:`NoTime`, ``am``/``pm`` (any case) give
    :class:`MarkerTime`, one or two clock tokens give :class:`PointTime`
    or :class:`RangeTime`.  Unparseable content gives ``time=None`` with
    ``invalid=True``; the brackets still count as consumed.
    """
    match = _TIME_SPAN_RE.match(line, pos)
    if not match:
        return TimeSpan(time=None, consumed=0)

    start_raw = match.group(1)
    end_raw = match.group(2)
    start_pos = TextSpan(start=match.start(1), end=match.end(1)) if start_raw else None
    end_pos = TextSpan(start=match.start(2), end=match.end(2)) if end_raw else None
    consumed = match.end()

    start_text = start_raw.strip()
    if start_text.lower() in ("am", "pm"):
        marker = MarkerTime(marker=start_text.lower())
        return TimeSpan(time=marker, consumed=consumed, start=start_pos, end=end_pos)

    if not start_text:
        return TimeSpan(time=NoTime(), consumed=consumed, start=start_pos, end=end_pos)

    start = parse_time_token(start_text)
    if start is None:
        logger.debug("Unparseable time bracket %r", start_raw)
        return TimeSpan(time=None, consumed=consumed, start=start_pos, end=end_pos, invalid=True)

    end_text = (end_raw or "").strip()
    end = parse_time_token(end_text) if end_text else None
    invalid = bool(end_text) and end is None
    if end is not None:
        time: PointTime | RangeTime = RangeTime(start=start, end=end)
    else:
        time = PointTime(start=start)
    return TimeSpan(time=time, consumed=consumed, start=start_pos, end=end_pos, invalid=invalid)


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------


def _trim(text: str, start: int, end: int) -> tuple[int, int]:
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end


class _Slicer:
    """Cuts trimmed character ranges of the header into rich spans."""

    def __init__(self, text: str, forest: Sequence[InlineNode] | None) -> None:
        self.text = text
        self.forest = forest

    def span(self, start: int, end: int) -> RichSpan:
        if end <= start:
            return []
        if self.forest is None:
            nodes = text_span(self.text[start:end])
        else:
            nodes = slice_inline(self.forest, start, end)
        return normalize_soft_breaks(nodes)


@dataclass(frozen=True)
class _Route:
    places: list[tuple[int, int]]

    @property
    def origin(self) -> tuple[int, int]:
        return self.places[0]

    @property
    def terminus(self) -> tuple[int, int]:
        return self.places[-1]

    @property
    def vias(self) -> list[tuple[int, int]]:
        return self.places[1:-1]


def _segments(text: str, start: int, end: int, cuts: list[Separator]) -> list[tuple[int, int]]:
    """Split ``[start, end)`` at each separator in *cuts* (trimmed pieces)."""
    pieces: list[tuple[int, int]] = []
    cursor = start
    for sep in cuts:
        pieces.append(_trim(text, cursor, sep.index))
        cursor = sep.index + sep.length
    pieces.append(_trim(text, cursor, end))
    return pieces


def _from_to_route(
    text: str,
    from_sep: Separator,
    to_sep: Separator,
    end: int,
    seps: list[Separator],
) -> _Route:
    from_end = from_sep.index + from_sep.length
    vias = [s for s in seps if s.kind == "via" and from_end <= s.index < to_sep.index]
    places = _segments(text, from_end, to_sep.index, vias)
    places.append(_trim(text, to_sep.index + to_sep.length, end))
    return _Route(places=places)


def _find_from_to(seps: list[Separator], start: int, end: int) -> tuple[Separator, Separator] | None:
    """Find a ``from`` separator followed by a ``to`` inside ``[start, end)``."""
    inside = [s for s in seps if start <= s.index < end]
    for i, sep in enumerate(inside):
        if sep.kind != "from":
            continue
        to_sep = next((s for s in inside[i + 1 :] if s.kind == "to"), None)
        if to_sep is not None:
            return sep, to_sep
    return None


def _dash_route(text: str, start: int, end: int, seps: list[Separator]) -> _Route | None:
    dashes = [s for s in seps if s.kind == "routeDash" and start <= s.index < end]
    if not dashes:
        return None
    places = _segments(text, start, end, dashes)
    if places[0][0] >= places[0][1] or places[-1][0] >= places[-1][1]:
        return None
    return _Route(places=places)


def _choose_split(seps: list[Separator]) -> Separator | None:
    """First ``::``/``at``, or ``from`` with a later ``to``, in line order."""
    for i, sep in enumerate(seps):
        if sep.kind in ("doublecolon", "at"):
            return sep
        if sep.kind == "from" and any(s.kind == "to" for s in seps[i + 1 :]):
            return sep
    return None


def parse_header(
    tokens: LexTokens,
    inline: Sequence[InlineNode] | None = None,
) -> Header:
    """Parse a lexed header line into a :class:`Header`.

    Args:
        tokens: Output of :func:`~itmd.pipeline.lex.lex_line`.
        inline: The inline forest whose flattened text is
            ``tokens.raw``.  When omitted (or inconsistent with the
            line), spans degrade to single plain-text nodes.

    Returns:
        The parsed header.  Parsing never raises; unparseable time
        brackets leave ``time`` unset and add an ``invalid-time``
        warning.
    """
    text = tokens.raw
    forest: Sequence[InlineNode] | None = inline or None
    if forest is not None and plain_text(forest) != text:
        logger.debug("Inline forest does not match header text; using plain text spans")
        forest = None
    slicer = _Slicer(text, forest)

    lead = len(text) - len(text.lstrip())
    span = parse_time_span(text, lead)
    consumed = span.consumed or lead
    warnings = [INVALID_TIME_WARNING] if span.invalid else []

    seps = [
        Separator(sep.kind, tokens.index_map(sep.index))
        for sep in tokens.seps
        if tokens.index_map(sep.index) >= consumed
    ]
    split = _choose_split(seps)

    if split is not None:
        head_start, head_end = _trim(text, consumed, split.index)
        dest_range: tuple[int, int] | None = _trim(text, split.index + split.length, len(text))
    else:
        head_start, head_end = _trim(text, consumed, len(text))
        dest_range = None

    # Head: event type, then the residual provisional title.
    event_type: str | None = None
    title_start = title_end = head_end
    type_match = _EVENT_TYPE_RE.match(text, head_start, head_end)
    if type_match:
        event_type = type_match.group(0)
        title_start, title_end = _trim(text, type_match.end(), head_end)

    route: _Route | None = None
    route_kind: str | None = None
    single: tuple[int, int] | None = None
    title_consumed = False

    if split is not None and split.kind == "from":
        to_sep = next(s for s in seps if s.kind == "to" and s.index > split.index)
        route = _from_to_route(text, split, to_sep, len(text), seps)
        route_kind = "fromTo"
    elif dest_range is not None:
        dest_start, dest_end = dest_range
        pair = _find_from_to(seps, dest_start, dest_end)
        if pair is not None:
            route = _from_to_route(text, pair[0], pair[1], dest_end, seps)
            route_kind = "fromTo"
        else:
            route = _dash_route(text, dest_start, dest_end, seps)
            if route is not None:
                route_kind = "dashPair"
            elif dest_start < dest_end:
                single = (dest_start, dest_end)
    elif title_start < title_end:
        # "[08:00] flight A - B": a bare dashed head is a route, not a title.
        route = _dash_route(text, title_start, title_end, seps)
        if route is not None:
            route_kind = "dashPair"
            title_consumed = True

    destination: SingleDestination | DashPairDestination | FromToDestination | None = None
    dest_positions: DestinationPositions | None = None
    if single is not None:
        destination = SingleDestination(at=slicer.span(*single))
        dest_positions = DestinationPositions(at=TextSpan(start=single[0], end=single[1]))
    elif route is not None:
        route_cls = FromToDestination if route_kind == "fromTo" else DashPairDestination
        destination = route_cls(
            from_=slicer.span(*route.origin),
            to=slicer.span(*route.terminus),
            vias=[slicer.span(*via) for via in route.vias],
        )
        dest_positions = DestinationPositions(
            from_=TextSpan(start=route.origin[0], end=route.origin[1]),
            to=TextSpan(start=route.terminus[0], end=route.terminus[1]),
            vias=[TextSpan(start=s, end=e) for s, e in route.vias],
        )

    title: RichSpan | None = None
    title_position: TextSpan | None = None
    if not title_consumed and title_start < title_end:
        title = slicer.span(title_start, title_end)
        if not plain_text(title).strip():
            title = None
        else:
            title_position = TextSpan(start=title_start, end=title_end)

    return Header(
        event_type=event_type,
        title=title,
        destination=destination,
        time=span.time,
        positions=HeaderPositions(
            title=title_position,
            destination=dest_positions,
            time=span.positions,
        ),
        warnings=warnings,
    )

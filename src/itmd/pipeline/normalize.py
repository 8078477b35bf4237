"""Header normalizer: timezone resolution and ISO timestamp synthesis.

Each time point resolves its timezone through a fallback chain:

1. the explicit ``@zone`` token on the point (if it coerces);
2. for a range end only, the start point's explicit token;
3. the base timezone of the enclosing date heading;
4. the policy's ``default_timezone``.

A point with nothing resolvable simply gets no ISO value.
"""

from __future__ import annotations

import logging

from itmd.models.event import Header, PointTime, RangeTime, TimePoint
from itmd.services import Services
from itmd.timezones import coerce_timezone, normalize_timezone, shift_date, to_iso

logger = logging.getLogger(__name__)


def _point_iso(
    point: TimePoint,
    date_iso: str,
    base_tz: str | None,
    inherited_tz: str | None = None,
) -> str | None:
    tz = normalize_timezone(point.timezone) or normalize_timezone(inherited_tz) or base_tz
    return to_iso(date_iso, point.hour, point.minute, tz)


def normalize_header(
    header: Header,
    date_iso: str | None = None,
    base_tz: str | None = None,
    services: Services | None = None,
) -> Header:
    """Attach ``start_iso``/``end_iso`` to point and range times.

    Args:
        header: A parsed header.
        date_iso: ``YYYY-MM-DD`` of the enclosing date heading.  Without
            it the header is returned unchanged.
        base_tz: Timezone of the enclosing date heading.
        services: Supplies the policy default timezone.

    Returns:
        A new header (or the same one when there is nothing to resolve).
    """
    time = header.time
    if not date_iso or not isinstance(time, (PointTime, RangeTime)):
        return header

    default_tz = services.policy.default_timezone if services is not None else None
    base, _ = coerce_timezone(base_tz, default_tz)

    start_iso = _point_iso(time.start, date_iso, base)
    if isinstance(time, PointTime):
        resolved = time.model_copy(update={"start_iso": start_iso})
    else:
        end_date = date_iso
        if time.end.day_offset and time.end.day_offset > 0:
            end_date = shift_date(date_iso, time.end.day_offset) or date_iso
        end_iso = _point_iso(time.end, end_date, base, inherited_tz=time.start.timezone)
        resolved = time.model_copy(update={"start_iso": start_iso, "end_iso": end_iso})

    if start_iso is None:
        logger.debug("No timezone or valid clock for header time on %s", date_iso)
    return header.model_copy(update={"time": resolved})

"""Timezone coercion and ISO-8601 timestamp synthesis.

Timezone tokens come from free text (``@Asia/Tokyo``, ``@UTC+9``,
``@+09:00``), so they are coerced rather than trusted:

1. a valid IANA name is returned unchanged;
2. ``UTC``/``GMT`` prefixed or bare numeric offsets are normalized to
   ``UTC+HH:MM`` (hours 0..14, minutes 0..59);
3. anything else is unresolved (``None``).

Resolution uses :mod:`zoneinfo` (backed by the ``tzdata`` package where
the platform has no tz database).
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_OFFSET_RE = re.compile(r"^(?:\s*(?:UTC|GMT)\s*)?([+-])(\d{1,2})(?::?(\d{1,2}))?$", re.IGNORECASE)
_CANONICAL_OFFSET_RE = re.compile(r"^UTC([+-])(\d{2}):(\d{2})$")
_BARE_UTC_RE = re.compile(r"^(UTC|GMT)$", re.IGNORECASE)


@lru_cache(maxsize=256)
def is_valid_iana_timezone(tz: str | None) -> bool:
    """Return ``True`` if *tz* names a zone in the IANA database."""
    if not isinstance(tz, str) or not tz.strip():
        return False
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        # OSError: a key naming a tz database directory (e.g. "Asia").
        return False
    return True


def normalize_timezone(tz: str | None) -> str | None:
    """Coerce a free-text timezone token, or return ``None``.

    Examples:
        >>> normalize_timezone("Europe/Madrid")
        'Europe/Madrid'
        >>> normalize_timezone("GMT+9")
        'UTC+09:00'
        >>> normalize_timezone("-0530")
        'UTC-05:30'
    """
    if not isinstance(tz, str):
        return None
    raw = tz.strip()
    if not raw:
        return None
    if is_valid_iana_timezone(raw):
        return raw

    match = _OFFSET_RE.match(raw)
    if match:
        sign = "-" if match.group(1) == "-" else "+"
        hours = int(match.group(2))
        minutes = int(match.group(3)) if match.group(3) else 0
        if 0 <= hours <= 14 and 0 <= minutes < 60:
            return f"UTC{sign}{hours:02d}:{minutes:02d}"

    if _BARE_UTC_RE.match(raw):
        return "UTC+00:00"
    return None


def coerce_timezone(tz: str | None, fallback: str | None = None) -> tuple[str | None, bool]:
    """Coerce *tz*, falling back to a (coerced) *fallback*.

    Returns:
        ``(resolved, valid)`` where ``resolved`` is the first of *tz*,
        *fallback* that coerces, and ``valid`` reports whether *tz*
        itself did.
    """
    primary = normalize_timezone(tz)
    if primary is not None:
        return primary, True
    return normalize_timezone(fallback), False


def resolve_tzinfo(tz: str) -> tzinfo | None:
    """Turn a coerced timezone string into a :class:`~datetime.tzinfo`."""
    match = _CANONICAL_OFFSET_RE.match(tz)
    if match:
        delta = timedelta(hours=int(match.group(2)), minutes=int(match.group(3)))
        return timezone(-delta if match.group(1) == "-" else delta)
    if is_valid_iana_timezone(tz):
        return ZoneInfo(tz)
    return None


def shift_date(date_iso: str, days: int) -> str | None:
    """Advance a ``YYYY-MM-DD`` string by *days* calendar days."""
    try:
        base = date.fromisoformat(date_iso)
    except ValueError:
        return None
    return (base + timedelta(days=days)).isoformat()


def to_iso(
    date_iso: str | None,
    hour: int | None,
    minute: int | None,
    tz: str | None,
) -> str | None:
    """Combine a date, clock time and timezone into an ISO-8601 string.

    Seconds are suppressed and the UTC offset is always included, e.g.
    ``"2025-03-15T08:30+01:00"``.  Any missing or impossible input
    (no date, no timezone, ``25:00``) yields ``None``.
    """
    if not date_iso or hour is None or minute is None or not tz:
        return None
    zone = resolve_tzinfo(tz)
    if zone is None:
        return None
    try:
        day = date.fromisoformat(date_iso)
        moment = datetime(day.year, day.month, day.day, hour, minute, tzinfo=zone)
    except ValueError:
        return None
    return moment.isoformat(timespec="minutes")

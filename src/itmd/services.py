"""Pipeline policy and services container.

A :class:`Services` instance is created once per pipeline run and passed
to every stage.  It carries the resolved :class:`Policy` and the
"shadow" hook used by the lexer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

logger = logging.getLogger(__name__)

# Legacy option name -> current Policy field.  Scheduled for removal.
_DEPRECATED_OPTIONS: dict[str, str] = {
    "tz_fallback": "default_timezone",
    "currency_fallback": "default_currency",
}
_DEPRECATION_REMOVAL = "0.2.0"


@dataclass(frozen=True)
class Shadow:
    """A scan-friendly view of a header line.

    Attributes:
        text: The shadow text the lexer scans.
        index_map: Maps an index in ``text`` back to the raw line.
    """

    text: str
    index_map: Callable[[int], int]


def identity_shadow(line: str) -> Shadow:
    """Default shadow: the line itself, with an identity index map."""
    return Shadow(text=line, index_map=lambda idx: idx)


@dataclass(frozen=True)
class Policy:
    """Options that shape a pipeline run.

    Attributes:
        default_timezone: Fallback timezone when neither the header
            nor the date heading resolves one.
        default_currency: Currency for amounts written without one.
        allowed_url_schemes: Link schemes downstream renderers may
            follow.  Not used by the transform itself.
        am_hour: Nominal hour of an ``am`` marker, for consumers.
        pm_hour: Nominal hour of a ``pm`` marker, for consumers.
    """

    default_timezone: str | None = None
    default_currency: str | None = None
    allowed_url_schemes: tuple[str, ...] = ("http", "https", "mailto")
    am_hour: int = 9
    pm_hour: int = 15


@dataclass(frozen=True)
class Services:
    policy: Policy = field(default_factory=Policy)
    make_shadow: Callable[[str], Shadow] = identity_shadow


def make_default_services(policy: Policy | None = None, **overrides: Any) -> Services:
    """Build a :class:`Services` container.

    Args:
        policy: Base policy; defaults to :class:`Policy` defaults.
        **overrides: Individual policy fields to override.  The legacy
            names ``tz_fallback`` and ``currency_fallback`` are mapped to
            ``default_timezone``/``default_currency`` with a deprecation
            warning.  ``None`` values are ignored.

    Returns:
        A ready-to-use :class:`Services`.

    Raises:
        TypeError: If an override names no policy field.
    """
    base = policy or Policy()
    updates: dict[str, Any] = {}
    for name, value in overrides.items():
        if name in _DEPRECATED_OPTIONS:
            target = _DEPRECATED_OPTIONS[name]
            logger.warning(
                "Policy option %r is deprecated and will be removed in %s; use %r instead",
                name,
                _DEPRECATION_REMOVAL,
                target,
            )
            # An explicit new-style value wins over its legacy alias.
            if target in overrides:
                continue
            name = target
        if value is None:
            continue
        if name == "allowed_url_schemes":
            value = tuple(value)
        updates[name] = value
    return Services(policy=replace(base, **updates))

"""Configuration loading for itmd.

Reads settings from environment variables (with .env support via python-dotenv)
and validates them before they are turned into a pipeline :class:`Policy`.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

from dotenv import load_dotenv

from itmd.services import Policy
from itmd.timezones import normalize_timezone

_DEFAULT_SCHEMES = ("http", "https", "mailto")
_CURRENCY_RE = re.compile(r"^[A-Za-z]{3}$")


class ConfigError(Exception):
    """Raised when configuration values are invalid."""


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        log_level: Logging level (default ``"INFO"``).
        default_timezone: Fallback timezone for header times, or ``None``.
        default_currency: Currency assumed for bare price amounts, or
            ``None``.
        allowed_url_schemes: Link schemes renderers may follow.
    """

    log_level: str = "INFO"
    default_timezone: str | None = None
    default_currency: str | None = None
    allowed_url_schemes: tuple[str, ...] = _DEFAULT_SCHEMES

    def to_policy(self) -> Policy:
        """Build the pipeline :class:`Policy` for these settings."""
        return Policy(
            default_timezone=self.default_timezone,
            default_currency=self.default_currency,
            allowed_url_schemes=self.allowed_url_schemes,
        )


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Calls :func:`dotenv.load_dotenv` so a ``.env`` file in the project root
    is picked up automatically.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ConfigError: If any variable holds an invalid value (a timezone
            that does not resolve, a currency that is not a three-letter
            code, an empty scheme list).  The error message names **all**
            invalid variables.
    """
    load_dotenv()

    values: dict[str, object] = {}
    invalid: list[str] = []

    log_level = os.environ.get("LOG_LEVEL", "").strip()
    if log_level:
        values["log_level"] = log_level

    timezone = os.environ.get("ITMD_DEFAULT_TIMEZONE", "").strip()
    if timezone:
        resolved = normalize_timezone(timezone)
        if resolved is None:
            invalid.append("ITMD_DEFAULT_TIMEZONE")
        else:
            values["default_timezone"] = resolved

    currency = os.environ.get("ITMD_DEFAULT_CURRENCY", "").strip()
    if currency:
        if not _CURRENCY_RE.match(currency):
            invalid.append("ITMD_DEFAULT_CURRENCY")
        else:
            values["default_currency"] = currency.upper()

    schemes_raw = os.environ.get("ITMD_ALLOWED_URL_SCHEMES")
    if schemes_raw is not None:
        schemes = tuple(s.strip().lower() for s in schemes_raw.split(",") if s.strip())
        if not schemes:
            invalid.append("ITMD_ALLOWED_URL_SCHEMES")
        else:
            values["allowed_url_schemes"] = schemes

    if invalid:
        names = ", ".join(invalid)
        raise ConfigError(f"Invalid environment variables: {names}")

    return Settings(**values)

"""Pydantic models for normalized price metadata.

The price normalizer never converts or sums amounts; these models only
describe what was recognized in a single ``price:``/``cost:`` value.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

PriceSource = Literal["inline", "defaultCurrency", "symbolInferred"]


class MoneyFragment(BaseModel):
    """A recognized currency amount.

    Attributes:
        raw: The (stripped) input line the fragment came from.
        currency: ISO 4217 code, upper-case; empty when undetected.
        amount: Canonical decimal string (``"1234.56"``), empty when the
            amount could not be normalized.
        scale: Minor-unit digits of ``currency`` (``2`` for EUR, ``0``
            for JPY); ``2`` when the code is unknown.
        source: How the currency was determined.
        symbol: The currency symbol as written, if one was used.
        warnings: Fragment-level warnings.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["money"] = "money"
    raw: str
    currency: str
    amount: str
    scale: int = 2
    source: PriceSource | None = None
    symbol: str | None = None
    warnings: list[str] = Field(default_factory=list)


class NumberToken(BaseModel):
    """A bare number for which no currency could be determined."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["number"] = "number"
    raw: str
    normalized: str


PriceToken = Annotated[Union[MoneyFragment, NumberToken], Field(discriminator="kind")]


class PriceFlags(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_math: bool = False
    cross_currency: bool = False
    has_number_only_term: bool = False


class PriceResult(BaseModel):
    """Outcome of normalizing one price line.

    Attributes:
        raw_line: The input exactly as received.
        tokens: Zero or one recognized token.
        flags: Shape flags for downstream evaluators.
        currencies: Currencies seen in the line.
        money_count: Number of :class:`MoneyFragment` tokens.
        needs_evaluation: Always ``True``; evaluation happens downstream.
        warnings: Advisory warnings (``empty``, ``unrecognized``, ...).
    """

    model_config = ConfigDict(frozen=True)

    raw_line: str
    tokens: list[PriceToken] = Field(default_factory=list)
    flags: PriceFlags = Field(default_factory=PriceFlags)
    currencies: list[str] = Field(default_factory=list)
    money_count: int = 0
    needs_evaluation: bool = True
    warnings: list[str] = Field(default_factory=list)

    @property
    def money(self) -> MoneyFragment | None:
        """The recognized money fragment, if any."""
        for token in self.tokens:
            if isinstance(token, MoneyFragment):
                return token
        return None


class PriceEntry(BaseModel):
    """A ``price``/``cost`` metadata entry together with its normalization."""

    model_config = ConfigDict(frozen=True)

    key: str
    raw: str
    price: PriceResult

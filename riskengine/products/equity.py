"""Equity derivatives: index/stock futures and vanilla options."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class OptionType(str, Enum):
    CALL = "call"
    PUT = "put"


@dataclass(frozen=True)
class Future:
    """
    Equity or index future.
    F = spot * DF_dividend(T) * DF_borrowing(T) / DF_discount(T);
    value = unit_notional * (F - average_trade_price).
    Without `dividend_curve` the underlying is assumed to pay no dividends;
    without `borrowing_curve` stock borrowing is free.
    """

    id: str
    currency: str
    underlying: str
    maturity: date
    discount_curve: str
    dividend_curve: str | None = None
    borrowing_curve: str | None = None
    unit_notional: float = 1.0
    average_trade_price: float = 0.0


@dataclass(frozen=True)
class VanillaOption:
    """
    European call/put on an equity underlying (Black-Scholes).
    Volatility is read from surface `volatility` at (time to maturity, strike).

    An option paid in `currency` on an underlying quoted in another
    `underlying_currency` is a quanto: its forward is adjusted by the
    correlation between the underlying and the `underlying_currency` +
    `currency` pair times the FX volatility read from `fx_volatility`.
    """

    id: str
    currency: str
    underlying: str
    strike: float
    maturity: date
    option_type: OptionType
    discount_curve: str
    volatility: str
    dividend_curve: str | None = None
    borrowing_curve: str | None = None
    unit_notional: float = 1.0
    underlying_currency: str | None = None
    fx_volatility: str | None = None

    def __post_init__(self) -> None:
        if self.strike <= 0:
            raise ValueError("strike must be positive")
        object.__setattr__(self, "option_type", OptionType(self.option_type))
        if self.quanto_pair is not None and not self.fx_volatility:
            raise ValueError(
                f"quanto option {self.id} on a {self.underlying_currency} underlying "
                "needs fx_volatility"
            )

    @property
    def quanto_pair(self) -> str | None:
        """FX pair (underlying currency + payment currency) of a quanto, else None."""
        if self.underlying_currency and self.underlying_currency != self.currency:
            return f"{self.underlying_currency}{self.currency}"
        return None

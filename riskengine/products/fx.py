"""FX products (instrument data only; pricing via PricerDispatch).

Pair codes follow market quoting: `fx_pair="USDKRW"` is the number of KRW
(quote currency) per 1 USD (base currency). Values are in the quote currency.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class FxSpot:
    """Holding of `notional_base` units of the base currency, valued at spot."""

    id: str
    currency: str
    base_currency: str
    fx_pair: str
    notional_base: float


@dataclass(frozen=True)
class FxForward:
    """
    FX forward: buy `notional_base` base currency at `strike` (quote per base).
    Valuation uses covered interest rate parity (CIP): F = spot * DF_base(T) / DF_quote(T),
    PV in quote currency = notional_base * DF_quote(T) * (F - strike).
    """

    id: str
    currency: str
    base_currency: str
    fx_pair: str
    maturity: date
    notional_base: float
    strike: float
    base_curve: str
    quote_curve: str


@dataclass(frozen=True)
class FxSwap:
    """
    FX swap: buy `notional_base` at `near_rate` on `near_date`, sell it back at
    `far_rate` on `far_date`. Legs on or before the evaluation date are settled
    and excluded. Use a negative notional for the sell/buy direction.
    """

    id: str
    currency: str
    base_currency: str
    fx_pair: str
    near_date: date
    far_date: date
    notional_base: float
    near_rate: float
    far_rate: float
    base_curve: str
    quote_curve: str

    def __post_init__(self) -> None:
        if self.far_date <= self.near_date:
            raise ValueError("far_date must be after near_date")


@dataclass(frozen=True)
class FxFuture:
    """
    Exchange traded FX futures (e.g. KRX USD futures, quoted in KRW per USD).
    F = fx * DF_underlying(T) / DF_futures(T); value = unit_notional * (F - average_trade_price).
    """

    id: str
    currency: str
    underlying_currency: str
    fx_pair: str
    maturity: date
    underlying_curve: str
    futures_curve: str
    unit_notional: float = 1.0
    average_trade_price: float = 0.0

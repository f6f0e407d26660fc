"""Base pricer abstract class for instrument pricing implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Iterable, Mapping

from riskengine.interfaces import Instrument
from riskengine.parameters import Parameters
from riskengine.result import Cashflow


@dataclass(frozen=True)
class PricingOutput:
    """
    Price (in the instrument currency) and expected future cashflows.

    `fx_exposure` is the present value held in each currency, each amount in
    units of that currency; pricers of single currency products leave it empty.
    """

    price: float
    cashflows: tuple[Cashflow, ...] = ()
    fx_exposure: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fx_exposure", MappingProxyType(dict(self.fx_exposure)))


class BasePricer(ABC):
    """Abstract base class for instrument pricers.

    Subclasses implement can_price() and price() for specific instrument types.
    Pricers hold no mutable state: the same instance is called concurrently
    with different (baseline or bumped) Parameters views.
    """

    # types this pricer handles, for introspection (PricerDispatch.supported_types)
    instrument_types: tuple[type, ...] = ()

    @abstractmethod
    def can_price(self, instrument: Instrument) -> bool:
        """Return True if this pricer handles the instrument type."""
        ...

    @abstractmethod
    def price(self, instrument: Instrument, parameters: Parameters) -> PricingOutput:
        """Compute price and cashflows."""
        ...


def net_cashflows(flows: Iterable[tuple[date, str, float]]) -> tuple[Cashflow, ...]:
    """Net amounts paid on the same date in the same currency, ordered by date."""
    totals: dict[tuple[date, str], float] = defaultdict(float)
    for payment_date, currency, amount in flows:
        totals[(payment_date, currency)] += amount
    return tuple(
        sorted(Cashflow(d, ccy, amount) for (d, ccy), amount in totals.items())
    )

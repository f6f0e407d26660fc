"""
Pricer dispatch: routes each instrument to the pricer registered for its type.

Design intent:
- Instruments/products are **data only** (no market access, no pricing methods).
- Dispatch uses a **registry of pricers**, enabling:
  - Adding new instruments without modifying Engine code (Open/Closed Principle)
  - Swapping pricing models per instrument type
  - Third-party pricer plugins
"""

from __future__ import annotations

import math

from riskengine.errors import NumericalFailure, UnsupportedInstrument
from riskengine.interfaces import Instrument
from riskengine.parameters import Parameters
from riskengine.pricers import BasePricer, PricingOutput


class PricerDispatch:
    """
    Registry-based dispatch.

    Pricers are registered at initialization and dispatched based on
    can_price() checks. First matching pricer wins. The registry is only
    mutated before a run; dispatch itself is read-only and thread safe.
    """

    def __init__(self) -> None:
        self._pricers: list[BasePricer] = []

    def register(self, pricer: BasePricer) -> None:
        """Register a pricer for dispatch.

        Order matters: first matching pricer wins.
        """
        self._pricers.append(pricer)

    def pricer_for(self, instrument: Instrument) -> BasePricer:
        for pricer in self._pricers:
            if pricer.can_price(instrument):
                return pricer
        raise UnsupportedInstrument(instrument)

    def supports(self, instrument: Instrument) -> bool:
        return any(pricer.can_price(instrument) for pricer in self._pricers)

    def supported_types(self) -> frozenset[type]:
        """Instrument types the registered pricers declare."""
        return frozenset(t for pricer in self._pricers for t in pricer.instrument_types)

    def price(self, instrument: Instrument, parameters: Parameters) -> PricingOutput:
        """
        Dispatch to the appropriate pricer. A NaN/Inf price, cashflow amount or
        FX exposure raises NumericalFailure.
        """
        output = self.pricer_for(instrument).price(instrument, parameters)
        where = f"{type(instrument).__name__} {getattr(instrument, 'id', '?')}"
        if not math.isfinite(output.price):
            raise NumericalFailure(f"non-finite price {output.price} for {where}")
        for cf in output.cashflows:
            if not math.isfinite(cf.amount):
                raise NumericalFailure(
                    f"non-finite cashflow {cf.amount} on {cf.payment_date} for {where}"
                )
        for currency, amount in output.fx_exposure.items():
            if not math.isfinite(amount):
                raise NumericalFailure(
                    f"non-finite {currency} FX exposure {amount} for {where}"
                )
        return output


def create_default_dispatch() -> PricerDispatch:
    """Factory for default dispatch with all built-in pricers registered."""
    from riskengine.pricers import (
        BondPricer,
        CrossCurrencySwapPricer,
        FuturesPricer,
        FxForwardPricer,
        FxFuturePricer,
        FxSpotPricer,
        FxSwapPricer,
        KtbFuturePricer,
        SwapPricer,
        VanillaOptionPricer,
    )

    dispatch = PricerDispatch()
    dispatch.register(BondPricer())
    dispatch.register(KtbFuturePricer())
    dispatch.register(FuturesPricer())
    dispatch.register(VanillaOptionPricer())
    dispatch.register(FxSpotPricer())
    dispatch.register(FxForwardPricer())
    dispatch.register(FxSwapPricer())
    dispatch.register(FxFuturePricer())
    dispatch.register(SwapPricer())
    dispatch.register(CrossCurrencySwapPricer())
    return dispatch

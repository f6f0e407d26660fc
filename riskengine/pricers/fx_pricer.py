"""
Pricers for FX spot, forwards, swaps and futures (CIP-based valuation).

Each pricer also reports its FX exposure: the present value held in the base
(or underlying) currency and in the quote currency, each in its own units, so
that base exposure * spot + quote exposure is the price.
"""

from __future__ import annotations

from riskengine.interfaces import Instrument
from riskengine.parameters import Parameters
from riskengine.pricers.base import BasePricer, PricingOutput, net_cashflows
from riskengine.products.fx import FxForward, FxFuture, FxSpot, FxSwap


class FxSpotPricer(BasePricer):
    """Spot FX holding: value = notional_base * spot."""

    instrument_types = (FxSpot,)

    def can_price(self, instrument: Instrument) -> bool:
        return isinstance(instrument, FxSpot)

    def price(self, instrument: Instrument, parameters: Parameters) -> PricingOutput:
        assert isinstance(instrument, FxSpot)
        return PricingOutput(
            price=instrument.notional_base * parameters.fx_rate(instrument.fx_pair),
            fx_exposure={instrument.base_currency: instrument.notional_base},
        )


class FxForwardPricer(BasePricer):
    """Pricer for FX forwards (covered interest rate parity)."""

    instrument_types = (FxForward,)

    def can_price(self, instrument: Instrument) -> bool:
        return isinstance(instrument, FxForward)

    def price(self, instrument: Instrument, parameters: Parameters) -> PricingOutput:
        """
        FX forward: F = spot * DF_base(T) / DF_quote(T), PV = notional_base * DF_quote(T) * (F - strike).
        A forward that settled on or before the evaluation date is worth nothing.
        """
        assert isinstance(instrument, FxForward)
        fwd = instrument
        if fwd.maturity <= parameters.evaluation_date:
            return PricingOutput(price=0.0)
        t = parameters.time_to(fwd.maturity)
        spot = parameters.fx_rate(fwd.fx_pair)
        df_base = parameters.curve(fwd.base_curve).df(t)
        df_quote = parameters.curve(fwd.quote_curve).df(t)
        fwd_rate = spot * df_base / df_quote
        pv = fwd.notional_base * df_quote * (fwd_rate - fwd.strike)
        flows = net_cashflows(
            [
                (fwd.maturity, fwd.base_currency, fwd.notional_base),
                (fwd.maturity, fwd.currency, -fwd.notional_base * fwd.strike),
            ]
        )
        exposure = {
            fwd.base_currency: fwd.notional_base * df_base,
            fwd.currency: -fwd.notional_base * fwd.strike * df_quote,
        }
        return PricingOutput(price=pv, cashflows=flows, fx_exposure=exposure)


class FxSwapPricer(BasePricer):
    """
    FX swap as two forwards: per unsettled leg,
    PV = amount * (spot * DF_base(t) - rate * DF_quote(t)).
    """

    instrument_types = (FxSwap,)

    def can_price(self, instrument: Instrument) -> bool:
        return isinstance(instrument, FxSwap)

    def price(self, instrument: Instrument, parameters: Parameters) -> PricingOutput:
        assert isinstance(instrument, FxSwap)
        swap = instrument
        spot = parameters.fx_rate(swap.fx_pair)
        base = parameters.curve(swap.base_curve)
        quote = parameters.curve(swap.quote_curve)
        legs = [
            (swap.near_date, swap.notional_base, swap.near_rate),
            (swap.far_date, -swap.notional_base, swap.far_rate),
        ]
        base_pv = quote_pv = 0.0
        flows = []
        for pay_date, amount, rate in legs:
            if pay_date <= parameters.evaluation_date:
                continue
            t = parameters.time_to(pay_date)
            base_pv += amount * base.df(t)
            quote_pv -= amount * rate * quote.df(t)
            flows.append((pay_date, swap.base_currency, amount))
            flows.append((pay_date, swap.currency, -amount * rate))
        return PricingOutput(
            price=spot * base_pv + quote_pv,
            cashflows=net_cashflows(flows),
            fx_exposure={swap.base_currency: base_pv, swap.currency: quote_pv},
        )


class FxFuturePricer(BasePricer):
    """FX futures: F = fx * DF_underlying(T) / DF_futures(T); value = unit * (F - trade price)."""

    instrument_types = (FxFuture,)

    def can_price(self, instrument: Instrument) -> bool:
        return isinstance(instrument, FxFuture)

    def price(self, instrument: Instrument, parameters: Parameters) -> PricingOutput:
        assert isinstance(instrument, FxFuture)
        fut = instrument
        t = max(parameters.time_to(fut.maturity), 0.0)
        spot = parameters.fx_rate(fut.fx_pair)
        carry = parameters.curve(fut.underlying_curve).df(t) / parameters.curve(
            fut.futures_curve
        ).df(t)
        return PricingOutput(
            price=fut.unit_notional * (spot * carry - fut.average_trade_price),
            fx_exposure={
                fut.underlying_currency: fut.unit_notional * carry,
                fut.currency: -fut.unit_notional * fut.average_trade_price,
            },
        )

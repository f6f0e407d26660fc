"""Pricers for equity futures and European vanilla options."""

from __future__ import annotations

import math

from scipy.stats import norm

from riskengine.errors import NumericalFailure
from riskengine.interfaces import Instrument
from riskengine.market import quanto_key
from riskengine.parameters import Parameters
from riskengine.pricers.base import BasePricer, PricingOutput
from riskengine.products.equity import Future, OptionType, VanillaOption


def black_scholes(
    forward: float,
    strike: float,
    vol: float,
    t: float,
    df: float,
    option_type: OptionType,
) -> float:
    """Black (forward) form of Black-Scholes; returns the discounted premium."""
    sd = vol * math.sqrt(t)
    d1 = (math.log(forward / strike) + 0.5 * sd * sd) / sd
    d2 = d1 - sd
    if option_type is OptionType.CALL:
        return df * (forward * norm.cdf(d1) - strike * norm.cdf(d2))
    return df * (strike * norm.cdf(-d2) - forward * norm.cdf(-d1))


def _curve_df(parameters: Parameters, name: str | None, t: float) -> float:
    return parameters.curve(name).df(t) if name is not None else 1.0


def _dividend_df(parameters: Parameters, name: str | None, t: float) -> float:
    curve = parameters.dividend(name)
    return curve.df(t) if curve is not None else 1.0


def equity_forward(
    parameters: Parameters,
    spot: float,
    t: float,
    discount_curve: str,
    dividend_curve: str | None,
    borrowing_curve: str | None,
) -> tuple[float, float]:
    """(forward, discount factor) at t: S * DF_div * DF_borrow / DF_disc."""
    df = parameters.curve(discount_curve).df(t)
    carry = _dividend_df(parameters, dividend_curve, t) * _curve_df(
        parameters, borrowing_curve, t
    )
    return spot * carry / df, df


class FuturesPricer(BasePricer):
    """Equity futures: F = S * DF_div(T) * DF_borrow(T) / DF(T); value = unit * (F - trade price)."""

    instrument_types = (Future,)

    def can_price(self, instrument: Instrument) -> bool:
        return isinstance(instrument, Future)

    def price(self, instrument: Instrument, parameters: Parameters) -> PricingOutput:
        assert isinstance(instrument, Future)
        t = max(parameters.time_to(instrument.maturity), 0.0)
        fwd, _ = equity_forward(
            parameters,
            parameters.spot(instrument.underlying),
            t,
            instrument.discount_curve,
            instrument.dividend_curve,
            instrument.borrowing_curve,
        )
        return PricingOutput(
            price=instrument.unit_notional * (fwd - instrument.average_trade_price)
        )


class VanillaOptionPricer(BasePricer):
    """
    European option, Black-Scholes with continuous dividend yield.

    r, q and the borrowing cost enter through the discount, dividend and
    borrowing curve discount factors at expiry; vol is read from the surface at
    (T, strike). A quanto forward is scaled by exp(-corr * vol * fx_vol * T),
    with fx_vol read from the FX surface at (T, strike / forward). Expired
    options are worth their intrinsic value.
    """

    instrument_types = (VanillaOption,)

    def can_price(self, instrument: Instrument) -> bool:
        return isinstance(instrument, VanillaOption)

    def price(self, instrument: Instrument, parameters: Parameters) -> PricingOutput:
        assert isinstance(instrument, VanillaOption)
        spot = parameters.spot(instrument.underlying)
        strike = instrument.strike
        t = parameters.time_to(instrument.maturity)
        if t <= 0.0:
            if instrument.option_type is OptionType.CALL:
                intrinsic = max(spot - strike, 0.0)
            else:
                intrinsic = max(strike - spot, 0.0)
            return PricingOutput(price=instrument.unit_notional * intrinsic)

        if spot <= 0.0:
            raise NumericalFailure(f"non-positive spot {spot} for {instrument.underlying}")
        vol = parameters.vol(instrument.volatility).vol(t, strike)
        if vol <= 0.0:
            raise NumericalFailure(
                f"non-positive volatility {vol} on {instrument.volatility} at t={t:.4f}"
            )
        fwd, df = equity_forward(
            parameters,
            spot,
            t,
            instrument.discount_curve,
            instrument.dividend_curve,
            instrument.borrowing_curve,
        )
        pair = instrument.quanto_pair
        if pair is not None:
            fx_surface = parameters.vol(instrument.fx_volatility)  # type: ignore[arg-type]
            fx_vol = fx_surface.vol(t, strike / fwd)
            correlation = parameters.correlation(quanto_key(instrument.underlying, pair))
            fwd *= math.exp(-correlation * vol * fx_vol * t)
        premium = black_scholes(fwd, strike, vol, t, df, instrument.option_type)
        return PricingOutput(price=instrument.unit_notional * premium)

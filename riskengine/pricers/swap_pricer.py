"""Pricers for fixed-float interest rate swaps and cross currency swaps."""

from __future__ import annotations

from datetime import date

from riskengine.daycount import DayCountConvention
from riskengine.interfaces import Curve, Instrument
from riskengine.parameters import Parameters
from riskengine.pricers.base import BasePricer, PricingOutput, net_cashflows
from riskengine.products.swap import CrossCurrencySwap, InterestRateSwap
from riskengine.schedule import accrual_periods

Flows = list[tuple[date, float]]


def fixed_leg(
    notional: float,
    rate: float,
    periods: list[tuple[date, date]],
    day_count: DayCountConvention,
    parameters: Parameters,
) -> Flows:
    """
    Fixed coupons paid after the evaluation date.
    CF_i = notional * fixed_rate * accrual_i (instrument day count).
    """
    return [
        (end, notional * rate * parameters.accrual(start, end, day_count))
        for start, end in periods
        if end > parameters.evaluation_date
    ]


def float_leg(
    notional: float,
    periods: list[tuple[date, date]],
    projection: Curve,
    parameters: Parameters,
    current_fixing: float | None = None,
) -> Flows:
    """
    Float coupons paid after the evaluation date, projected on `projection`.

    Forward rate from discount factors: f = (DF(ts)/DF(te) - 1) / (te - ts).
    A period already running uses `current_fixing` when given, else the
    forward from the evaluation date.
    """
    flows = []
    for start, end in periods:
        if end <= parameters.evaluation_date:
            continue
        ts = parameters.time_to(start)
        te = parameters.time_to(end)
        if ts < 0.0:
            rate = current_fixing if current_fixing is not None else projection.forward_rate(0.0, te)
        else:
            rate = projection.forward_rate(ts, te)
        flows.append((end, notional * rate * (te - ts)))
    return flows


def leg_pv(flows: Flows, curve: Curve, parameters: Parameters) -> float:
    return sum(amount * curve.df(parameters.time_to(d)) for d, amount in flows)


class SwapPricer(BasePricer):
    """Pricer for fixed-float interest rate swaps (single or dual curve)."""

    instrument_types = (InterestRateSwap,)

    def can_price(self, instrument: Instrument) -> bool:
        return isinstance(instrument, InterestRateSwap)

    def price(self, instrument: Instrument, parameters: Parameters) -> PricingOutput:
        """
        Pay fixed: PV = PV(float leg) - PV(fixed leg); receive fixed is the negative.
        Cashflows are netted, one per remaining payment date.
        """
        assert isinstance(instrument, InterestRateSwap)
        swap = instrument
        disc = parameters.curve(swap.discount_curve)
        proj = parameters.curve(swap.projection_curve)
        periods = accrual_periods(swap.effective_date, swap.maturity, swap.frequency_months)

        fixed = fixed_leg(swap.notional, swap.fixed_rate, periods, swap.day_count, parameters)
        floating = float_leg(swap.notional, periods, proj, parameters, swap.current_fixing)
        sign = 1.0 if swap.pay_fixed else -1.0
        pv = sign * (leg_pv(floating, disc, parameters) - leg_pv(fixed, disc, parameters))
        flows = net_cashflows(
            [(d, swap.currency, -sign * a) for d, a in fixed]
            + [(d, swap.currency, sign * a) for d, a in floating]
        )
        return PricingOutput(price=pv, cashflows=flows)


class CrossCurrencySwapPricer(BasePricer):
    """
    Fixed vs float cross currency swap with initial and final notional exchange.

    Each leg is valued in its own currency on its own curve; the float leg is
    converted at spot (`fx_pair`, quote = swap currency).
    """

    instrument_types = (CrossCurrencySwap,)

    def can_price(self, instrument: Instrument) -> bool:
        return isinstance(instrument, CrossCurrencySwap)

    def price(self, instrument: Instrument, parameters: Parameters) -> PricingOutput:
        assert isinstance(instrument, CrossCurrencySwap)
        ccs = instrument
        periods = accrual_periods(ccs.effective_date, ccs.maturity, ccs.frequency_months)
        fixed = fixed_leg(ccs.fixed_notional, ccs.fixed_rate, periods, ccs.day_count, parameters)
        fixed += self._exchanges(ccs.fixed_notional, ccs, parameters)
        floating = float_leg(
            ccs.floating_notional,
            periods,
            parameters.curve(ccs.projection_curve),
            parameters,
            ccs.current_fixing,
        )
        floating += self._exchanges(ccs.floating_notional, ccs, parameters)

        # the leg we receive: initial exchange paid out, coupons and final exchange received
        fixed_sign = -1.0 if ccs.pay_fixed else 1.0
        spot = parameters.fx_rate(ccs.fx_pair)
        fixed_pv = fixed_sign * leg_pv(fixed, parameters.curve(ccs.fixed_curve), parameters)
        floating_pv = -fixed_sign * leg_pv(
            floating, parameters.curve(ccs.floating_curve), parameters
        )
        flows = net_cashflows(
            [(d, ccs.currency, fixed_sign * a) for d, a in fixed]
            + [(d, ccs.floating_currency, -fixed_sign * a) for d, a in floating]
        )
        return PricingOutput(
            price=fixed_pv + spot * floating_pv,
            cashflows=flows,
            fx_exposure={ccs.currency: fixed_pv, ccs.floating_currency: floating_pv},
        )

    @staticmethod
    def _exchanges(notional: float, ccs: CrossCurrencySwap, parameters: Parameters) -> Flows:
        flows = []
        if ccs.effective_date > parameters.evaluation_date:
            flows.append((ccs.effective_date, -notional))
        if ccs.maturity > parameters.evaluation_date:
            flows.append((ccs.maturity, notional))
        return flows

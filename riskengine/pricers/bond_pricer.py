"""Pricers for fixed coupon bonds and KTB futures."""

from __future__ import annotations

import logging
from datetime import date

from dateutil.relativedelta import relativedelta
from scipy.optimize import brentq

from riskengine.daycount import DayCountConvention
from riskengine.errors import NumericalFailure
from riskengine.interfaces import Instrument
from riskengine.parameters import Parameters
from riskengine.pricers.base import BasePricer, PricingOutput
from riskengine.products.bond import Bond, KoreaTreasuryBondFuture
from riskengine.result import Cashflow
from riskengine.schedule import accrual_periods

logger = logging.getLogger(__name__)


def bond_cashflows(bond: Bond, after: date, parameters: Parameters) -> list[Cashflow]:
    """
    Coupons and redemption paid strictly after `after`.

    Regular coupons are notional * coupon_rate * frequency_months / 12; a short
    first period (issue date off the rolled schedule) accrues by day count.
    """
    periods = accrual_periods(bond.issue_date, bond.maturity, bond.frequency_months)
    regular = bond.notional * bond.coupon_rate * bond.frequency_months / 12.0
    nominal_first_start = bond.maturity - relativedelta(
        months=bond.frequency_months * len(periods)
    )
    flows = []
    for i, (start, end) in enumerate(periods):
        if end <= after:
            continue
        if i == 0 and start != nominal_first_start:
            coupon = bond.notional * bond.coupon_rate * parameters.accrual(
                start, end, bond.day_count
            )
        else:
            coupon = regular
        amount = coupon + (bond.notional if end == bond.maturity else 0.0)
        flows.append(Cashflow(end, bond.currency, amount))
    return flows


class BondPricer(BasePricer):
    """Fixed coupon bond: PV = sum_i CF_i * DF(t_i) on the discount curve."""

    instrument_types = (Bond,)

    def can_price(self, instrument: Instrument) -> bool:
        return isinstance(instrument, Bond)

    def price(self, instrument: Instrument, parameters: Parameters) -> PricingOutput:
        assert isinstance(instrument, Bond)
        curve = parameters.curve(instrument.discount_curve)
        flows = bond_cashflows(instrument, parameters.evaluation_date, parameters)
        pv = sum(cf.amount * curve.df(parameters.time_to(cf.payment_date)) for cf in flows)
        return PricingOutput(price=pv, cashflows=tuple(flows))


def virtual_bond_price(bond_yield: float, coupon_rate: float, years: int, frequency: int) -> float:
    """KRX virtual bond price per 1 of face: coupons c/f and redemption at yield y/f."""
    n = years * frequency
    y = bond_yield / frequency
    c = coupon_rate / frequency
    res = sum(c / (1.0 + y) ** i for i in range(1, n + 1))
    return res + 1.0 / (1.0 + y) ** n


def solve_yield(price: float, amounts: list[float], times: list[float], frequency: int) -> float:
    """Yield y (compounded `frequency` times a year) repricing `amounts` at `times` to `price`."""

    def objective(y: float) -> float:
        base = 1.0 + y / frequency
        return sum(a / base ** (frequency * t) for a, t in zip(amounts, times)) - price

    try:
        return brentq(objective, -0.5, 1.0, xtol=1e-12, maxiter=200)
    except (ValueError, RuntimeError) as exc:
        logger.debug("Yield solve failed for price %s: %s", price, exc)
        raise NumericalFailure(f"bond yield root finding failed: {exc}") from exc


class KtbFuturePricer(BasePricer):
    """
    KTB futures fair value.

    Each basket bond is priced forward to the futures maturity T
    (PV of flows after T divided by DF(T)), converted to a yield measured from T,
    the yields are averaged and the virtual bond is priced at the average yield.
    """

    instrument_types = (KoreaTreasuryBondFuture,)

    def can_price(self, instrument: Instrument) -> bool:
        return isinstance(instrument, KoreaTreasuryBondFuture)

    def price(self, instrument: Instrument, parameters: Parameters) -> PricingOutput:
        assert isinstance(instrument, KoreaTreasuryBondFuture)
        ktbf = instrument
        disc = parameters.curve(ktbf.discount_curve)
        t_mat = max(parameters.time_to(ktbf.maturity), 0.0)
        df_mat = disc.df(t_mat)

        yields = []
        for bond in ktbf.underlying_bonds:
            flows = bond_cashflows(bond, ktbf.maturity, parameters)
            fwd_price = (
                sum(cf.amount * disc.df(parameters.time_to(cf.payment_date)) for cf in flows)
                / df_mat
            )
            times = [
                parameters.accrual(ktbf.maturity, cf.payment_date, DayCountConvention.ACT_365F)
                for cf in flows
            ]
            frequency = 12 // bond.frequency_months
            yields.append(solve_yield(fwd_price, [cf.amount for cf in flows], times, frequency))

        average_yield = sum(yields) / len(yields)
        fair = 100.0 * virtual_bond_price(
            average_yield, ktbf.virtual_coupon_rate, ktbf.virtual_years, ktbf.virtual_frequency
        )
        fair *= parameters.curve(ktbf.borrowing_curve).df(t_mat)
        return PricingOutput(price=ktbf.unit_notional * (fair - ktbf.average_trade_price))

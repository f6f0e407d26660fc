"""Theta: roll the evaluation date forward and reprice."""

from __future__ import annotations

import math
from datetime import date, timedelta
from functools import partial
from typing import Sequence

from riskengine.categorizer import MarketRequirements
from riskengine.config import CalculationConfiguration
from riskengine.errors import NumericalFailure
from riskengine.market import conversion_rate
from riskengine.parameters import Parameters
from riskengine.result import THETA_FACTOR, Cashflow, GreekKind
from riskengine.risk.base import BaseGreek, BumpScenario


def _per_year(dt: float, base: float, prices: Sequence[float]) -> float:
    (rolled,) = prices
    return (rolled - base) / dt


def _received(
    start: date,
    end: date,
    parameters: Parameters,
    currency: str,
    cashflows: Sequence[Cashflow],
) -> float:
    """Cashflows paid in (start, end], converted to `currency` at today's spot."""
    return math.fsum(
        cf.amount * conversion_rate(parameters.fx, cf.currency, currency)
        for cf in cashflows
        if start < cf.payment_date <= end
    )


class Theta(BaseGreek):
    """
    (P(t + dt) + C - P(t)) / dt with dt the year fraction of `theta_gap_days`
    under `theta_day_count` and C the cashflows paid in (t, t + dt], which
    leave the rolled price. Every instrument depends on the evaluation date.
    """

    kind = GreekKind.THETA

    def factors(self, requirements: MarketRequirements) -> tuple[str, ...]:
        return (THETA_FACTOR,)

    def scenario(
        self, parameters: Parameters, factor: str, config: CalculationConfiguration
    ) -> BumpScenario:
        start = parameters.evaluation_date
        end = start + timedelta(days=int(config.theta_gap_days))
        dt = parameters.day_counter(start, end, config.theta_day_count)
        if not dt > 0.0:
            raise NumericalFailure(
                f"theta interval {start} -> {end} has non-positive length {dt}"
            )
        view = parameters.with_evaluation_date(end)
        return BumpScenario(
            self.kind,
            factor,
            (view,),
            partial(_per_year, dt),
            carry=partial(_received, start, end, parameters),
        )

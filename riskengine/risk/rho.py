"""
Curve-shift Greeks: rho and rho structure on zero curves, dividend delta and
dividend structure on dividend yield curves.

All are central differences reported as the PV change per bump, so a 1bp
`rho_bump` gives the PV01.
"""

from __future__ import annotations

from typing import Sequence

from riskengine.categorizer import MarketRequirements
from riskengine.config import BumpSize, CalculationConfiguration
from riskengine.curves import ZeroRateCurve
from riskengine.errors import DataMissing
from riskengine.market import DIVIDEND
from riskengine.parameters import Parameters
from riskengine.result import GreekKind, GreekVector
from riskengine.risk.base import BaseGreek, BumpScenario, flat_bump, node_bumps, node_changes


def _central(base: float, prices: Sequence[float]) -> float:
    up, down = prices
    return (up - down) / 2.0


class Rho(BaseGreek):
    """Parallel shift of one zero curve."""

    kind = GreekKind.RHO
    bump_name = "rho_bump"

    def factors(self, requirements: MarketRequirements) -> tuple[str, ...]:
        return requirements.curves

    def curve(self, parameters: Parameters, name: str) -> ZeroRateCurve:
        return parameters.curve(name)

    def with_curve(self, parameters: Parameters, name: str, curve: ZeroRateCurve) -> Parameters:
        return parameters.with_curve(name, curve)

    def bump(self, config: CalculationConfiguration) -> BumpSize:
        return getattr(config, self.bump_name)

    def scenario(
        self, parameters: Parameters, factor: str, config: CalculationConfiguration
    ) -> BumpScenario:
        curve = self.curve(parameters, factor)
        h = flat_bump(self.bump(config), self.bump_name)
        views = (
            self.with_curve(parameters, factor, curve.bumped(h)),
            self.with_curve(parameters, factor, curve.bumped(-h)),
        )
        return BumpScenario(self.kind, factor, views, _central)


class RhoStructure(Rho):
    """Key-rate shifts: one pillar at a time, tagged by pillar time."""

    kind = GreekKind.RHO_STRUCTURE

    def scenario(
        self, parameters: Parameters, factor: str, config: CalculationConfiguration
    ) -> BumpScenario:
        curve = self.curve(parameters, factor)
        bumps = node_bumps(self.bump(config), (len(curve.pillars),), self.bump_name)
        views = []
        for i, h in enumerate(bumps):
            views.append(self.with_curve(parameters, factor, curve.bumped_pillar(i, h)))
            views.append(self.with_curve(parameters, factor, curve.bumped_pillar(i, -h)))

        def combine(base: float, prices: Sequence[float]) -> GreekVector:
            return GreekVector(curve.pillars, tuple(node_changes(base, prices, central=True)))

        return BumpScenario(self.kind, factor, tuple(views), combine)


class _DividendCurves:
    bump_name = "dividend_bump"

    def factors(self, requirements: MarketRequirements) -> tuple[str, ...]:
        return requirements.dividends

    def curve(self, parameters: Parameters, name: str) -> ZeroRateCurve:
        curve = parameters.dividend(name)
        if curve is None:
            raise DataMissing(DIVIDEND, name)
        return curve

    def with_curve(self, parameters: Parameters, name: str, curve: ZeroRateCurve) -> Parameters:
        return parameters.with_dividend(name, curve)


class DividendDelta(_DividendCurves, Rho):
    """Parallel shift of one dividend yield curve."""

    kind = GreekKind.DIVIDEND_DELTA


class DividendStructure(_DividendCurves, RhoStructure):
    """Per-pillar shifts of one dividend yield curve."""

    kind = GreekKind.DIVIDEND_STRUCTURE

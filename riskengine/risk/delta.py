"""Delta and gamma (relative spot bump, central difference)."""

from __future__ import annotations

import math
from functools import partial
from typing import Sequence

from riskengine.categorizer import MarketRequirements
from riskengine.config import CalculationConfiguration
from riskengine.errors import NumericalFailure
from riskengine.parameters import Parameters
from riskengine.result import GreekKind
from riskengine.risk.base import BaseGreek, BumpScenario


def _delta(eps: float, base: float, prices: Sequence[float]) -> float:
    up, down = prices
    return (up - down) / (2.0 * eps)


def _gamma(eps: float, base: float, prices: Sequence[float]) -> float:
    up, down = prices
    return (up - 2.0 * base + down) / (eps * eps)


class Delta(BaseGreek):
    """dP/dS: (P(S + eps) - P(S - eps)) / (2 eps), eps = delta_bump_ratio * S.

    Factors are equity underlyings and FX pairs.
    """

    kind = GreekKind.DELTA

    def factors(self, requirements: MarketRequirements) -> tuple[str, ...]:
        return requirements.spots + requirements.fx_pairs

    def bump_ratio(self, config: CalculationConfiguration) -> float:
        return config.delta_bump_ratio

    def scenario(
        self, parameters: Parameters, factor: str, config: CalculationConfiguration
    ) -> BumpScenario:
        level = parameters.underlying_level(factor)
        eps = self.bump_ratio(config) * level
        if eps == 0.0 or not math.isfinite(eps):
            raise NumericalFailure(f"zero-length spot bump for {factor} at level {level}")
        views = (
            parameters.with_underlying_level(factor, level + eps),
            parameters.with_underlying_level(factor, level - eps),
        )
        return BumpScenario(self.kind, factor, views, partial(self._combine, eps))

    _combine = staticmethod(_delta)


class Gamma(Delta):
    """d2P/dS2: (P(S + eps) - 2 P(S) + P(S - eps)) / eps^2, eps = gamma_bump_ratio * S."""

    kind = GreekKind.GAMMA

    def bump_ratio(self, config: CalculationConfiguration) -> float:
        return config.gamma_bump_ratio

    _combine = staticmethod(_gamma)

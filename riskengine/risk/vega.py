"""Vega, vega structure (per tenor) and vega matrix (per tenor and strike)."""

from __future__ import annotations

from functools import partial
from typing import Sequence

import numpy as np

from riskengine.categorizer import MarketRequirements
from riskengine.config import CalculationConfiguration, Differencing
from riskengine.curves import VolatilitySurface
from riskengine.parameters import Parameters
from riskengine.result import GreekKind, GreekMatrix, GreekVector
from riskengine.risk.base import BaseGreek, BumpScenario, flat_bump, node_bumps, node_changes


def _is_central(config: CalculationConfiguration) -> bool:
    return Differencing(config.vega_differencing) is Differencing.CENTRAL


class Vega(BaseGreek):
    """PV change for a parallel absolute shift of the whole surface."""

    kind = GreekKind.VEGA

    def factors(self, requirements: MarketRequirements) -> tuple[str, ...]:
        return requirements.vols

    def scenario(
        self, parameters: Parameters, factor: str, config: CalculationConfiguration
    ) -> BumpScenario:
        surface = parameters.vol(factor)
        h = flat_bump(config.vega_bump, "vega_bump")
        central = _is_central(config)
        views = [parameters.with_vol(factor, surface.bumped(h))]
        if central:
            views.append(parameters.with_vol(factor, surface.bumped(-h)))
        return BumpScenario(self.kind, factor, tuple(views), partial(self._combine, central))

    @staticmethod
    def _combine(central: bool, base: float, prices: Sequence[float]) -> float:
        (change,) = node_changes(base, prices, central)
        return change


class VegaStructure(Vega):
    """PV change per tenor row of the surface (all strikes of a tenor shifted)."""

    kind = GreekKind.VEGA_STRUCTURE

    def scenario(
        self, parameters: Parameters, factor: str, config: CalculationConfiguration
    ) -> BumpScenario:
        surface = parameters.vol(factor)
        bumps = node_bumps(config.vega_bump, (len(surface.tenors),), "vega_bump")
        central = _is_central(config)
        views = []
        for i, h in enumerate(bumps):
            views.append(parameters.with_vol(factor, surface.bumped_tenor(i, h)))
            if central:
                views.append(parameters.with_vol(factor, surface.bumped_tenor(i, -h)))

        def combine(base: float, prices: Sequence[float]) -> GreekVector:
            return GreekVector(surface.tenors, tuple(node_changes(base, prices, central)))

        return BumpScenario(self.kind, factor, tuple(views), combine)


class VegaMatrix(Vega):
    """PV change per (tenor, strike) node of the surface."""

    kind = GreekKind.VEGA_MATRIX

    def scenario(
        self, parameters: Parameters, factor: str, config: CalculationConfiguration
    ) -> BumpScenario:
        surface: VolatilitySurface = parameters.vol(factor)
        bumps = node_bumps(config.vega_bump, surface.shape, "vega_bump")
        central = _is_central(config)
        views = []
        for (i, j), h in np.ndenumerate(bumps):
            views.append(parameters.with_vol(factor, surface.bumped_point(i, j, h)))
            if central:
                views.append(parameters.with_vol(factor, surface.bumped_point(i, j, -h)))

        def combine(base: float, prices: Sequence[float]) -> GreekMatrix:
            changes = np.array(node_changes(base, prices, central)).reshape(surface.shape)
            return GreekMatrix(surface.tenors, surface.strikes, changes)

        return BumpScenario(self.kind, factor, tuple(views), combine)

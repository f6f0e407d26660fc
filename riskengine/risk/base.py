"""Base class for bump-and-reprice Greek builders."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from riskengine.categorizer import MarketRequirements
from riskengine.config import BumpSize, CalculationConfiguration, bump_array
from riskengine.errors import ConfigurationError, NumericalFailure
from riskengine.parameters import Parameters
from riskengine.result import Cashflow, GreekKind, GreekValue, is_finite

Combine = Callable[[float, Sequence[float]], GreekValue]
# (instrument currency, baseline cashflows) -> amount received between the views and the baseline
Carry = Callable[[str, Sequence[Cashflow]], float]


@dataclass(frozen=True)
class BumpScenario:
    """
    Bumped Parameters views for one (Greek, risk factor) and the rule that
    turns the baseline price and the prices under each view into the Greek.

    Built once per factor by the Engine and shared by every instrument of the
    group that depends on the factor. When `carry` is set, the amount it
    returns for an instrument is added to each bumped price before `combine`.
    """

    kind: GreekKind
    factor: str
    views: tuple[Parameters, ...]
    combine: Combine
    carry: Carry | None = None

    def evaluate(
        self,
        base_price: float,
        prices: Sequence[float],
        currency: str = "",
        cashflows: Sequence[Cashflow] = (),
    ) -> GreekValue:
        if len(prices) != len(self.views):
            raise ValueError("one price per bumped view expected")
        if self.carry is not None:
            received = self.carry(currency, cashflows)
            prices = [price + received for price in prices]
        value = self.combine(base_price, prices)
        if not is_finite(value):
            raise NumericalFailure(f"{self.kind.value}[{self.factor}] is not finite")
        return value


class BaseGreek(ABC):
    """Base class for Greeks computed by bump and reprice."""

    kind: GreekKind

    def enabled(self, config: CalculationConfiguration) -> bool:
        return bool(getattr(config, f"compute_{self.kind.value}"))

    @abstractmethod
    def factors(self, requirements: MarketRequirements) -> tuple[str, ...]:
        """Risk factors of this Greek among the given market requirements."""
        ...

    @abstractmethod
    def scenario(
        self, parameters: Parameters, factor: str, config: CalculationConfiguration
    ) -> BumpScenario:
        """Build the bumped views for one factor."""
        ...


def flat_bump(bump: BumpSize, name: str) -> float:
    arr = bump_array(bump)
    if arr.ndim != 0:
        raise ConfigurationError(f"{name} must be a single number for a flat Greek")
    return float(arr)


def node_bumps(bump: BumpSize, shape: tuple[int, ...], name: str) -> np.ndarray:
    """A flat bump broadcast to every node, or a per-node bump of matching shape."""
    arr = bump_array(bump)
    if arr.ndim == 0:
        return np.full(shape, float(arr))
    if arr.shape != shape:
        raise ConfigurationError(
            f"{name} has shape {arr.shape}, the bumped object has {shape} nodes"
        )
    return arr


def node_changes(base: float, prices: Sequence[float], central: bool) -> list[float]:
    """
    PV change per node from views laid out node by node: (up, down) pairs
    when `central`, one up view per node otherwise.
    """
    if central:
        return [(prices[i] - prices[i + 1]) / 2.0 for i in range(0, len(prices), 2)]
    return [p - base for p in prices]

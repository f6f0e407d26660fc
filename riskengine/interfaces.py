"""
Protocol-based interfaces for the extension points of the risk engine.

Using typing.Protocol enables structural subtyping: any class that implements
the required methods satisfies the protocol without explicit inheritance.
New curve shapes, pricers, Greeks or market data sources plug in without
modifying the Engine or the EngineGenerator.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from riskengine.categorizer import MarketRequirements
    from riskengine.config import CalculationConfiguration
    from riskengine.market import CurveData, SurfaceData
    from riskengine.parameters import Parameters
    from riskengine.pricers.base import PricingOutput
    from riskengine.result import GreekKind
    from riskengine.risk.base import BumpScenario


@runtime_checkable
class Curve(Protocol):
    """Protocol for discount / dividend curve implementations.

    Anything implementing df(), forward_rate() and the bump methods can sit in
    Parameters and be shifted by the rho and dividend Greeks.
    """

    name: str
    pillars: tuple[float, ...]

    def df(self, t: float) -> float:
        """Return discount factor to time t (year-fraction)."""
        ...

    def forward_rate(self, t1: float, t2: float) -> float:
        """Simple forward rate implied by df(t1) / df(t2) over [t1, t2]."""
        ...

    def bumped(self, bump: float) -> Curve:
        """Return new curve with parallel additive rate shift."""
        ...

    def bumped_pillar(self, index: int, bump: float) -> Curve:
        """Return new curve with one pillar's rate shifted."""
        ...


@runtime_checkable
class Instrument(Protocol):
    """Marker protocol for all priceable instruments.

    Instruments are data-only; pricing logic lives in Pricer implementations.
    Every instrument carries a unique `id` and its pricing `currency`.
    """

    id: str
    currency: str


@runtime_checkable
class MarketData(Protocol):
    """Raw, read-only market observations as seen by the ParameterDeriver."""

    @property
    def evaluation_date(self) -> date: ...

    def spot(self, name: str) -> float: ...

    def fx(self, pair: str) -> float: ...

    def curve(self, name: str) -> CurveData: ...

    def vol(self, name: str) -> SurfaceData: ...

    def dividend(self, name: str) -> CurveData: ...


class Pricer(Protocol):
    """Protocol for instrument pricing implementations.

    Each pricer handles one or more instrument types and is registered with
    the PricerDispatch.
    """

    def can_price(self, instrument: Instrument) -> bool:
        """Return True if this pricer handles the given instrument type."""
        ...

    def price(self, instrument: Instrument, parameters: Parameters) -> PricingOutput:
        """Compute price (instrument currency) and remaining cashflows."""
        ...


class Greek(Protocol):
    """Protocol for bump-and-reprice sensitivities run by the Engine."""

    kind: GreekKind

    def enabled(self, config: CalculationConfiguration) -> bool:
        """Return True if the configuration requests this Greek."""
        ...

    def factors(self, requirements: MarketRequirements) -> tuple[str, ...]:
        """Risk factors (curve, underlying, surface names) this Greek bumps."""
        ...

    def scenario(
        self, parameters: Parameters, factor: str, config: CalculationConfiguration
    ) -> BumpScenario:
        """Bumped Parameters views for one factor and how to combine their prices."""
        ...

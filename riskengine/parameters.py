"""
Calculation-ready parameters derived from a MarketDataSnapshot.

`Parameters` is what pricers read: interpolating curves, surfaces, spots and FX
rates for one instrument category, plus the evaluation date and the day-count
function used to turn dates into times. It is immutable-style: every `with_*`
method returns a new instance (new dicts, shared untouched leaves), which is how
the risk scenarios build bumped views without touching the Engine's baseline.

`ParameterDeriver` builds a `Parameters` for a category from the raw snapshot.
Derivation is a pure function of (snapshot, category); the Engine calls it once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from types import MappingProxyType
from typing import Mapping

from riskengine.categorizer import InstrumentCategory
from riskengine.curves import VolatilitySurface, ZeroRateCurve
from riskengine.daycount import DayCountConvention, DayCounter, year_fraction
from riskengine.errors import DataMissing
from riskengine.market import CORRELATION, CURVE, DIVIDEND, FX, SPOT, VOL, MarketDataSnapshot

logger = logging.getLogger(__name__)


def _frozen(mapping: Mapping | None) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True, eq=False)
class Parameters:
    """
    Derived parameter set: curves (by name), dividend curves (by underlying),
    vol surfaces (by name), equity spots (by underlying), FX spots (by pair)
    and quanto correlations (by `quanto_key`).
    """

    evaluation_date: date
    curves: Mapping[str, ZeroRateCurve] = field(default_factory=dict)
    spots: Mapping[str, float] = field(default_factory=dict)
    fx: Mapping[str, float] = field(default_factory=dict)
    vols: Mapping[str, VolatilitySurface] = field(default_factory=dict)
    dividends: Mapping[str, ZeroRateCurve] = field(default_factory=dict)
    correlations: Mapping[str, float] = field(default_factory=dict)
    day_counter: DayCounter = year_fraction
    time_convention: DayCountConvention = DayCountConvention.ACT_365F

    def __post_init__(self) -> None:
        for name in ("curves", "spots", "fx", "vols", "dividends", "correlations"):
            object.__setattr__(self, name, _frozen(getattr(self, name)))

    # --- lookups ---

    def curve(self, name: str) -> ZeroRateCurve:
        """Return curve by name. Raises DataMissing if not found."""
        try:
            return self.curves[name]
        except KeyError:
            raise DataMissing(CURVE, name) from None

    def spot(self, underlying: str) -> float:
        try:
            return self.spots[underlying]
        except KeyError:
            raise DataMissing(SPOT, underlying) from None

    def fx_rate(self, pair: str) -> float:
        try:
            return self.fx[pair]
        except KeyError:
            raise DataMissing(FX, pair) from None

    def vol(self, name: str) -> VolatilitySurface:
        try:
            return self.vols[name]
        except KeyError:
            raise DataMissing(VOL, name) from None

    def dividend(self, underlying: str | None) -> ZeroRateCurve | None:
        """Dividend yield curve, or None when the instrument names no dividend curve."""
        if underlying is None:
            return None
        try:
            return self.dividends[underlying]
        except KeyError:
            raise DataMissing(DIVIDEND, underlying) from None

    def correlation(self, name: str) -> float:
        try:
            return self.correlations[name]
        except KeyError:
            raise DataMissing(CORRELATION, name) from None

    def time_to(self, d: date) -> float:
        """Year fraction from the evaluation date to d (curve time axis)."""
        return self.day_counter(self.evaluation_date, d, self.time_convention)

    def accrual(self, start: date, end: date, convention: DayCountConvention) -> float:
        return self.day_counter(start, end, convention)

    # --- copy-on-write updates ---

    def with_curve(self, name: str, curve: ZeroRateCurve) -> "Parameters":
        """Return new Parameters with the given curve replaced/added."""
        return replace(self, curves={**self.curves, name: curve})

    def with_spot(self, underlying: str, spot: float) -> "Parameters":
        return replace(self, spots={**self.spots, underlying: spot})

    def with_fx(self, pair: str, rate: float) -> "Parameters":
        return replace(self, fx={**self.fx, pair: rate})

    def with_vol(self, name: str, surface: VolatilitySurface) -> "Parameters":
        return replace(self, vols={**self.vols, name: surface})

    def with_dividend(self, underlying: str, curve: ZeroRateCurve) -> "Parameters":
        return replace(self, dividends={**self.dividends, underlying: curve})

    def with_evaluation_date(self, evaluation_date: date) -> "Parameters":
        return replace(self, evaluation_date=evaluation_date)

    def underlying_level(self, name: str) -> float:
        """Spot of an equity underlying or, failing that, an FX pair."""
        if name in self.spots:
            return self.spots[name]
        return self.fx_rate(name)

    def with_underlying_level(self, name: str, level: float) -> "Parameters":
        if name in self.spots:
            return self.with_spot(name, level)
        return self.with_fx(name, level)


class ParameterDeriver:
    """
    Builds category Parameters from the raw snapshot.

    `day_counter` is the external day-count collaborator
    (`year_fraction(start, end, convention)` shaped).
    """

    def __init__(
        self,
        day_counter: DayCounter = year_fraction,
        time_convention: DayCountConvention = DayCountConvention.ACT_365F,
    ) -> None:
        self.day_counter = day_counter
        self.time_convention = time_convention

    def derive(
        self, snapshot: MarketDataSnapshot, category: InstrumentCategory
    ) -> Parameters:
        """Derive every parameter the category needs. Raises DataMissing."""
        r = category.requirements
        try:
            curves = {
                name: ZeroRateCurve.from_data(name, snapshot.curve(name))
                for name in r.curves
            }
            dividends = {
                name: ZeroRateCurve.from_data(name, snapshot.dividend(name))
                for name in r.dividends
            }
            vols = {
                name: VolatilitySurface.from_data(name, snapshot.vol(name))
                for name in r.vols
            }
            spots = {name: snapshot.spot(name) for name in r.spots}
            fx = {pair: snapshot.fx(pair) for pair in r.fx_pairs}
            correlations = {name: snapshot.correlation(name) for name in r.correlations}
        except DataMissing as exc:
            raise DataMissing(exc.kind, exc.name, context=category.label) from exc
        logger.debug(
            "Derived parameters for [%s]: %d curves, %d surfaces",
            category.label,
            len(curves),
            len(vols),
        )
        return Parameters(
            evaluation_date=snapshot.evaluation_date,
            curves=curves,
            spots=spots,
            fx=fx,
            vols=vols,
            dividends=dividends,
            correlations=correlations,
            day_counter=self.day_counter,
            time_convention=self.time_convention,
        )

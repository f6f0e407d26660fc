"""
Calculation-ready curve and surface primitives.

This module deliberately keeps the math minimal and explicit:
- Times are **year fractions** measured from the evaluation date.
- Rates are **continuously compounded** (zero rates, dividend yields).
- Curves interpolate **linearly in rates** between pillars, flat outside.
- Surfaces interpolate **linearly in tenor, then in strike**, flat outside.

Every bump method returns a *new* object; nothing here mutates in place, which
is what lets an Engine hand bumped copies to concurrent scenarios while the
baseline stays untouched.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

from riskengine.market import CurveData, SurfaceData


@dataclass(frozen=True)
class ZeroRateCurve:
    """
    Zero rate curve (continuously compounded) with linear interpolation.

    - **Pillars** are increasing times (year fractions) where the curve is defined.
    - `zero_rates_cc[i]` is the CC zero rate at `pillars[i]`.

    Used for discounting/projection and, with dividend yields as rates, for
    dividend curves (`df(t)` is then exp(-q(t)*t)).
    """

    name: str
    pillars: tuple[float, ...]
    zero_rates_cc: tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "pillars", tuple(self.pillars))
        object.__setattr__(self, "zero_rates_cc", tuple(self.zero_rates_cc))
        self._validate()

    def _validate(self) -> None:
        if len(self.pillars) != len(self.zero_rates_cc):
            raise ValueError("pillars and zero_rates_cc must have the same length")
        if not self.pillars:
            raise ValueError("curve has no pillars")
        for i in range(1, len(self.pillars)):
            if self.pillars[i] <= self.pillars[i - 1]:
                raise ValueError("pillars must be strictly increasing")

    @classmethod
    def from_data(cls, name: str, data: CurveData) -> "ZeroRateCurve":
        return cls(name=name, pillars=data.pillars, zero_rates_cc=data.rates)

    def zero_rate_cc(self, t: float) -> float:
        """
        Continuously compounded zero rate at time t (year-fraction).
        Linear interpolation in zero rates, flat extrapolation. t must be >= 0.
        """
        if t < 0:
            raise ValueError("t must be >= 0")
        if t <= self.pillars[0]:
            return self.zero_rates_cc[0]
        if t >= self.pillars[-1]:
            return self.zero_rates_cc[-1]
        for i in range(len(self.pillars) - 1):
            if self.pillars[i] <= t <= self.pillars[i + 1]:
                t0, t1 = self.pillars[i], self.pillars[i + 1]
                r0, r1 = self.zero_rates_cc[i], self.zero_rates_cc[i + 1]
                return r0 + (r1 - r0) * (t - t0) / (t1 - t0)
        return self.zero_rates_cc[-1]

    def df(self, t: float) -> float:
        r"""
        Discount factor to time t: DF(t) = exp(-r(t)*t).

        Times at or before the evaluation date discount at 1.
        """
        if t <= 0:
            return 1.0
        return math.exp(-self.zero_rate_cc(t) * t)

    def forward_rate(self, t1: float, t2: float) -> float:
        """Simply compounded forward rate between t1 and t2 implied by DFs."""
        if t2 <= t1:
            raise ValueError("forward period must have positive length")
        return (self.df(t1) / self.df(t2) - 1.0) / (t2 - t1)

    def bumped(self, bump: float) -> "ZeroRateCurve":
        """
        Return a new curve with a *parallel* additive shift to all zero rates.
        `bump` is expressed in absolute rate terms (e.g. 1bp = 0.0001).
        """
        return ZeroRateCurve(
            name=self.name,
            pillars=self.pillars,
            zero_rates_cc=tuple(r + bump for r in self.zero_rates_cc),
        )

    def bumped_pillar(self, index: int, bump: float) -> "ZeroRateCurve":
        """
        Return a new curve with only pillar `index` shifted by `bump`.

        With linear interpolation this is a triangular (key-rate) shift; the
        shifts over all pillars add up to the parallel shift.
        """
        rates = list(self.zero_rates_cc)
        rates[index] += bump
        return ZeroRateCurve(name=self.name, pillars=self.pillars, zero_rates_cc=tuple(rates))


@dataclass(frozen=True)
class VolatilitySurface:
    """
    Implied volatility surface on a tenor x strike grid.

    `vols` is a read-only (n_tenors, n_strikes) array. Lookup interpolates
    linearly along strikes on the two bracketing tenors, then linearly in tenor.
    """

    name: str
    tenors: tuple[float, ...]
    strikes: tuple[float, ...]
    vols: np.ndarray = field(compare=False)

    def __post_init__(self) -> None:
        vols = np.array(self.vols, dtype=float, copy=True)
        if vols.shape != (len(self.tenors), len(self.strikes)):
            raise ValueError(
                f"vols shape {vols.shape} does not match "
                f"({len(self.tenors)}, {len(self.strikes)})"
            )
        for axis in (self.tenors, self.strikes):
            for i in range(1, len(axis)):
                if axis[i] <= axis[i - 1]:
                    raise ValueError("tenors and strikes must be strictly increasing")
        vols.setflags(write=False)
        object.__setattr__(self, "tenors", tuple(self.tenors))
        object.__setattr__(self, "strikes", tuple(self.strikes))
        object.__setattr__(self, "vols", vols)

    @classmethod
    def from_data(cls, name: str, data: SurfaceData) -> "VolatilitySurface":
        return cls(name=name, tenors=data.tenors, strikes=data.strikes, vols=np.array(data.vols))

    @property
    def shape(self) -> tuple[int, int]:
        return self.vols.shape  # type: ignore[return-value]

    def vol(self, t: float, strike: float) -> float:
        """Volatility at time t and strike (flat extrapolation on both axes)."""
        strikes = np.asarray(self.strikes)
        smile = np.array([np.interp(strike, strikes, row) for row in self.vols])
        return float(np.interp(t, np.asarray(self.tenors), smile))

    def bumped(self, bump: float) -> "VolatilitySurface":
        """Parallel absolute shift of every vol."""
        return self._with_vols(self.vols + bump)

    def bumped_tenor(self, index: int, bump: float) -> "VolatilitySurface":
        """Shift every strike at tenor `index`."""
        vols = self.vols.copy()
        vols[index, :] += bump
        return self._with_vols(vols)

    def bumped_point(self, tenor_index: int, strike_index: int, bump: float) -> "VolatilitySurface":
        """Shift a single (tenor, strike) node."""
        vols = self.vols.copy()
        vols[tenor_index, strike_index] += bump
        return self._with_vols(vols)

    def _with_vols(self, vols: np.ndarray) -> "VolatilitySurface":
        return VolatilitySurface(
            name=self.name, tenors=self.tenors, strikes=self.strikes, vols=vols
        )

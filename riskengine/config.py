"""
Calculation configuration.

All numerical knobs of a run live here (bump sizes, theta gap, which Greeks to
compute, worker counts) so a run is reproducible from (snapshot, instruments,
configuration) alone.

Bump conventions:
- `delta_bump_ratio` / `gamma_bump_ratio` are *relative* to the spot level.
- `rho_bump`, `dividend_bump`, `vega_bump` are *absolute* (1bp = 0.0001,
  1 vol point = 0.01). Structure Greeks accept one bump per pillar/tenor; the
  vega matrix accepts one bump per (tenor, strike).
- `theta_gap_days` is in calendar days.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Union

import numpy as np

from riskengine.daycount import DayCountConvention
from riskengine.errors import ConfigurationError

BumpSize = Union[float, Sequence[float], Sequence[Sequence[float]]]


class Differencing(str, Enum):
    FORWARD = "forward"
    CENTRAL = "central"


def _is_number(value: object, kind: type) -> bool:
    return isinstance(value, kind) and not isinstance(value, bool)


def bump_array(bump: BumpSize) -> np.ndarray:
    """Bump as a float array of dimension 0 (flat), 1 (vector) or 2 (matrix)."""
    return np.asarray(bump, dtype=float)


@dataclass(frozen=True)
class CalculationConfiguration:
    delta_bump_ratio: float = 0.01
    gamma_bump_ratio: float = 0.01
    rho_bump: BumpSize = 0.0001
    vega_bump: BumpSize = 0.01
    dividend_bump: BumpSize = 0.0001
    theta_gap_days: int = 1
    theta_day_count: DayCountConvention = DayCountConvention.ACT_365F
    vega_differencing: Differencing = Differencing.CENTRAL

    compute_delta: bool = False
    compute_gamma: bool = False
    compute_theta: bool = False
    compute_vega: bool = False
    compute_vega_structure: bool = False
    compute_vega_matrix: bool = False
    compute_rho: bool = False
    compute_rho_structure: bool = False
    compute_dividend_delta: bool = False
    compute_dividend_structure: bool = False
    include_cashflows: bool = True
    # currency of reported prices and Greeks (None: each instrument's own)
    representation_currency: str | None = None

    # Engine-level thread pool size (None: executor default, 1: run inline)
    max_workers: int | None = None
    # scenario-level thread pool size inside each Engine
    scenario_workers: int = 1

    @classmethod
    def all_greeks(cls, **overrides) -> "CalculationConfiguration":
        """Configuration with every Greek switched on."""
        flags = {
            name: True
            for name in cls.__dataclass_fields__
            if name.startswith("compute_")
        }
        flags.update(overrides)
        return cls(**flags)

    @property
    def any_greek(self) -> bool:
        return any(
            getattr(self, name)
            for name in self.__dataclass_fields__
            if name.startswith("compute_")
        )

    def validate(self) -> None:
        """Raise ConfigurationError if the configuration cannot be run soundly."""
        for name in ("delta_bump_ratio", "gamma_bump_ratio"):
            value = getattr(self, name)
            if not (
                _is_number(value, numbers.Real) and math.isfinite(value) and 0 < value < 1
            ):
                raise ConfigurationError(
                    f"{name} must be a number strictly between 0 and 1, got {value!r}"
                )
        if not _is_number(self.theta_gap_days, numbers.Integral) or self.theta_gap_days <= 0:
            raise ConfigurationError(
                f"theta_gap_days must be a positive integer, got {self.theta_gap_days!r}"
            )
        self._validate_bump("rho_bump", max_ndim=1, flat_flag="compute_rho")
        self._validate_bump("dividend_bump", max_ndim=1, flat_flag="compute_dividend_delta")
        self._validate_bump("vega_bump", max_ndim=2, flat_flag="compute_vega")
        vega = bump_array(self.vega_bump)
        if vega.ndim == 2 and self.compute_vega_structure:
            raise ConfigurationError(
                "vega_bump is a matrix, which conflicts with compute_vega_structure"
            )
        if vega.ndim == 1 and self.compute_vega_matrix:
            raise ConfigurationError(
                "vega_bump is a vector, which conflicts with compute_vega_matrix"
            )
        try:
            Differencing(self.vega_differencing)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError("max_workers must be >= 1")
        if self.scenario_workers < 1:
            raise ConfigurationError("scenario_workers must be >= 1")

    def _validate_bump(self, name: str, max_ndim: int, flat_flag: str) -> None:
        try:
            bump = bump_array(getattr(self, name))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"{name} is not numeric or is ragged") from exc
        if bump.ndim > max_ndim:
            raise ConfigurationError(f"{name} has too many dimensions ({bump.ndim})")
        if bump.size == 0:
            raise ConfigurationError(f"{name} is empty")
        if not np.isfinite(bump).all() or (bump <= 0).any():
            raise ConfigurationError(f"{name} must be strictly positive, got {bump.tolist()}")
        if bump.ndim > 0 and getattr(self, flat_flag):
            raise ConfigurationError(
                f"{flat_flag} needs a single flat {name}, got shape {bump.shape}"
            )

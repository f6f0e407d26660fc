"""
Market data snapshot container.

`MarketDataSnapshot` is the raw, immutable set of observations a calculation run
prices against:
- spots of equity/index underlyings, keyed by underlying code (e.g. "KOSPI2")
- FX spots, keyed by pair code (e.g. "USDKRW" = KRW per 1 USD)
- zero curves as raw pillar/rate quotes, keyed by curve name (e.g. "KRWIRS")
- volatility surfaces, keyed by surface name
- dividend yield curves, keyed by underlying code
- correlations between an underlying and an FX pair, keyed by `quanto_key`

The snapshot is published once and shared by reference across every Engine of a
run (possibly on several threads). Values are frozen dataclasses holding tuples
and the lookup table is a read-only mapping, so shared reads need no locking.
Calculation-ready objects (curves with interpolation, surfaces) are derived from
it per Engine by `riskengine.parameters.ParameterDeriver`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Iterator, Mapping, Sequence, Union

from riskengine.errors import DataMissing

SPOT = "spot"
FX = "fx"
CURVE = "curve"
VOL = "vol"
DIVIDEND = "dividend"
CORRELATION = "correlation"

OBSERVATION_KINDS = (SPOT, FX, CURVE, VOL, DIVIDEND, CORRELATION)


def quanto_key(underlying: str, fx_pair: str) -> str:
    """Name of the correlation observation between an underlying and an FX pair."""
    return f"{underlying}/{fx_pair}"


def conversion_rate(fx: Mapping[str, float], source: str, target: str) -> float:
    """
    Units of `target` per unit of `source` from pair quotes keyed base+quote,
    using the direct or the inverted pair. Raises DataMissing.
    """
    if source == target:
        return 1.0
    if f"{source}{target}" in fx:
        return fx[f"{source}{target}"]
    if f"{target}{source}" in fx:
        return 1.0 / fx[f"{target}{source}"]
    raise DataMissing(FX, f"{source}{target}")


@dataclass(frozen=True)
class MarketKey:
    """Identifier of one observation: kind (spot, fx, curve, vol, dividend, correlation) and name."""

    kind: str
    name: str

    def __post_init__(self) -> None:
        if self.kind not in OBSERVATION_KINDS:
            raise ValueError(f"unknown observation kind '{self.kind}'")


@dataclass(frozen=True)
class CurveData:
    """
    Raw term structure quotes: pillars (year fractions, strictly increasing) and
    continuously compounded rates. Used for both zero curves and dividend yields.
    """

    pillars: tuple[float, ...]
    rates: tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "pillars", tuple(float(p) for p in self.pillars))
        object.__setattr__(self, "rates", tuple(float(r) for r in self.rates))
        if len(self.pillars) != len(self.rates):
            raise ValueError("pillars and rates must have the same length")
        if not self.pillars:
            raise ValueError("curve data has no pillars")


@dataclass(frozen=True)
class SurfaceData:
    """
    Raw implied volatility quotes on a tenor x strike grid.

    `vols[i][j]` is the volatility at `tenors[i]` (year fraction) and `strikes[j]`.
    A constant volatility is a 1x1 grid; see `SurfaceData.constant`.
    """

    tenors: tuple[float, ...]
    strikes: tuple[float, ...]
    vols: tuple[tuple[float, ...], ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "tenors", tuple(float(t) for t in self.tenors))
        object.__setattr__(self, "strikes", tuple(float(k) for k in self.strikes))
        object.__setattr__(
            self, "vols", tuple(tuple(float(v) for v in row) for row in self.vols)
        )
        if len(self.vols) != len(self.tenors):
            raise ValueError("vols must have one row per tenor")
        if any(len(row) != len(self.strikes) for row in self.vols):
            raise ValueError("each vols row must have one entry per strike")

    @classmethod
    def constant(cls, vol: float) -> "SurfaceData":
        return cls(tenors=(1.0,), strikes=(1.0,), vols=((vol,),))


Observation = Union[float, CurveData, SurfaceData]


class MarketDataSnapshot:
    """
    Immutable market snapshot: evaluation date plus raw observations by MarketKey.

    Construction copies the caller's dicts; afterwards the snapshot exposes only
    read access (`get`, typed accessors, `keys`, `in`).
    """

    def __init__(
        self,
        evaluation_date: date,
        spots: Mapping[str, float] | None = None,
        fx: Mapping[str, float] | None = None,
        curves: Mapping[str, CurveData] | None = None,
        vols: Mapping[str, SurfaceData] | None = None,
        dividends: Mapping[str, CurveData] | None = None,
        correlations: Mapping[str, float] | None = None,
    ) -> None:
        data: dict[MarketKey, Observation] = {}
        for kind, values in (
            (SPOT, spots),
            (FX, fx),
            (CURVE, curves),
            (VOL, vols),
            (DIVIDEND, dividends),
            (CORRELATION, correlations),
        ):
            for name, value in (values or {}).items():
                if kind in (SPOT, FX, CORRELATION):
                    value = float(value)
                if kind == CORRELATION and not -1.0 <= value <= 1.0:
                    raise ValueError(f"correlation '{name}' must be in [-1, 1], got {value}")
                data[MarketKey(kind, name)] = value
        self._evaluation_date = evaluation_date
        self._data: Mapping[MarketKey, Observation] = MappingProxyType(data)

    @property
    def evaluation_date(self) -> date:
        return self._evaluation_date

    def get(self, key: MarketKey) -> Observation:
        """Return the observation for key. Raises DataMissing if not found."""
        try:
            return self._data[key]
        except KeyError:
            raise DataMissing(key.kind, key.name) from None

    def spot(self, name: str) -> float:
        return self.get(MarketKey(SPOT, name))  # type: ignore[return-value]

    def fx(self, pair: str) -> float:
        return self.get(MarketKey(FX, pair))  # type: ignore[return-value]

    def curve(self, name: str) -> CurveData:
        return self.get(MarketKey(CURVE, name))  # type: ignore[return-value]

    def vol(self, name: str) -> SurfaceData:
        return self.get(MarketKey(VOL, name))  # type: ignore[return-value]

    def dividend(self, name: str) -> CurveData:
        return self.get(MarketKey(DIVIDEND, name))  # type: ignore[return-value]

    def correlation(self, name: str) -> float:
        return self.get(MarketKey(CORRELATION, name))  # type: ignore[return-value]

    def fx_quotes(self) -> dict[str, float]:
        """Every FX spot of the snapshot by pair."""
        return {name: self.fx(name) for name in self.names(FX)}

    def conversion_rate(self, source: str, target: str) -> float:
        """Units of `target` per unit of `source` at the FX spots of the snapshot."""
        return conversion_rate(self.fx_quotes(), source, target)

    def names(self, kind: str) -> list[str]:
        """Names of all observations of one kind."""
        return sorted(k.name for k in self._data if k.kind == kind)

    def keys(self) -> Iterator[MarketKey]:
        return iter(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def without(self, keys: Sequence[MarketKey]) -> "MarketDataSnapshot":
        """Return a new snapshot with the given observations removed."""
        removed = set(keys)
        kept = {k: v for k, v in self._data.items() if k not in removed}
        return self._from_data(self._evaluation_date, kept)

    @classmethod
    def _from_data(
        cls, evaluation_date: date, data: Mapping[MarketKey, Observation]
    ) -> "MarketDataSnapshot":
        grouped: dict[str, dict[str, Observation]] = {k: {} for k in OBSERVATION_KINDS}
        for key, value in data.items():
            grouped[key.kind][key.name] = value
        return cls(
            evaluation_date,
            spots=grouped[SPOT],  # type: ignore[arg-type]
            fx=grouped[FX],  # type: ignore[arg-type]
            curves=grouped[CURVE],  # type: ignore[arg-type]
            vols=grouped[VOL],  # type: ignore[arg-type]
            dividends=grouped[DIVIDEND],  # type: ignore[arg-type]
            correlations=grouped[CORRELATION],  # type: ignore[arg-type]
        )

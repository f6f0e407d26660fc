"""
Calculation results: per-instrument price, Greeks and cashflows, and the
aggregate result set of a run (successes, per-instrument errors, group errors).

Greeks are stored per kind and per risk factor (curve name, underlying code, FX
pair, surface name); theta uses the single factor `THETA_FACTOR`. A value is a
float for flat Greeks, a `GreekVector` for structure Greeks (tagged by pillar or
tenor) and a `GreekMatrix` for the vega matrix (tenor x strike).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping, Union

import numpy as np
import pandas as pd

from riskengine.categorizer import InstrumentCategory
from riskengine.errors import DataMissing, DuplicateInstrument, RiskEngineError
from riskengine.market import conversion_rate

THETA_FACTOR = "evaluation_date"


class GreekKind(str, Enum):
    DELTA = "delta"
    GAMMA = "gamma"
    THETA = "theta"
    VEGA = "vega"
    VEGA_STRUCTURE = "vega_structure"
    VEGA_MATRIX = "vega_matrix"
    RHO = "rho"
    RHO_STRUCTURE = "rho_structure"
    DIVIDEND_DELTA = "dividend_delta"
    DIVIDEND_STRUCTURE = "dividend_structure"


@dataclass(frozen=True, order=True)
class Cashflow:
    """One expected cashflow: payment date, currency, signed amount."""

    payment_date: date
    currency: str
    amount: float


@dataclass(frozen=True)
class GreekVector:
    """Structure Greek: one value per pillar/tenor label (year fractions)."""

    labels: tuple[float, ...]
    values: tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.labels) != len(self.values):
            raise ValueError("labels and values must have the same length")

    def total(self) -> float:
        return math.fsum(self.values)

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in self.values)

    def scaled(self, factor: float) -> "GreekVector":
        return GreekVector(self.labels, tuple(v * factor for v in self.values))


@dataclass(frozen=True)
class GreekMatrix:
    """Matrix Greek: rows are tenors, columns are strikes. `values` is read-only."""

    row_labels: tuple[float, ...]
    col_labels: tuple[float, ...]
    values: np.ndarray = field(compare=False)

    def __post_init__(self) -> None:
        values = np.array(self.values, dtype=float, copy=True)
        if values.shape != (len(self.row_labels), len(self.col_labels)):
            raise ValueError("matrix shape does not match its labels")
        values.setflags(write=False)
        object.__setattr__(self, "values", values)

    def total(self) -> float:
        return float(self.values.sum())

    def is_finite(self) -> bool:
        return bool(np.isfinite(self.values).all())

    def scaled(self, factor: float) -> "GreekMatrix":
        return GreekMatrix(self.row_labels, self.col_labels, self.values * factor)


GreekValue = Union[float, GreekVector, GreekMatrix]


def is_finite(value: GreekValue) -> bool:
    if isinstance(value, (GreekVector, GreekMatrix)):
        return value.is_finite()
    return math.isfinite(value)


def scale_greek(value: GreekValue, factor: float) -> GreekValue:
    if isinstance(value, (GreekVector, GreekMatrix)):
        return value.scaled(factor)
    return value * factor


@dataclass(frozen=True)
class CalculationResult:
    """
    Output for one instrument. Immutable once built by the Engine.

    `failed_greeks` lists Greeks that were requested and applicable but could
    not be computed; they are absent from `greeks`, never reported as zero.

    `price` and the Greeks are expressed in `representation_currency`, the
    instrument currency unless the result was `converted`. Cashflows and
    `fx_exposure` stay in the currency of each entry.
    """

    instrument_id: str
    instrument_type: str
    currency: str
    evaluation_date: date
    price: float
    greeks: Mapping[GreekKind, Mapping[str, GreekValue]] = field(default_factory=dict)
    cashflows: tuple[Cashflow, ...] = ()
    failed_greeks: Mapping[GreekKind, Mapping[str, RiskEngineError]] = field(
        default_factory=dict
    )
    fx_exposure: Mapping[str, float] = field(default_factory=dict)
    representation_currency: str = ""

    def __post_init__(self) -> None:
        if not self.representation_currency:
            object.__setattr__(self, "representation_currency", self.currency)
        object.__setattr__(self, "fx_exposure", MappingProxyType(dict(self.fx_exposure)))
        object.__setattr__(
            self,
            "greeks",
            MappingProxyType({k: MappingProxyType(dict(v)) for k, v in self.greeks.items()}),
        )
        object.__setattr__(
            self,
            "failed_greeks",
            MappingProxyType(
                {k: MappingProxyType(dict(v)) for k, v in self.failed_greeks.items()}
            ),
        )
        object.__setattr__(self, "cashflows", tuple(sorted(self.cashflows)))

    def greek(self, kind: GreekKind, factor: str | None = None) -> GreekValue:
        """
        Return one Greek value.

        Without `factor`: the single factor's value, or for flat (float) Greeks
        over several factors, their sum. Raises KeyError if not computed.
        """
        kind = GreekKind(kind)
        if kind in self.failed_greeks and (
            factor is None or factor in self.failed_greeks[kind]
        ):
            failed = self.failed_greeks[kind]
            raise KeyError(f"{kind.value} failed for {self.instrument_id}: {failed}")
        by_factor = self.greeks[kind]
        if factor is not None:
            return by_factor[factor]
        if len(by_factor) == 1:
            return next(iter(by_factor.values()))
        values = list(by_factor.values())
        if values and all(isinstance(v, float) for v in values):
            return math.fsum(values)  # type: ignore[arg-type]
        raise KeyError(
            f"{kind.value} has several factors for {self.instrument_id}: "
            f"{sorted(by_factor)}; pass factor="
        )

    def has_failures(self) -> bool:
        return bool(self.failed_greeks)

    def converted(self, currency: str, fx_rate: float) -> "CalculationResult":
        """
        The result with price and every Greek re-expressed in `currency`;
        `fx_rate` is units of `currency` per unit of `representation_currency`.
        """
        if currency == self.representation_currency:
            return self
        return replace(
            self,
            price=self.price * fx_rate,
            greeks={
                kind: {factor: scale_greek(v, fx_rate) for factor, v in by_factor.items()}
                for kind, by_factor in self.greeks.items()
            },
            representation_currency=currency,
        )

    def summary(self) -> str:
        """Human readable multi-line summary."""
        lines = [
            f" * instrument: {self.instrument_id} ({self.instrument_type}, {self.currency})",
            f" * evaluation_date: {self.evaluation_date.isoformat()}",
            f" * price: {self.price:,.4f} {self.representation_currency}",
        ]
        for currency, amount in sorted(self.fx_exposure.items()):
            lines.append(f" * fx_exposure {currency}: {amount:,.4f}")
        for kind, by_factor in self.greeks.items():
            lines.append(f" * {kind.value}:")
            for factor, value in by_factor.items():
                if isinstance(value, GreekVector):
                    body = " | ".join(f"{v:,.4f}" for v in value.values)
                    lines.append(f"        {factor} (sum = {value.total():,.4f}): {body}")
                elif isinstance(value, GreekMatrix):
                    lines.append(f"        {factor} (sum = {value.total():,.4f}):")
                    for row in value.values:
                        lines.append("          " + " | ".join(f"{v:9,.4f}" for v in row))
                else:
                    lines.append(f"        {factor}: {value:,.4f}")
        for kind, by_factor in self.failed_greeks.items():
            for factor, error in by_factor.items():
                lines.append(f" * {kind.value} FAILED ({factor}): {error}")
        for cf in self.cashflows:
            lines.append(
                f" * cashflow {cf.payment_date.isoformat()} {cf.currency} {cf.amount:,.2f}"
            )
        return "\n".join(lines)


@dataclass(frozen=True)
class InstrumentError:
    """A failure attached to one instrument (its price, or one Greek/factor)."""

    instrument_id: str
    error: RiskEngineError
    greek: GreekKind | None = None
    factor: str | None = None

    def __str__(self) -> str:
        where = self.greek.value if self.greek else "price"
        if self.factor:
            where = f"{where}[{self.factor}]"
        return f"{self.instrument_id} {where}: {type(self.error).__name__}: {self.error}"


@dataclass(frozen=True)
class GroupError:
    """A failure that took down a whole category group (e.g. missing curve)."""

    group_id: int
    category: InstrumentCategory
    instrument_ids: tuple[str, ...]
    error: RiskEngineError

    def __str__(self) -> str:
        return (
            f"group {self.group_id} [{self.category.label}] "
            f"({len(self.instrument_ids)} instruments): "
            f"{type(self.error).__name__}: {self.error}"
        )


class CalculationResults:
    """
    Aggregate output of a run.

    - `results`: instrument id -> CalculationResult (price succeeded)
    - `errors`: instrument id -> list of InstrumentError (price or Greek failures)
    - `group_errors`: failures of whole category groups
    """

    def __init__(
        self,
        results: Mapping[str, CalculationResult] | None = None,
        errors: Mapping[str, list[InstrumentError]] | None = None,
        group_errors: list[GroupError] | None = None,
    ) -> None:
        self.results: dict[str, CalculationResult] = dict(results or {})
        self.errors: dict[str, list[InstrumentError]] = {
            k: list(v) for k, v in (errors or {}).items()
        }
        self.group_errors: list[GroupError] = list(group_errors or [])

    def __getitem__(self, instrument_id: str) -> CalculationResult:
        return self.results[instrument_id]

    def __contains__(self, instrument_id: object) -> bool:
        return instrument_id in self.results

    def __iter__(self) -> Iterator[str]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def failed_ids(self) -> set[str]:
        """Instruments with any failure (price, Greek, or their whole group)."""
        ids = set(self.errors)
        for group_error in self.group_errors:
            ids.update(group_error.instrument_ids)
        return ids

    @property
    def ok(self) -> bool:
        return not self.errors and not self.group_errors

    def add_result(self, result: CalculationResult) -> None:
        if result.instrument_id in self.results:
            raise DuplicateInstrument(result.instrument_id)
        self.results[result.instrument_id] = result

    def add_error(self, error: InstrumentError) -> None:
        self.errors.setdefault(error.instrument_id, []).append(error)

    def merge(self, other: "CalculationResults") -> "CalculationResults":
        """Disjoint union in place; a duplicate instrument id is an error."""
        for result in other.results.values():
            self.add_result(result)
        for errors in other.errors.values():
            for error in errors:
                self.add_error(error)
        self.group_errors.extend(other.group_errors)
        return self

    def converted(self, currency: str, fx: Mapping[str, float]) -> "CalculationResults":
        """
        New results with every price and Greek expressed in `currency`, using
        the pair quotes in `fx` (base+quote keys, either direction). A result
        whose currency has no quote against `currency` is kept as is and gets
        a DataMissing error.
        """
        out = CalculationResults(errors=self.errors, group_errors=self.group_errors)
        for instrument_id, result in self.results.items():
            try:
                rate = conversion_rate(fx, result.representation_currency, currency)
            except DataMissing as exc:
                out.add_error(InstrumentError(instrument_id, exc))
                out.add_result(result)
                continue
            out.add_result(result.converted(currency, rate))
        return out

    def to_frame(self) -> pd.DataFrame:
        """
        One row per instrument: price, flat Greeks (summed over factors),
        structure/matrix Greek totals, and error text.
        """
        rows = []
        for instrument_id, result in sorted(self.results.items()):
            row: dict[str, object] = {
                "instrument_id": instrument_id,
                "type": result.instrument_type,
                "currency": result.currency,
                "representation_currency": result.representation_currency,
                "price": result.price,
            }
            for kind, by_factor in result.greeks.items():
                row[kind.value] = math.fsum(
                    v if isinstance(v, float) else v.total() for v in by_factor.values()
                )
            row["error"] = "; ".join(str(e) for e in self.errors.get(instrument_id, []))
            rows.append(row)
        for instrument_id in sorted(self.failed_ids - set(self.results)):
            messages = [str(e) for e in self.errors.get(instrument_id, [])]
            messages += [
                str(g) for g in self.group_errors if instrument_id in g.instrument_ids
            ]
            rows.append({"instrument_id": instrument_id, "error": "; ".join(messages)})
        return pd.DataFrame(rows)

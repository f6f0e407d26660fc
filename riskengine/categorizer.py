"""
Instrument categorization.

An instrument's category is the shape of the market parameters it needs:
its currency plus the names of the curves, spots, FX pairs, vol surfaces,
dividend curves and correlations it reads. Two instruments with equal
categories can share one set of derived parameters, so the EngineGenerator
builds one Engine per category.

Instrument type is deliberately *not* part of the key: a bond and an IRS that
discount on the same curve share a category (and the curve is derived once).

Per-variant requirements are registered with `market_requirements.register`;
adding an instrument kind means registering one function here and one pricer.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import singledispatch

from riskengine.errors import UnsupportedInstrument
from riskengine.market import quanto_key
from riskengine.products import (
    Bond,
    CrossCurrencySwap,
    Future,
    FxForward,
    FxFuture,
    FxSpot,
    FxSwap,
    InterestRateSwap,
    KoreaTreasuryBondFuture,
    VanillaOption,
)


def _names(*names: str | None) -> tuple[str, ...]:
    return tuple(sorted({n for n in names if n}))


@dataclass(frozen=True)
class MarketRequirements:
    """Names of the observations an instrument (or a group) depends on, sorted."""

    curves: tuple[str, ...] = ()
    spots: tuple[str, ...] = ()
    fx_pairs: tuple[str, ...] = ()
    vols: tuple[str, ...] = ()
    dividends: tuple[str, ...] = ()
    correlations: tuple[str, ...] = ()

    def union(self, other: "MarketRequirements") -> "MarketRequirements":
        return MarketRequirements(
            curves=_names(*self.curves, *other.curves),
            spots=_names(*self.spots, *other.spots),
            fx_pairs=_names(*self.fx_pairs, *other.fx_pairs),
            vols=_names(*self.vols, *other.vols),
            dividends=_names(*self.dividends, *other.dividends),
            correlations=_names(*self.correlations, *other.correlations),
        )


@dataclass(frozen=True)
class InstrumentCategory:
    """Category key: currencies plus market requirements."""

    currencies: tuple[str, ...]
    requirements: MarketRequirements

    @property
    def label(self) -> str:
        r = self.requirements
        parts = ["/".join(self.currencies)]
        for tag, names in (
            ("curves", r.curves),
            ("spots", r.spots),
            ("fx", r.fx_pairs),
            ("vols", r.vols),
            ("divs", r.dividends),
            ("corr", r.correlations),
        ):
            if names:
                parts.append(f"{tag}={','.join(names)}")
        return " ".join(parts)

    @classmethod
    def union(cls, *categories: "InstrumentCategory") -> "InstrumentCategory":
        """Smallest category covering all of `categories` (forces one Engine)."""
        requirements = MarketRequirements()
        currencies: list[str] = []
        for category in categories:
            requirements = requirements.union(category.requirements)
            currencies.extend(category.currencies)
        return cls(currencies=_names(*currencies), requirements=requirements)


@singledispatch
def market_requirements(instrument: object) -> MarketRequirements:
    """Return the observations `instrument` needs to be priced."""
    raise UnsupportedInstrument(instrument, what="categorizer rule")


@market_requirements.register
def _(instrument: Bond) -> MarketRequirements:
    return MarketRequirements(curves=_names(instrument.discount_curve))


@market_requirements.register
def _(instrument: KoreaTreasuryBondFuture) -> MarketRequirements:
    return MarketRequirements(
        curves=_names(instrument.discount_curve, instrument.borrowing_curve)
    )


@market_requirements.register
def _(instrument: Future) -> MarketRequirements:
    return MarketRequirements(
        curves=_names(instrument.discount_curve, instrument.borrowing_curve),
        spots=_names(instrument.underlying),
        dividends=_names(instrument.dividend_curve),
    )


@market_requirements.register
def _(instrument: VanillaOption) -> MarketRequirements:
    pair = instrument.quanto_pair
    return MarketRequirements(
        curves=_names(instrument.discount_curve, instrument.borrowing_curve),
        spots=_names(instrument.underlying),
        vols=_names(instrument.volatility, instrument.fx_volatility if pair else None),
        dividends=_names(instrument.dividend_curve),
        correlations=_names(quanto_key(instrument.underlying, pair) if pair else None),
    )


@market_requirements.register
def _(instrument: FxSpot) -> MarketRequirements:
    return MarketRequirements(fx_pairs=_names(instrument.fx_pair))


@market_requirements.register(FxForward)
@market_requirements.register(FxSwap)
def _(instrument: FxForward | FxSwap) -> MarketRequirements:
    return MarketRequirements(
        curves=_names(instrument.base_curve, instrument.quote_curve),
        fx_pairs=_names(instrument.fx_pair),
    )


@market_requirements.register
def _(instrument: FxFuture) -> MarketRequirements:
    return MarketRequirements(
        curves=_names(instrument.underlying_curve, instrument.futures_curve),
        fx_pairs=_names(instrument.fx_pair),
    )


@market_requirements.register
def _(instrument: InterestRateSwap) -> MarketRequirements:
    return MarketRequirements(
        curves=_names(instrument.discount_curve, instrument.projection_curve)
    )


@market_requirements.register
def _(instrument: CrossCurrencySwap) -> MarketRequirements:
    return MarketRequirements(
        curves=_names(
            instrument.fixed_curve, instrument.floating_curve, instrument.projection_curve
        ),
        fx_pairs=_names(instrument.fx_pair),
    )


def category_of(instrument: object) -> InstrumentCategory:
    """Deterministic, side-effect free category of one instrument."""
    requirements = market_requirements(instrument)
    return InstrumentCategory(
        currencies=_names(getattr(instrument, "currency", None)),
        requirements=requirements,
    )


class InstrumentCategorizer:
    """
    Categorizer with a per-run memo.

    Instances are owned by one EngineGenerator and shared with its Engines;
    the generator empties the memo at the end of every run.
    The memo is keyed by the (frozen, hashable) instrument, so equal
    instruments share one entry; entries are pure functions of the key, so a
    concurrent fill from two Engine threads stores the same value.
    """

    def __init__(self) -> None:
        self._memo: dict[object, InstrumentCategory] = {}

    def category_of(self, instrument: object) -> InstrumentCategory:
        try:
            return self._memo[instrument]
        except KeyError:
            pass
        except TypeError:
            # unhashable (non-frozen) instrument: categorize without memo
            return category_of(instrument)
        category = self._memo[instrument] = category_of(instrument)
        return category

    def requirements_of(self, instrument: object) -> MarketRequirements:
        return self.category_of(instrument).requirements

    def __len__(self) -> int:
        return len(self._memo)

    def clear(self) -> None:
        self._memo.clear()

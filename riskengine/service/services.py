"""Service layer: convert GraphQL inputs to risk engine objects and run a calculation."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Optional

from riskengine.config import CalculationConfiguration, Differencing
from riskengine.daycount import DayCountConvention
from riskengine.generator import calculate
from riskengine.interfaces import Instrument
from riskengine.market import CurveData, MarketDataSnapshot, SurfaceData, quanto_key
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
    OptionType,
    VanillaOption,
)
from riskengine.result import (
    CalculationResult,
    CalculationResults,
    GreekMatrix,
    GreekVector,
)
from riskengine.service.types import (
    BondInput,
    CalculationOutput,
    CashflowEntry,
    ConfigurationInput,
    CurveInput,
    ExposureEntry,
    GreekEntry,
    GroupErrorEntry,
    InstrumentErrorEntry,
    InstrumentResult,
    MarketInput,
    PortfolioInput,
)

logger = logging.getLogger(__name__)


def _fields(inp: Any) -> dict[str, Any]:
    return {f.name: getattr(inp, f.name) for f in dataclasses.fields(inp)}


def _curve_data(c: CurveInput) -> CurveData:
    return CurveData(pillars=tuple(c.pillars), rates=tuple(c.rates))


def snapshot_from_input(m: MarketInput) -> MarketDataSnapshot:
    """Build MarketDataSnapshot from GraphQL MarketInput."""
    return MarketDataSnapshot(
        m.evaluation_date,
        spots={q.name: q.value for q in m.spots or []},
        fx={q.name: q.value for q in m.fx or []},
        curves={c.name: _curve_data(c) for c in m.curves or []},
        vols={
            s.name: SurfaceData(
                tenors=tuple(s.tenors),
                strikes=tuple(s.strikes),
                vols=tuple(tuple(row) for row in s.vols),
            )
            for s in m.vols or []
        },
        dividends={c.name: _curve_data(c) for c in m.dividends or []},
        correlations={
            quanto_key(c.underlying, c.fx_pair): c.value for c in m.correlations or []
        },
    )


def _with_day_count(inp: Any) -> dict[str, Any]:
    kwargs = _fields(inp)
    kwargs["day_count"] = DayCountConvention(kwargs["day_count"])
    return kwargs


def _bond(b: BondInput) -> Bond:
    return Bond(**_with_day_count(b))


def portfolio_from_input(p: PortfolioInput) -> list[Instrument]:
    """Build the instrument list from GraphQL PortfolioInput, in input order per kind."""
    instruments: list[Instrument] = []
    instruments += [_bond(b) for b in p.bonds or []]
    for k in p.ktb_futures or []:
        kwargs = _fields(k)
        kwargs["underlying_bonds"] = tuple(_bond(b) for b in k.underlying_bonds)
        instruments.append(KoreaTreasuryBondFuture(**kwargs))
    instruments += [Future(**_fields(f)) for f in p.futures or []]
    for o in p.options or []:
        kwargs = _fields(o)
        kwargs["option_type"] = OptionType(o.option_type.lower())
        instruments.append(VanillaOption(**kwargs))
    instruments += [FxSpot(**_fields(s)) for s in p.fx_spots or []]
    instruments += [FxForward(**_fields(f)) for f in p.fx_forwards or []]
    instruments += [FxSwap(**_fields(s)) for s in p.fx_swaps or []]
    instruments += [FxFuture(**_fields(f)) for f in p.fx_futures or []]
    instruments += [InterestRateSwap(**_with_day_count(s)) for s in p.swaps or []]
    instruments += [
        CrossCurrencySwap(**_with_day_count(s)) for s in p.cross_currency_swaps or []
    ]
    if not instruments:
        raise ValueError("portfolio must contain at least one instrument")
    return instruments


def configuration_from_input(c: Optional[ConfigurationInput]) -> CalculationConfiguration:
    """Build CalculationConfiguration; per-node bump lists and matrices override flat bumps."""
    if c is None:
        return CalculationConfiguration()
    kwargs = _fields(c)
    matrix = kwargs.pop("vega_matrix_bumps")
    if matrix is not None:
        if c.vega_bumps is not None:
            raise ValueError("give either vega_bumps or vega_matrix_bumps, not both")
        kwargs["vega_bump"] = tuple(tuple(row) for row in matrix)
    for flat, per_node in (
        ("rho_bump", "rho_bumps"),
        ("dividend_bump", "dividend_bumps"),
        ("vega_bump", "vega_bumps"),
    ):
        nodes = kwargs.pop(per_node)
        if nodes is not None:
            kwargs[flat] = tuple(nodes)
    kwargs["vega_differencing"] = Differencing(c.vega_differencing.lower())
    return CalculationConfiguration(**kwargs)


def _greek_entries(result: CalculationResult) -> list[GreekEntry]:
    entries = []
    for kind, by_factor in result.greeks.items():
        for factor, value in by_factor.items():
            if isinstance(value, GreekVector):
                entries.append(
                    GreekEntry(
                        kind=kind.value,
                        factor=factor,
                        labels=list(value.labels),
                        values=list(value.values),
                    )
                )
            elif isinstance(value, GreekMatrix):
                entries.append(
                    GreekEntry(
                        kind=kind.value,
                        factor=factor,
                        labels=list(value.row_labels),
                        strikes=list(value.col_labels),
                        matrix=value.values.tolist(),
                    )
                )
            else:
                entries.append(GreekEntry(kind=kind.value, factor=factor, value=value))
    return entries


def results_to_output(results: CalculationResults) -> CalculationOutput:
    """Render CalculationResults as GraphQL output types."""
    return CalculationOutput(
        results=[
            InstrumentResult(
                instrument_id=r.instrument_id,
                instrument_type=r.instrument_type,
                currency=r.currency,
                representation_currency=r.representation_currency,
                price=r.price,
                greeks=_greek_entries(r),
                cashflows=[
                    CashflowEntry(
                        payment_date=cf.payment_date, currency=cf.currency, amount=cf.amount
                    )
                    for cf in r.cashflows
                ],
                fx_exposure=[
                    ExposureEntry(currency=ccy, amount=amount)
                    for ccy, amount in sorted(r.fx_exposure.items())
                ],
            )
            for r in results.results.values()
        ],
        errors=[
            InstrumentErrorEntry(
                instrument_id=e.instrument_id,
                code=type(e.error).__name__,
                message=str(e.error),
                greek=e.greek.value if e.greek else None,
                factor=e.factor,
            )
            for errors in results.errors.values()
            for e in errors
        ],
        group_errors=[
            GroupErrorEntry(
                group_id=g.group_id,
                category=g.category.label,
                instrument_ids=list(g.instrument_ids),
                code=type(g.error).__name__,
                message=str(g.error),
            )
            for g in results.group_errors
        ],
    )


def run_calculation(
    market: MarketInput,
    portfolio: PortfolioInput,
    configuration: Optional[ConfigurationInput] = None,
) -> CalculationOutput:
    """
    Run one calculation. Invalid input and configuration errors are raised
    (GraphQL reports them in `errors`); per-instrument and per-group failures
    are returned in the payload.
    """
    snapshot = snapshot_from_input(market)
    instruments = portfolio_from_input(portfolio)
    config = configuration_from_input(configuration)
    logger.info("GraphQL calculate: %d instruments", len(instruments))
    return results_to_output(calculate(instruments, snapshot, config))

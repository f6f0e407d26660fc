"""
Engine: prices one category group of instruments and computes their Greeks.

An Engine owns the Parameters derived for its category (derived exactly once,
in the constructor) and runs:
1. a baseline pricing of every instrument, whose price and cashflows are reused;
2. for every requested Greek and every risk factor of the category, one
   BumpScenario of bumped Parameters views, shared by all instruments of the
   group that depend on that factor.

Failures are isolated per instrument and per (Greek, factor): a Greek that
cannot be computed is recorded as failed, never reported as zero.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from riskengine.categorizer import InstrumentCategorizer, InstrumentCategory
from riskengine.config import CalculationConfiguration
from riskengine.dispatch import PricerDispatch, create_default_dispatch
from riskengine.errors import ConfigurationError, PricingError, RiskEngineError
from riskengine.interfaces import Instrument
from riskengine.market import MarketDataSnapshot
from riskengine.parameters import ParameterDeriver, Parameters
from riskengine.pricers import PricingOutput
from riskengine.result import (
    CalculationResult,
    CalculationResults,
    GreekKind,
    GreekValue,
    InstrumentError,
)
from riskengine.risk import BaseGreek, default_greeks

logger = logging.getLogger(__name__)


def as_risk_error(exc: Exception, instrument: Instrument | None = None) -> RiskEngineError:
    """Return riskengine errors as is; wrap anything else raised by a pricer."""
    if isinstance(exc, RiskEngineError):
        return exc
    message = f"{type(exc).__name__}: {exc}"
    if instrument is not None:
        message = f"{type(instrument).__name__} {instrument.id}: {message}"
    error = PricingError(message)
    error.__cause__ = exc
    return error


@dataclass
class ScenarioOutcome:
    """Per-instrument values and failures of one (Greek, factor) scenario."""

    kind: GreekKind
    factor: str
    values: dict[str, GreekValue] = field(default_factory=dict)
    errors: dict[str, RiskEngineError] = field(default_factory=dict)


class Engine:
    """
    Prices one group of instruments that share an InstrumentCategory.

    Raises DataMissing from the constructor when the snapshot lacks something
    the category needs; the EngineGenerator turns that into a group error.
    """

    def __init__(
        self,
        category: InstrumentCategory,
        instruments: Iterable[Instrument],
        snapshot: MarketDataSnapshot,
        config: CalculationConfiguration | None = None,
        dispatch: PricerDispatch | None = None,
        deriver: ParameterDeriver | None = None,
        categorizer: InstrumentCategorizer | None = None,
        greeks: Sequence[BaseGreek] | None = None,
        group_id: int = 0,
    ) -> None:
        self.group_id = group_id
        self.category = category
        self.instruments = tuple(instruments)
        self.config = config or CalculationConfiguration()
        self.dispatch = dispatch or create_default_dispatch()
        self.greeks = tuple(greeks) if greeks is not None else default_greeks()
        categorizer = categorizer or InstrumentCategorizer()
        self._requirements = {
            inst.id: categorizer.requirements_of(inst) for inst in self.instruments
        }
        self.parameters: Parameters = (deriver or ParameterDeriver()).derive(
            snapshot, category
        )

    def run(self) -> CalculationResults:
        logger.info(
            "Engine %d [%s]: pricing %d instruments",
            self.group_id,
            self.category.label,
            len(self.instruments),
        )
        results = CalculationResults()
        baseline: dict[str, PricingOutput] = {}
        for inst in self.instruments:
            try:
                baseline[inst.id] = self.dispatch.price(inst, self.parameters)
            except ConfigurationError:
                raise
            except Exception as exc:
                error = as_risk_error(exc, inst)
                logger.warning("Pricing failed for %s: %s", inst.id, error)
                results.add_error(InstrumentError(inst.id, error))

        priced = [inst for inst in self.instruments if inst.id in baseline]
        tasks = [
            (greek, factor)
            for greek in self.greeks
            if greek.enabled(self.config)
            for factor in greek.factors(self.category.requirements)
        ]
        if self.config.scenario_workers > 1 and len(tasks) > 1:
            with ThreadPoolExecutor(max_workers=self.config.scenario_workers) as pool:
                outcomes = list(
                    pool.map(lambda task: self._run_scenario(*task, priced, baseline), tasks)
                )
        else:
            outcomes = [self._run_scenario(g, f, priced, baseline) for g, f in tasks]

        greeks: dict[str, dict[GreekKind, dict[str, GreekValue]]] = defaultdict(
            lambda: defaultdict(dict)
        )
        failed: dict[str, dict[GreekKind, dict[str, RiskEngineError]]] = defaultdict(
            lambda: defaultdict(dict)
        )
        for outcome in outcomes:
            for inst_id, value in outcome.values.items():
                greeks[inst_id][outcome.kind][outcome.factor] = value
            for inst_id, error in outcome.errors.items():
                failed[inst_id][outcome.kind][outcome.factor] = error
                results.add_error(InstrumentError(inst_id, error, outcome.kind, outcome.factor))

        for inst in priced:
            output = baseline[inst.id]
            results.add_result(
                CalculationResult(
                    instrument_id=inst.id,
                    instrument_type=type(inst).__name__,
                    currency=inst.currency,
                    evaluation_date=self.parameters.evaluation_date,
                    price=output.price,
                    greeks=greeks.get(inst.id, {}),
                    cashflows=output.cashflows if self.config.include_cashflows else (),
                    failed_greeks=failed.get(inst.id, {}),
                    fx_exposure=output.fx_exposure,
                )
            )
        logger.info(
            "Engine %d [%s]: %d priced, %d with errors",
            self.group_id,
            self.category.label,
            len(results),
            len(results.errors),
        )
        return results

    def _run_scenario(
        self,
        greek: BaseGreek,
        factor: str,
        instruments: Sequence[Instrument],
        baseline: dict[str, PricingOutput],
    ) -> ScenarioOutcome:
        outcome = ScenarioOutcome(greek.kind, factor)
        sensitive = [
            inst for inst in instruments if factor in greek.factors(self._requirements[inst.id])
        ]
        if not sensitive:
            return outcome
        try:
            scenario = greek.scenario(self.parameters, factor, self.config)
        except ConfigurationError:
            raise
        except RiskEngineError as exc:
            logger.warning("%s[%s] scenario could not be built: %s", greek.kind.value, factor, exc)
            outcome.errors.update((inst.id, exc) for inst in sensitive)
            return outcome

        logger.debug(
            "%s[%s]: %d views x %d instruments",
            greek.kind.value,
            factor,
            len(scenario.views),
            len(sensitive),
        )
        for inst in sensitive:
            try:
                prices = [self.dispatch.price(inst, view).price for view in scenario.views]
                base = baseline[inst.id]
                outcome.values[inst.id] = scenario.evaluate(
                    base.price, prices, inst.currency, base.cashflows
                )
            except ConfigurationError:
                raise
            except Exception as exc:
                error = as_risk_error(exc, inst)
                logger.warning("%s[%s] failed for %s: %s", greek.kind.value, factor, inst.id, error)
                outcome.errors[inst.id] = error
        return outcome

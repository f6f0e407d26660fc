"""
EngineGenerator: partitions a batch of instruments by category, runs one
Engine per group (concurrently) and merges the results.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Sequence

from riskengine.categorizer import InstrumentCategorizer, InstrumentCategory
from riskengine.config import CalculationConfiguration
from riskengine.dispatch import PricerDispatch, create_default_dispatch
from riskengine.engine import Engine, as_risk_error
from riskengine.errors import ConfigurationError, DuplicateInstrument, RiskEngineError
from riskengine.interfaces import Instrument
from riskengine.market import MarketDataSnapshot
from riskengine.parameters import ParameterDeriver
from riskengine.result import CalculationResults, GroupError, InstrumentError
from riskengine.risk import BaseGreek

logger = logging.getLogger(__name__)


class EngineGenerator:
    """
    Splits instruments into category groups and runs an Engine per group.

    The snapshot is the only object shared between Engines and is only read;
    each Engine derives its own Parameters. Results from different groups are
    merged as a disjoint union, so the merged output does not depend on the
    order in which groups finish.
    """

    def __init__(
        self,
        dispatch: PricerDispatch | None = None,
        categorizer: InstrumentCategorizer | None = None,
        deriver: ParameterDeriver | None = None,
        greeks: Sequence[BaseGreek] | None = None,
    ) -> None:
        self.dispatch = dispatch or create_default_dispatch()
        self.categorizer = categorizer or InstrumentCategorizer()
        self.deriver = deriver or ParameterDeriver()
        self.greeks = greeks

    def partition(
        self, instruments: Iterable[Instrument]
    ) -> tuple[dict[InstrumentCategory, list[Instrument]], list[InstrumentError]]:
        """Group instruments by category, in first-seen order."""
        groups: dict[InstrumentCategory, list[Instrument]] = {}
        errors = []
        for inst in instruments:
            try:
                category = self.categorizer.category_of(inst)
            except RiskEngineError as exc:
                logger.warning("Cannot categorize %s: %s", inst.id, exc)
                errors.append(InstrumentError(inst.id, exc))
                continue
            groups.setdefault(category, []).append(inst)
        return groups, errors

    def run(
        self,
        instruments: Iterable[Instrument],
        snapshot: MarketDataSnapshot,
        config: CalculationConfiguration | None = None,
    ) -> CalculationResults:
        """
        Calculate a batch. The categorizer memo lives for this call only and is
        emptied when it returns or raises.
        """
        try:
            return self._run(instruments, snapshot, config or CalculationConfiguration())
        finally:
            self.categorizer.clear()

    def _run(
        self,
        instruments: Iterable[Instrument],
        snapshot: MarketDataSnapshot,
        config: CalculationConfiguration,
    ) -> CalculationResults:
        config.validate()
        instruments = list(instruments)
        seen: set[str] = set()
        for inst in instruments:
            if inst.id in seen:
                raise DuplicateInstrument(inst.id)
            seen.add(inst.id)

        groups, errors = self.partition(instruments)
        logger.info(
            "Running %d instruments in %d groups (evaluation date %s)",
            len(instruments),
            len(groups),
            snapshot.evaluation_date.isoformat(),
        )
        results = CalculationResults()
        for error in errors:
            results.add_error(error)

        jobs = [
            (group_id, category, members)
            for group_id, (category, members) in enumerate(groups.items())
        ]
        if config.max_workers == 1 or len(jobs) <= 1:
            outputs = [self._run_group(*job, snapshot, config) for job in jobs]
        else:
            with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
                futures = [pool.submit(self._run_group, *job, snapshot, config) for job in jobs]
                outputs = [future.result() for future in futures]

        for output in outputs:
            results.merge(output)
        if config.representation_currency:
            results = results.converted(config.representation_currency, snapshot.fx_quotes())
        logger.info(
            "Run finished: %d results, %d instruments with errors, %d group errors",
            len(results),
            len(results.errors),
            len(results.group_errors),
        )
        return results

    def _run_group(
        self,
        group_id: int,
        category: InstrumentCategory,
        members: list[Instrument],
        snapshot: MarketDataSnapshot,
        config: CalculationConfiguration,
    ) -> CalculationResults:
        try:
            engine = Engine(
                category,
                members,
                snapshot,
                config=config,
                dispatch=self.dispatch,
                deriver=self.deriver,
                categorizer=self.categorizer,
                greeks=self.greeks,
                group_id=group_id,
            )
            return engine.run()
        except ConfigurationError:
            raise
        except Exception as exc:
            error = as_risk_error(exc)
            logger.error("Group %d [%s] failed: %s", group_id, category.label, error)
            return CalculationResults(
                group_errors=[
                    GroupError(group_id, category, tuple(inst.id for inst in members), error)
                ]
            )


def calculate(
    instruments: Iterable[Instrument],
    snapshot: MarketDataSnapshot,
    config: CalculationConfiguration | None = None,
) -> CalculationResults:
    """Run a batch with a fresh EngineGenerator and the default pricers."""
    return EngineGenerator().run(instruments, snapshot, config)

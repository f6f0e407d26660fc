"""Tests for EngineGenerator: partitioning, isolation and merging of group results."""

import random
from dataclasses import dataclass, replace

import pytest

from riskengine import demo
from riskengine.categorizer import InstrumentCategorizer, InstrumentCategory
from riskengine.config import CalculationConfiguration
from riskengine.engine import Engine
from riskengine.errors import (
    ConfigurationError,
    DataMissing,
    DuplicateInstrument,
    UnsupportedInstrument,
)
from riskengine.generator import EngineGenerator, calculate
from riskengine.market import CURVE, VOL, MarketKey
from riskengine.products import Bond
from riskengine.result import GreekKind, GreekMatrix

from conftest import make_book, make_snapshot

CONFIG = CalculationConfiguration.all_greeks()


def _flatten(results) -> dict:
    """Comparable view of a run: prices, Greek values and error kinds per instrument."""
    out = {}
    for instrument_id, result in results.results.items():
        greeks = {}
        for kind, by_factor in result.greeks.items():
            for factor, value in by_factor.items():
                if isinstance(value, GreekMatrix):
                    value = value.values.tolist()
                greeks[(kind, factor)] = value
        out[instrument_id] = (result.price, greeks, result.cashflows)
    for instrument_id, errors in results.errors.items():
        out[("error", instrument_id)] = sorted(type(e.error).__name__ for e in errors)
    return out


def test_partition_groups_by_category(book) -> None:
    groups, errors = EngineGenerator().partition(book)
    assert errors == []
    assert sum(len(members) for members in groups.values()) == len(book)
    categorizer = InstrumentCategorizer()
    for category, members in groups.items():
        assert all(categorizer.category_of(inst) == category for inst in members)


def test_partition_equivalence(book, snapshot) -> None:
    """The batch result equals the union of running each group on its own."""
    combined = calculate(book, snapshot, CONFIG)
    groups, _ = EngineGenerator().partition(book)
    separate = {}
    for category, members in groups.items():
        separate.update(_flatten(Engine(category, members, snapshot, config=CONFIG).run()))
    assert _flatten(combined) == separate


def test_one_engine_over_the_union_category_matches(book, snapshot) -> None:
    """Forcing the whole book into one Engine gives the same prices and Greeks."""
    categorizer = InstrumentCategorizer()
    union = InstrumentCategory.union(*(categorizer.category_of(inst) for inst in book))
    forced = Engine(union, book, snapshot, config=CONFIG).run()
    assert _flatten(forced) == _flatten(calculate(book, snapshot, CONFIG))


def test_single_instrument_runs_match_the_batch(book, snapshot) -> None:
    combined = _flatten(calculate(book, snapshot, CONFIG))
    for inst in book:
        alone = _flatten(calculate([inst], snapshot, CONFIG))
        assert alone[inst.id] == combined[inst.id]


def test_determinism(book, snapshot) -> None:
    first = _flatten(calculate(book, snapshot, CONFIG))
    second = _flatten(calculate(make_book(), make_snapshot(), CONFIG))
    assert first == second


def test_input_order_does_not_matter(book, snapshot) -> None:
    shuffled = list(book)
    random.Random(7).shuffle(shuffled)
    assert _flatten(calculate(shuffled, snapshot, CONFIG)) == _flatten(
        calculate(book, snapshot, CONFIG)
    )


def test_serial_and_threaded_runs_agree(book, snapshot) -> None:
    serial = calculate(book, snapshot, replace(CONFIG, max_workers=1))
    threaded = calculate(book, snapshot, replace(CONFIG, max_workers=8, scenario_workers=2))
    assert _flatten(serial) == _flatten(threaded)


def test_missing_data_only_fails_the_dependent_group(book, snapshot) -> None:
    degraded = snapshot.without([MarketKey(VOL, "KOSPI2")])
    results = calculate(book, degraded, CONFIG)
    (group_error,) = results.group_errors
    assert group_error.instrument_ids == ("K200 C360",)
    assert isinstance(group_error.error, DataMissing)
    assert group_error.error.name == "KOSPI2"
    assert "K200 C360" not in results
    assert results.failed_ids == {"K200 C360"}

    full = _flatten(calculate(book, snapshot, CONFIG))
    partial = _flatten(results)
    for inst in book:
        if inst.id != "K200 C360":
            assert partial[inst.id] == full[inst.id]


def test_missing_shared_curve_fails_every_dependent_group(book, snapshot) -> None:
    results = calculate(book, snapshot.without([MarketKey(CURVE, "USDSOFR")]))
    failed = {i for g in results.group_errors for i in g.instrument_ids}
    assert failed == {"USDKRW 6M", "USDKRW 1M/1Y", "USD Mar24", "CRS 3Y"}
    assert set(results) == {inst.id for inst in book} - failed


def test_duplicate_ids_abort_the_run(book, snapshot) -> None:
    with pytest.raises(DuplicateInstrument, match="IRS 2Y"):
        calculate(book + [book[-2]], snapshot)


def test_unsupported_instrument_is_isolated(book, snapshot) -> None:
    @dataclass(frozen=True)
    class Swaption:
        id: str
        currency: str

    results = calculate(book + [Swaption("SWPTN", "KRW")], snapshot)
    (error,) = results.errors["SWPTN"]
    assert isinstance(error.error, UnsupportedInstrument)
    assert len(results) == len(book)


def test_generator_uses_injected_collaborators(book, snapshot) -> None:
    seen = []

    class RecordingCategorizer(InstrumentCategorizer):
        def category_of(self, instrument):
            seen.append(instrument.id)
            return super().category_of(instrument)

    EngineGenerator(categorizer=RecordingCategorizer()).run(book, snapshot)
    assert set(seen) == {inst.id for inst in book}


def test_categorizer_memo_is_emptied_after_each_run(book, snapshot) -> None:
    categorizer = InstrumentCategorizer()
    generator = EngineGenerator(categorizer=categorizer)
    bond = next(inst for inst in book if isinstance(inst, Bond))
    for i in range(3):
        results = generator.run([replace(bond, id=f"BOND {i}")], snapshot)
        assert f"BOND {i}" in results
        assert len(categorizer) == 0


def test_categorizer_memo_is_emptied_when_a_run_raises(book, snapshot) -> None:
    categorizer = InstrumentCategorizer()
    generator = EngineGenerator(categorizer=categorizer)
    # the per-pillar bump count matches no curve, which aborts the run inside an Engine
    config = CalculationConfiguration(compute_rho_structure=True, rho_bump=(0.0001,) * 97)
    with pytest.raises(ConfigurationError):
        generator.run(book, snapshot, replace(config, max_workers=1))
    assert len(categorizer) == 0


def test_demo_runs(capsys) -> None:
    demo.main()
    out = capsys.readouterr().out
    assert "K200 C360" in out
    assert "ERROR" not in out
    assert out.rstrip().endswith("Done.")


def test_results_in_a_representation_currency(book, snapshot) -> None:
    local = calculate(book, snapshot, CONFIG)
    in_usd = calculate(book, snapshot, replace(CONFIG, representation_currency="USD"))
    assert in_usd.ok
    rate = 1.0 / snapshot.fx("USDKRW")
    for instrument_id, result in in_usd.results.items():
        assert result.representation_currency == "USD"
        assert result.price == pytest.approx(local[instrument_id].price * rate)
        assert result.cashflows == local[instrument_id].cashflows
    option = in_usd["K200 C360"]
    assert option.greek(GreekKind.DELTA, "KOSPI2") == pytest.approx(
        local["K200 C360"].greek(GreekKind.DELTA, "KOSPI2") * rate
    )

"""Tests for CalculationResult and CalculationResults."""

import math
from datetime import date

import numpy as np
import pytest

from riskengine.categorizer import InstrumentCategory, MarketRequirements
from riskengine.errors import DataMissing, DuplicateInstrument, NumericalFailure
from riskengine.result import (
    CalculationResult,
    CalculationResults,
    Cashflow,
    GreekKind,
    GreekMatrix,
    GreekVector,
    GroupError,
    InstrumentError,
)

EVAL = date(2024, 1, 2)


def _result(instrument_id: str = "A", **kwargs) -> CalculationResult:
    fields = dict(
        instrument_id=instrument_id,
        instrument_type="Bond",
        currency="KRW",
        evaluation_date=EVAL,
        price=100.0,
    )
    fields.update(kwargs)
    return CalculationResult(**fields)


def test_greek_lookup() -> None:
    result = _result(
        greeks={
            GreekKind.DELTA: {"KOSPI2": 0.5, "USDKRW": 0.25},
            GreekKind.RHO: {"KRWIRS": -3.0},
            GreekKind.RHO_STRUCTURE: {
                "KRWIRS": GreekVector((1.0, 2.0), (-1.0, -2.0)),
                "KTB": GreekVector((1.0,), (-0.5,)),
            },
        }
    )
    assert result.greek(GreekKind.RHO) == -3.0
    assert result.greek("delta", "USDKRW") == 0.25
    assert result.greek(GreekKind.DELTA) == pytest.approx(0.75)
    with pytest.raises(KeyError, match="pass factor"):
        result.greek(GreekKind.RHO_STRUCTURE)
    with pytest.raises(KeyError):
        result.greek(GreekKind.VEGA)


def test_result_is_immutable() -> None:
    greeks = {GreekKind.RHO: {"KRWIRS": -3.0}}
    result = _result(greeks=greeks)
    greeks[GreekKind.RHO]["KRWIRS"] = 0.0
    assert result.greek(GreekKind.RHO) == -3.0
    with pytest.raises(TypeError):
        result.greeks[GreekKind.RHO]["KRWIRS"] = 1.0  # type: ignore[index]


def test_cashflows_are_sorted() -> None:
    flows = (Cashflow(date(2025, 1, 2), "KRW", 2.0), Cashflow(date(2024, 7, 2), "KRW", 1.0))
    assert [cf.amount for cf in _result(cashflows=flows).cashflows] == [1.0, 2.0]


def test_greek_vector_and_matrix() -> None:
    vector = GreekVector((1.0, 2.0), (1.5, 2.5))
    assert vector.total() == 4.0
    assert not GreekVector((1.0,), (math.nan,)).is_finite()
    with pytest.raises(ValueError):
        GreekVector((1.0,), (1.0, 2.0))

    values = np.ones((2, 3))
    matrix = GreekMatrix((0.5, 1.0), (90.0, 100.0, 110.0), values)
    values[0, 0] = 10.0
    assert matrix.total() == 6.0
    assert not matrix.values.flags.writeable
    with pytest.raises(ValueError):
        GreekMatrix((0.5,), (90.0,), values)


def test_summary_lists_greeks_and_failures() -> None:
    result = _result(
        greeks={GreekKind.RHO: {"KRWIRS": -3.0}},
        failed_greeks={GreekKind.VEGA: {"KOSPI2": NumericalFailure("vega is not finite")}},
        cashflows=(Cashflow(date(2024, 7, 2), "KRW", 1.0),),
    )
    text = result.summary()
    assert "instrument: A (Bond, KRW)" in text
    assert "KRWIRS: -3.0000" in text
    assert "vega FAILED (KOSPI2)" in text
    assert "cashflow 2024-07-02 KRW 1.00" in text


def test_merge_is_a_disjoint_union() -> None:
    left = CalculationResults({"A": _result("A")})
    right = CalculationResults(
        {"B": _result("B")},
        errors={"C": [InstrumentError("C", NumericalFailure("nan"))]},
    )
    merged = left.merge(right)
    assert set(merged) == {"A", "B"}
    assert merged.failed_ids == {"C"}
    assert not merged.ok
    with pytest.raises(DuplicateInstrument):
        merged.merge(CalculationResults({"A": _result("A")}))


def test_to_frame() -> None:
    category = InstrumentCategory(("KRW",), MarketRequirements(curves=("KTB",)))
    results = CalculationResults(
        {
            "A": _result(
                "A",
                greeks={
                    GreekKind.RHO: {"KRWIRS": -3.0, "KTB": -1.0},
                    GreekKind.RHO_STRUCTURE: {"KRWIRS": GreekVector((1.0, 2.0), (-1.0, -2.0))},
                },
            )
        },
        errors={"A": [InstrumentError("A", NumericalFailure("nan"), GreekKind.VEGA, "KOSPI2")]},
        group_errors=[GroupError(1, category, ("B",), DataMissing("curve", "KTB"))],
    )
    frame = results.to_frame().set_index("instrument_id")
    assert list(frame.index) == ["A", "B"]
    assert frame.loc["A", "price"] == 100.0
    assert frame.loc["A", "rho"] == -4.0
    assert frame.loc["A", "rho_structure"] == -3.0
    assert "vega[KOSPI2]" in frame.loc["A", "error"]
    assert "DataMissing" in frame.loc["B", "error"]


def test_error_strings() -> None:
    error = InstrumentError("A", NumericalFailure("nan"), GreekKind.DELTA, "KOSPI2")
    assert str(error) == "A delta[KOSPI2]: NumericalFailure: nan"
    assert str(InstrumentError("A", NumericalFailure("nan"))) == "A price: NumericalFailure: nan"


def test_converted_result_scales_price_and_every_greek() -> None:
    flows = (Cashflow(date(2024, 7, 2), "KRW", 1_300.0),)
    result = _result(
        price=1_300.0,
        greeks={
            GreekKind.DELTA: {"KOSPI2": 2_600.0},
            GreekKind.RHO_STRUCTURE: {"KRWIRS": GreekVector((1.0, 2.0), (-130.0, -260.0))},
            GreekKind.VEGA_MATRIX: {
                "KOSPI2": GreekMatrix((0.5,), (90.0, 100.0), np.array([[13.0, 26.0]]))
            },
        },
        cashflows=flows,
        fx_exposure={"USD": 1.0},
    )
    assert result.representation_currency == "KRW"
    usd = result.converted("USD", 1.0 / 1_300.0)
    assert usd.representation_currency == "USD"
    assert usd.currency == "KRW"
    assert usd.price == pytest.approx(1.0)
    assert usd.greek(GreekKind.DELTA) == pytest.approx(2.0)
    assert usd.greek(GreekKind.RHO_STRUCTURE).values == pytest.approx((-0.1, -0.2))
    assert usd.greek(GreekKind.VEGA_MATRIX).values[0].tolist() == pytest.approx([0.01, 0.02])
    assert usd.cashflows == flows
    assert dict(usd.fx_exposure) == {"USD": 1.0}
    assert usd.converted("USD", 5.0) is usd
    assert "price: 1.0000 USD" in usd.summary()


def test_results_converted_with_missing_quote_keeps_result_and_reports() -> None:
    results = CalculationResults(
        {"A": _result("A", price=1_300.0), "B": _result("B", currency="JPY", price=150.0)}
    )
    converted = results.converted("USD", {"USDKRW": 1_300.0})
    assert converted["A"].price == pytest.approx(1.0)
    assert converted["A"].representation_currency == "USD"
    assert converted["B"].price == 150.0
    assert converted["B"].representation_currency == "JPY"
    (error,) = converted.errors["B"]
    assert isinstance(error.error, DataMissing)
    assert "JPYUSD" in str(error)
    # inverted quote
    assert results.converted("KRW", {"KRWJPY": 10.0})["B"].price == pytest.approx(15.0)
    assert results.ok

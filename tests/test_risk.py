"""Tests for bump-and-reprice Greeks: delta, gamma, theta, vega, rho and their structures."""

import math
from datetime import date, timedelta

import pytest
from scipy.stats import norm

from riskengine.categorizer import MarketRequirements
from riskengine.config import CalculationConfiguration, Differencing
from riskengine.curves import ZeroRateCurve
from riskengine.dispatch import create_default_dispatch
from riskengine.errors import ConfigurationError, DataMissing, NumericalFailure
from riskengine.generator import calculate
from riskengine.market import CurveData, MarketDataSnapshot, SurfaceData
from riskengine.parameters import Parameters
from riskengine.products import Bond, Future, FxForward, InterestRateSwap, OptionType, VanillaOption
from riskengine.result import THETA_FACTOR, Cashflow, GreekKind, GreekMatrix, GreekVector
from riskengine.risk import Delta, DividendDelta, DividendStructure, RhoStructure, Theta

from conftest import EVAL, PILLARS, flat, make_book

ONE_YEAR = date(2025, 1, 1)


def _option_snapshot(vol: float = 0.2) -> MarketDataSnapshot:
    return MarketDataSnapshot(
        EVAL,
        spots={"IDX": 100.0},
        curves={"R": CurveData((1.0,), (0.05,))},
        vols={"IDX": SurfaceData((0.5, 1.0, 2.0), (90.0, 100.0, 110.0), ((vol,) * 3,) * 3)},
    )


def _option(**overrides) -> VanillaOption:
    fields = dict(
        id="OPT",
        currency="KRW",
        underlying="IDX",
        strike=100.0,
        maturity=ONE_YEAR,
        option_type=OptionType.CALL,
        discount_curve="R",
        volatility="IDX",
    )
    fields.update(overrides)
    return VanillaOption(**fields)


def test_delta_converges_to_black_scholes() -> None:
    """Central difference delta at a 1e-4 relative bump matches N(d1) to 1e-4."""
    config = CalculationConfiguration(
        compute_delta=True, compute_gamma=True, delta_bump_ratio=1e-4, gamma_bump_ratio=1e-3
    )
    result = calculate([_option()], _option_snapshot(), config)["OPT"]
    d1 = (0.05 + 0.5 * 0.2**2) / 0.2
    assert abs(result.greek(GreekKind.DELTA, "IDX") - norm.cdf(d1)) < 1e-4
    assert result.greek(GreekKind.GAMMA, "IDX") == pytest.approx(
        norm.pdf(d1) / (100.0 * 0.2), rel=1e-3
    )


def test_put_delta_is_negative() -> None:
    config = CalculationConfiguration(compute_delta=True)
    result = calculate([_option(option_type=OptionType.PUT)], _option_snapshot(), config)["OPT"]
    assert -1.0 < result.greek(GreekKind.DELTA) < 0.0


def test_fx_forward_delta_is_discounted_notional() -> None:
    """For an FX forward, dPV/dspot = notional_base * DF_base(T), exactly linear."""
    snapshot = MarketDataSnapshot(
        EVAL,
        fx={"USDKRW": 1300.0},
        curves={"USD": CurveData((1.0,), (0.05,)), "KRW": CurveData((1.0,), (0.035,))},
    )
    fwd = FxForward(
        id="FWD",
        currency="KRW",
        base_currency="USD",
        fx_pair="USDKRW",
        maturity=ONE_YEAR,
        notional_base=5_000_000.0,
        strike=1290.0,
        base_curve="USD",
        quote_curve="KRW",
    )
    result = calculate([fwd], snapshot, CalculationConfiguration(compute_delta=True))["FWD"]
    assert result.greek(GreekKind.DELTA, "USDKRW") == pytest.approx(5_000_000.0 * math.exp(-0.05))
    assert GreekKind.GAMMA not in result.greeks


def test_irs_rho_matches_analytic_pv01() -> None:
    """
    One-period (3M) pay fixed swap on a flat 3% curve:
    PV = N - N (1 + K a) DF(T), so PV01 = 1e-4 * N * T * DF(T) * (1 + K a).
    """
    swap = InterestRateSwap(
        id="IRS 3M",
        currency="KRW",
        notional=10_000_000.0,
        fixed_rate=0.03,
        effective_date=EVAL,
        maturity=date(2024, 4, 2),
        discount_curve="C",
    )
    snapshot = MarketDataSnapshot(EVAL, curves={"C": flat(0.03)})
    config = CalculationConfiguration(compute_rho=True, rho_bump=1e-4)
    result = calculate([swap], snapshot, config)["IRS 3M"]

    t = 91 / 365.0
    analytic = 1e-4 * 10_000_000.0 * t * math.exp(-0.03 * t) * (1.0 + 0.03 * t)
    assert abs(result.greek(GreekKind.RHO, "C") - analytic) < 1e-4
    assert len(result.cashflows) == 1
    assert result.cashflows[0].payment_date == date(2024, 4, 2)


def test_rho_structure_adds_up_to_rho(book, snapshot) -> None:
    bond = next(inst for inst in book if isinstance(inst, Bond))
    config = CalculationConfiguration(compute_rho=True, compute_rho_structure=True)
    result = calculate([bond], snapshot, config)[bond.id]
    structure = result.greek(GreekKind.RHO_STRUCTURE, "KTB")
    assert isinstance(structure, GreekVector)
    assert structure.labels == PILLARS
    assert structure.total() == pytest.approx(result.greek(GreekKind.RHO, "KTB"), rel=1e-6)
    assert result.greek(GreekKind.RHO) < 0.0


def test_rho_structure_accepts_per_pillar_bumps(snapshot) -> None:
    bond = make_book()[0]
    bumps = tuple(1e-4 * (i + 1) for i in range(len(PILLARS)))
    flat_run = calculate(
        [bond], snapshot, CalculationConfiguration(compute_rho_structure=True)
    )[bond.id].greek(GreekKind.RHO_STRUCTURE)
    node_run = calculate(
        [bond], snapshot, CalculationConfiguration(compute_rho_structure=True, rho_bump=bumps)
    )[bond.id].greek(GreekKind.RHO_STRUCTURE)
    for i, (a, b) in enumerate(zip(flat_run.values, node_run.values)):
        assert b == pytest.approx(a * (i + 1), rel=1e-5, abs=1e-12)


def test_rho_bump_vector_length_mismatch_aborts(snapshot) -> None:
    config = CalculationConfiguration(compute_rho_structure=True, rho_bump=(1e-4, 1e-4))
    with pytest.raises(ConfigurationError, match="rho_bump"):
        calculate(make_book(), snapshot, config)


@pytest.mark.parametrize(
    "overrides",
    [
        {"compute_rho": True, "rho_bump": 0.0},
        {"compute_vega": True, "vega_bump": -0.01},
        {"compute_delta": True, "delta_bump_ratio": 0.0},
        {"compute_gamma": True, "gamma_bump_ratio": -1e-4},
        {"compute_rho_structure": True, "rho_bump": (1e-4, 0.0)},
        {"compute_theta": True, "theta_gap_days": 0},
    ],
)
def test_zero_or_negative_bumps_are_rejected(overrides, snapshot) -> None:
    with pytest.raises(ConfigurationError):
        calculate(make_book(), snapshot, CalculationConfiguration(**overrides))


def test_theta_is_one_day_roll(snapshot) -> None:
    bond = make_book()[0]
    result = calculate([bond], snapshot, CalculationConfiguration(compute_theta=True))[bond.id]
    dispatch = create_default_dispatch()
    curve = ZeroRateCurve(name="KTB", pillars=PILLARS, zero_rates_cc=[0.033] * len(PILLARS))
    base = Parameters(evaluation_date=EVAL, curves={"KTB": curve})
    rolled = base.with_evaluation_date(EVAL + timedelta(days=1))
    expected = (dispatch.price(bond, rolled).price - dispatch.price(bond, base).price) * 365.0
    assert result.greek(GreekKind.THETA, THETA_FACTOR) == pytest.approx(expected)
    assert result.greek(GreekKind.THETA) > 0.0


def test_theta_adds_back_a_coupon_paid_inside_the_roll() -> None:
    evaluation_date = date(2024, 6, 9)
    bond = Bond(
        id="KTB 4% 26",
        currency="KRW",
        discount_curve="KTB",
        issue_date=date(2023, 6, 10),
        maturity=date(2026, 6, 10),
        coupon_rate=0.04,
    )
    snapshot = MarketDataSnapshot(evaluation_date, curves={"KTB": flat(0.03)})
    result = calculate([bond], snapshot, CalculationConfiguration(compute_theta=True))[bond.id]
    assert result.cashflows[0] == Cashflow(date(2024, 6, 10), "KRW", 2.0)

    dispatch = create_default_dispatch()
    curve = ZeroRateCurve(name="KTB", pillars=PILLARS, zero_rates_cc=[0.03] * len(PILLARS))
    base = Parameters(evaluation_date=evaluation_date, curves={"KTB": curve})
    rolled = dispatch.price(bond, base.with_evaluation_date(date(2024, 6, 10))).price
    expected = (rolled + 2.0 - dispatch.price(bond, base).price) * 365.0
    theta = result.greek(GreekKind.THETA)
    assert theta == pytest.approx(expected)
    # carry on about 104 of value at 3%
    assert 0.0 < theta < 5.0


def test_theta_converts_foreign_cashflows_at_spot() -> None:
    """A forward settling inside the roll is worth its settlement amounts, not zero."""
    fwd = FxForward(
        id="USDKRW 1D",
        currency="KRW",
        base_currency="USD",
        fx_pair="USDKRW",
        maturity=EVAL + timedelta(days=1),
        notional_base=1_000.0,
        strike=1_290.0,
        base_curve="USDSOFR",
        quote_curve="KRWIRS",
    )
    snapshot = MarketDataSnapshot(
        EVAL,
        fx={"USDKRW": 1_300.0},
        curves={"USDSOFR": flat(0.05), "KRWIRS": flat(0.035)},
    )
    result = calculate([fwd], snapshot, CalculationConfiguration(compute_theta=True))[fwd.id]
    settled = 1_000.0 * (1_300.0 - 1_290.0)
    assert result.greek(GreekKind.THETA) == pytest.approx((settled - result.price) * 365.0)
    # without the settlement amounts theta would be about -price * 365
    assert abs(result.greek(GreekKind.THETA)) < 0.1 * result.price * 365.0


def test_vega_forward_and_central() -> None:
    snapshot = _option_snapshot()
    central = calculate(
        [_option()], snapshot, CalculationConfiguration(compute_vega=True, vega_bump=0.001)
    )["OPT"].greek(GreekKind.VEGA, "IDX")
    forward = calculate(
        [_option()],
        snapshot,
        CalculationConfiguration(
            compute_vega=True, vega_bump=0.001, vega_differencing=Differencing.FORWARD
        ),
    )["OPT"].greek(GreekKind.VEGA, "IDX")
    d1 = (0.05 + 0.5 * 0.2**2) / 0.2
    analytic = 100.0 * norm.pdf(d1) * 0.001
    assert central == pytest.approx(analytic, rel=1e-4)
    assert forward == pytest.approx(analytic, rel=1e-2)
    assert forward != central


def test_vega_structure_and_matrix_add_up_to_vega() -> None:
    snapshot = _option_snapshot()
    option = _option(maturity=date(2024, 10, 1))
    vega = calculate(
        [option], snapshot, CalculationConfiguration(compute_vega=True)
    )["OPT"].greek(GreekKind.VEGA)
    structure = calculate(
        [option], snapshot, CalculationConfiguration(compute_vega_structure=True)
    )["OPT"].greek(GreekKind.VEGA_STRUCTURE)
    matrix = calculate(
        [option],
        snapshot,
        CalculationConfiguration(compute_vega_matrix=True, vega_bump=((0.01,) * 3,) * 3),
    )["OPT"].greek(GreekKind.VEGA_MATRIX)

    assert isinstance(structure, GreekVector)
    assert structure.labels == (0.5, 1.0, 2.0)
    assert structure.values[2] == pytest.approx(0.0)
    assert structure.total() == pytest.approx(vega, rel=5e-3)
    assert isinstance(matrix, GreekMatrix)
    assert matrix.values.shape == (3, 3)
    assert matrix.total() == pytest.approx(vega, rel=5e-3)


def test_failed_greek_is_recorded_not_zeroed() -> None:
    """A vol of 0.5% cannot be bumped down by 1 vol point; the other Greeks survive."""
    config = CalculationConfiguration(compute_delta=True, compute_vega=True)
    results = calculate([_option()], _option_snapshot(vol=0.005), config)
    result = results["OPT"]
    assert math.isfinite(result.price)
    assert GreekKind.DELTA in result.greeks
    assert GreekKind.VEGA not in result.greeks
    assert isinstance(result.failed_greeks[GreekKind.VEGA]["IDX"], NumericalFailure)
    assert result.has_failures()
    (error,) = results.errors["OPT"]
    assert error.greek is GreekKind.VEGA
    assert error.factor == "IDX"
    with pytest.raises(KeyError, match="vega failed"):
        result.greek(GreekKind.VEGA)


def test_non_applicable_greek_is_absent(book, snapshot) -> None:
    bond = book[0]
    result = calculate([bond], snapshot, CalculationConfiguration.all_greeks())[bond.id]
    assert set(result.greeks) == {GreekKind.THETA, GreekKind.RHO, GreekKind.RHO_STRUCTURE}
    assert not result.has_failures()


def test_greek_factors() -> None:
    requirements = MarketRequirements(curves=("KRWIRS",), spots=("KOSPI2",), fx_pairs=("USDKRW",))
    assert Delta().factors(requirements) == ("KOSPI2", "USDKRW")
    assert RhoStructure().factors(requirements) == ("KRWIRS",)
    assert Theta().factors(MarketRequirements()) == (THETA_FACTOR,)


def test_delta_on_zero_spot_fails_only_that_greek() -> None:
    snapshot = MarketDataSnapshot(
        EVAL,
        spots={"IDX": 0.0},
        curves={"R": CurveData((1.0,), (0.05,))},
    )
    fut = Future(id="F", currency="KRW", underlying="IDX", maturity=ONE_YEAR, discount_curve="R")
    config = CalculationConfiguration(compute_delta=True, compute_rho=True)
    results = calculate([fut], snapshot, config)
    assert results["F"].price == 0.0
    assert GreekKind.RHO in results["F"].greeks
    assert isinstance(results["F"].failed_greeks[GreekKind.DELTA]["IDX"], NumericalFailure)


def test_all_greeks_on_the_sample_book(book, snapshot) -> None:
    results = calculate(book, snapshot, CalculationConfiguration.all_greeks(vega_bump=0.01))
    assert results.ok
    option = results["K200 C360"]
    assert 0.0 < option.greek(GreekKind.DELTA, "KOSPI2") < 250_000.0
    assert option.greek(GreekKind.GAMMA, "KOSPI2") > 0.0
    assert option.greek(GreekKind.VEGA, "KOSPI2") > 0.0
    assert option.greek(GreekKind.DIVIDEND_DELTA, "KOSPI2") < 0.0
    assert results["USDKRW 6M"].greek(GreekKind.DELTA, "USDKRW") > 0.0


@pytest.mark.parametrize("greek", [DividendDelta(), DividendStructure()])
def test_dividend_greeks_without_a_dividend_curve_raise_data_missing(greek) -> None:
    params = Parameters(evaluation_date=EVAL)
    config = CalculationConfiguration()
    with pytest.raises(DataMissing, match="IDX"):
        greek.scenario(params, "IDX", config)
    with pytest.raises(DataMissing):
        greek.curve(params, None)

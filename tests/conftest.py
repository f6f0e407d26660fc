"""Shared market snapshot and sample book for the test suite."""

from datetime import date

import pytest

from riskengine.market import CurveData, MarketDataSnapshot, SurfaceData
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

EVAL = date(2024, 1, 2)
PILLARS = (0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0)


def flat(rate: float, pillars=PILLARS) -> CurveData:
    return CurveData(pillars, tuple(rate for _ in pillars))


def make_snapshot(evaluation_date: date = EVAL) -> MarketDataSnapshot:
    return MarketDataSnapshot(
        evaluation_date,
        spots={"KOSPI2": 350.0},
        fx={"USDKRW": 1300.0},
        curves={
            "KRWIRS": CurveData(PILLARS, (0.035, 0.0345, 0.034, 0.033, 0.0325, 0.032, 0.0315)),
            "KTB": flat(0.033),
            "KRWREPO": flat(0.0345),
            "USDSOFR": CurveData(PILLARS, (0.053, 0.052, 0.050, 0.046, 0.043, 0.041, 0.040)),
        },
        vols={
            "KOSPI2": SurfaceData(
                tenors=(0.25, 0.5, 1.0),
                strikes=(300.0, 350.0, 400.0),
                vols=((0.22, 0.18, 0.17), (0.21, 0.18, 0.17), (0.20, 0.18, 0.175)),
            )
        },
        dividends={"KOSPI2": CurveData((1.0,), (0.015,))},
    )


def make_book() -> list:
    """One instrument of every supported type, all priceable against make_snapshot()."""
    ktb = Bond(
        id="KTB 3Y",
        currency="KRW",
        discount_curve="KTB",
        issue_date=date(2023, 12, 10),
        maturity=date(2026, 12, 10),
        coupon_rate=0.0325,
        notional=10_000.0,
    )
    return [
        ktb,
        KoreaTreasuryBondFuture(
            id="KTBF 3Y Mar24",
            currency="KRW",
            maturity=date(2024, 3, 19),
            underlying_bonds=(
                ktb,
                Bond(
                    id="KTB 3Y old",
                    currency="KRW",
                    discount_curve="KTB",
                    issue_date=date(2023, 6, 10),
                    maturity=date(2026, 6, 10),
                    coupon_rate=0.0375,
                ),
            ),
            discount_curve="KTB",
            borrowing_curve="KRWREPO",
            average_trade_price=104.0,
        ),
        Future(
            id="K200 Mar24",
            currency="KRW",
            underlying="KOSPI2",
            maturity=date(2024, 3, 14),
            discount_curve="KRWIRS",
            dividend_curve="KOSPI2",
            unit_notional=250_000.0,
            average_trade_price=352.0,
        ),
        VanillaOption(
            id="K200 C360",
            currency="KRW",
            underlying="KOSPI2",
            strike=360.0,
            maturity=date(2024, 6, 13),
            option_type=OptionType.CALL,
            discount_curve="KRWIRS",
            volatility="KOSPI2",
            dividend_curve="KOSPI2",
            unit_notional=250_000.0,
        ),
        FxSpot(
            id="USD cash",
            currency="KRW",
            base_currency="USD",
            fx_pair="USDKRW",
            notional_base=1_000_000.0,
        ),
        FxForward(
            id="USDKRW 6M",
            currency="KRW",
            base_currency="USD",
            fx_pair="USDKRW",
            maturity=date(2024, 7, 2),
            notional_base=1_000_000.0,
            strike=1290.0,
            base_curve="USDSOFR",
            quote_curve="KRWIRS",
        ),
        FxSwap(
            id="USDKRW 1M/1Y",
            currency="KRW",
            base_currency="USD",
            fx_pair="USDKRW",
            near_date=date(2024, 2, 2),
            far_date=date(2025, 1, 2),
            notional_base=1_000_000.0,
            near_rate=1299.0,
            far_rate=1280.0,
            base_curve="USDSOFR",
            quote_curve="KRWIRS",
        ),
        FxFuture(
            id="USD Mar24",
            currency="KRW",
            underlying_currency="USD",
            fx_pair="USDKRW",
            maturity=date(2024, 3, 18),
            underlying_curve="USDSOFR",
            futures_curve="KRWIRS",
            unit_notional=10_000.0,
            average_trade_price=1295.0,
        ),
        InterestRateSwap(
            id="IRS 2Y",
            currency="KRW",
            notional=10_000_000_000.0,
            fixed_rate=0.034,
            effective_date=EVAL,
            maturity=date(2026, 1, 2),
            discount_curve="KRWIRS",
        ),
        CrossCurrencySwap(
            id="CRS 3Y",
            currency="KRW",
            floating_currency="USD",
            fx_pair="USDKRW",
            fixed_notional=13_000_000_000.0,
            floating_notional=10_000_000.0,
            fixed_rate=0.031,
            effective_date=date(2024, 1, 4),
            maturity=date(2027, 1, 4),
            fixed_curve="KRWIRS",
            floating_curve="USDSOFR",
            frequency_months=6,
        ),
    ]


@pytest.fixture
def snapshot() -> MarketDataSnapshot:
    return make_snapshot()


@pytest.fixture
def book() -> list:
    return make_book()

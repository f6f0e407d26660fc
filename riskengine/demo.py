"""Demo: sample KRW/USD market, a small mixed book, prices and Greeks."""

from datetime import date

from riskengine.config import CalculationConfiguration
from riskengine.generator import calculate
from riskengine.market import CurveData, MarketDataSnapshot, SurfaceData
from riskengine.products import (
    Bond,
    FxForward,
    InterestRateSwap,
    OptionType,
    VanillaOption,
)


def sample_snapshot(evaluation_date: date = date(2024, 1, 2)) -> MarketDataSnapshot:
    pillars = (0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0)
    return MarketDataSnapshot(
        evaluation_date,
        spots={"KOSPI2": 350.0},
        fx={"USDKRW": 1300.0},
        curves={
            "KRWIRS": CurveData(pillars, (0.035, 0.0345, 0.034, 0.033, 0.0325, 0.032, 0.0315)),
            "USDSOFR": CurveData(pillars, (0.053, 0.052, 0.050, 0.046, 0.043, 0.041, 0.040)),
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


def sample_book() -> list:
    return [
        Bond(
            id="KTB 3Y",
            currency="KRW",
            discount_curve="KRWIRS",
            issue_date=date(2023, 12, 10),
            maturity=date(2026, 12, 10),
            coupon_rate=0.0325,
            notional=10_000_000_000,
        ),
        InterestRateSwap(
            id="IRS 2Y",
            currency="KRW",
            notional=10_000_000_000,
            fixed_rate=0.034,
            effective_date=date(2024, 1, 2),
            maturity=date(2026, 1, 2),
            discount_curve="KRWIRS",
        ),
        FxForward(
            id="USDKRW 6M",
            currency="KRW",
            base_currency="USD",
            fx_pair="USDKRW",
            maturity=date(2024, 7, 2),
            notional_base=1_000_000,
            strike=1290.0,
            base_curve="USDSOFR",
            quote_curve="KRWIRS",
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
            unit_notional=250_000,
        ),
    ]


def main() -> None:
    snapshot = sample_snapshot()
    config = CalculationConfiguration(
        compute_delta=True,
        compute_gamma=True,
        compute_theta=True,
        compute_vega=True,
        compute_rho=True,
        compute_rho_structure=True,
    )
    results = calculate(sample_book(), snapshot, config)

    print("=== Risk Demo ===\n")
    print(f"Evaluation date: {snapshot.evaluation_date.isoformat()}\n")
    for instrument_id in results:
        print(results[instrument_id].summary())
        print()
    for errors in results.errors.values():
        for error in errors:
            print(f"ERROR {error}")
    print(results.to_frame().to_string(index=False))
    print("Done.")


if __name__ == "__main__":
    main()

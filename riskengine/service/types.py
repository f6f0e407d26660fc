"""GraphQL types for the calculation API."""

from __future__ import annotations

from datetime import date
from typing import Optional

import strawberry


# --- Input types (request payloads) ---


@strawberry.input
class QuoteInput:
    """Scalar observation: equity spot (by underlying) or FX spot (by pair, e.g. USDKRW)."""

    name: str
    value: float


@strawberry.input
class CurveInput:
    """Curve definition: name, pillars (year fractions), rates (continuously compounded)."""

    name: str
    pillars: list[float]
    rates: list[float]


@strawberry.input
class SurfaceInput:
    """Volatility surface: vols[i][j] at tenors[i] and strikes[j]."""

    name: str
    tenors: list[float]
    strikes: list[float]
    vols: list[list[float]]


@strawberry.input
class CorrelationInput:
    """Correlation between an equity underlying and an FX pair (quanto options)."""

    underlying: str
    fx_pair: str
    value: float


@strawberry.input
class MarketInput:
    """
    Market snapshot: evaluation date plus curves, spots, FX, surfaces, dividend
    curves and quanto correlations.
    """

    evaluation_date: date
    curves: Optional[list[CurveInput]] = None
    spots: Optional[list[QuoteInput]] = None
    fx: Optional[list[QuoteInput]] = None
    vols: Optional[list[SurfaceInput]] = None
    dividends: Optional[list[CurveInput]] = None
    correlations: Optional[list[CorrelationInput]] = None


@strawberry.input
class BondInput:
    id: str
    currency: str
    discount_curve: str
    issue_date: date
    maturity: date
    coupon_rate: float
    notional: float = 100.0
    frequency_months: int = 6
    day_count: str = "ACT/365F"


@strawberry.input
class KtbFutureInput:
    """KTB futures on a basket of underlying bonds."""

    id: str
    currency: str
    maturity: date
    underlying_bonds: list[BondInput]
    discount_curve: str
    borrowing_curve: str
    virtual_coupon_rate: float = 0.05
    virtual_years: int = 3
    virtual_frequency: int = 2
    unit_notional: float = 1_000_000.0
    average_trade_price: float = 0.0


@strawberry.input
class FutureInput:
    id: str
    currency: str
    underlying: str
    maturity: date
    discount_curve: str
    dividend_curve: Optional[str] = None
    borrowing_curve: Optional[str] = None
    unit_notional: float = 1.0
    average_trade_price: float = 0.0


@strawberry.input
class OptionInput:
    """
    European vanilla option; option_type is "call" or "put". Setting an
    `underlying_currency` other than `currency` makes it a quanto, which needs
    `fx_volatility` and a correlation in the market.
    """

    id: str
    currency: str
    underlying: str
    strike: float
    maturity: date
    option_type: str
    discount_curve: str
    volatility: str
    dividend_curve: Optional[str] = None
    borrowing_curve: Optional[str] = None
    unit_notional: float = 1.0
    underlying_currency: Optional[str] = None
    fx_volatility: Optional[str] = None


@strawberry.input
class FxSpotInput:
    id: str
    currency: str
    base_currency: str
    fx_pair: str
    notional_base: float


@strawberry.input
class FxForwardInput:
    """FX forward: notional in base currency, strike (quote per base). Uses CIP (base + quote curves)."""

    id: str
    currency: str
    base_currency: str
    fx_pair: str
    maturity: date
    notional_base: float
    strike: float
    base_curve: str
    quote_curve: str


@strawberry.input
class FxSwapInput:
    id: str
    currency: str
    base_currency: str
    fx_pair: str
    near_date: date
    far_date: date
    notional_base: float
    near_rate: float
    far_rate: float
    base_curve: str
    quote_curve: str


@strawberry.input
class FxFutureInput:
    id: str
    currency: str
    underlying_currency: str
    fx_pair: str
    maturity: date
    underlying_curve: str
    futures_curve: str
    unit_notional: float = 1.0
    average_trade_price: float = 0.0


@strawberry.input
class SwapInput:
    """Fixed-float interest rate swap (pay fixed by default)."""

    id: str
    currency: str
    notional: float
    fixed_rate: float
    effective_date: date
    maturity: date
    discount_curve: str
    forward_curve: Optional[str] = None
    frequency_months: int = 3
    day_count: str = "ACT/365F"
    pay_fixed: bool = True
    current_fixing: Optional[float] = None


@strawberry.input
class CrossCurrencySwapInput:
    id: str
    currency: str
    floating_currency: str
    fx_pair: str
    fixed_notional: float
    floating_notional: float
    fixed_rate: float
    effective_date: date
    maturity: date
    fixed_curve: str
    floating_curve: str
    floating_forward_curve: Optional[str] = None
    frequency_months: int = 3
    day_count: str = "ACT/365F"
    pay_fixed: bool = True
    current_fixing: Optional[float] = None


@strawberry.input
class PortfolioInput:
    """Instruments to calculate, one list per instrument kind."""

    bonds: Optional[list[BondInput]] = None
    ktb_futures: Optional[list[KtbFutureInput]] = None
    futures: Optional[list[FutureInput]] = None
    options: Optional[list[OptionInput]] = None
    fx_spots: Optional[list[FxSpotInput]] = None
    fx_forwards: Optional[list[FxForwardInput]] = None
    fx_swaps: Optional[list[FxSwapInput]] = None
    fx_futures: Optional[list[FxFutureInput]] = None
    swaps: Optional[list[SwapInput]] = None
    cross_currency_swaps: Optional[list[CrossCurrencySwapInput]] = None


@strawberry.input
class ConfigurationInput:
    """
    Which Greeks to compute and how to bump.

    `rho_bumps` / `dividend_bumps` / `vega_bumps` give one bump per pillar or
    tenor for the structure Greeks and override the flat bump when set.
    `vega_matrix_bumps` gives one bump per (tenor, strike) node for the vega
    matrix; it cannot be combined with `vega_bumps`.
    """

    compute_delta: bool = False
    compute_gamma: bool = False
    compute_theta: bool = False
    compute_vega: bool = False
    compute_vega_structure: bool = False
    compute_vega_matrix: bool = False
    compute_rho: bool = False
    compute_rho_structure: bool = False
    compute_dividend_delta: bool = False
    compute_dividend_structure: bool = False
    include_cashflows: bool = True
    delta_bump_ratio: float = 0.01
    gamma_bump_ratio: float = 0.01
    rho_bump: float = 0.0001
    rho_bumps: Optional[list[float]] = None
    dividend_bump: float = 0.0001
    dividend_bumps: Optional[list[float]] = None
    vega_bump: float = 0.01
    vega_bumps: Optional[list[float]] = None
    vega_matrix_bumps: Optional[list[list[float]]] = None
    vega_differencing: str = "central"
    theta_gap_days: int = 1
    representation_currency: Optional[str] = None


# --- Output types (response payloads) ---


@strawberry.type
class GreekEntry:
    """
    One Greek for one risk factor. Flat Greeks fill `value`; structure Greeks
    fill `labels` and `values`; the vega matrix fills `labels` (tenors),
    `strikes` and `matrix`.
    """

    kind: str
    factor: str
    value: Optional[float] = None
    labels: Optional[list[float]] = None
    values: Optional[list[float]] = None
    strikes: Optional[list[float]] = None
    matrix: Optional[list[list[float]]] = None


@strawberry.type
class CashflowEntry:
    payment_date: date
    currency: str
    amount: float


@strawberry.type
class ExposureEntry:
    currency: str
    amount: float


@strawberry.type
class InstrumentResult:
    """
    Price, Greeks and cashflows of one instrument. Price and Greeks are in
    `representation_currency`; cashflows and FX exposure in their own currency.
    """

    instrument_id: str
    instrument_type: str
    currency: str
    representation_currency: str
    price: float
    greeks: list[GreekEntry]
    cashflows: list[CashflowEntry]
    fx_exposure: list[ExposureEntry]


@strawberry.type
class InstrumentErrorEntry:
    """Structured per-instrument error (price or one Greek)."""

    instrument_id: str
    code: str
    message: str
    greek: Optional[str] = None
    factor: Optional[str] = None


@strawberry.type
class GroupErrorEntry:
    """A category group that could not be calculated."""

    group_id: int
    category: str
    instrument_ids: list[str]
    code: str
    message: str


@strawberry.type
class CalculationOutput:
    results: list[InstrumentResult]
    errors: list[InstrumentErrorEntry]
    group_errors: list[GroupErrorEntry]

"""Interest rate and cross currency swaps (instrument data only; pricing via PricerDispatch)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from riskengine.daycount import DayCountConvention


@dataclass(frozen=True)
class InterestRateSwap:
    """
    Fixed vs float swap in one currency.

    Payment dates are rolled back from `maturity` every `frequency_months`; both
    legs pay on the same dates. The float leg projects forwards from
    `forward_curve` (defaults to `discount_curve`, i.e. single curve).
    `current_fixing` is the already-set rate of a period that started before the
    evaluation date; without it that period is projected from the evaluation date.
    pay_fixed=True: PV = PV(float leg) - PV(fixed leg).
    """

    id: str
    currency: str
    notional: float
    fixed_rate: float
    effective_date: date
    maturity: date
    discount_curve: str
    forward_curve: str | None = None
    frequency_months: int = 3
    day_count: DayCountConvention = DayCountConvention.ACT_365F
    pay_fixed: bool = True
    current_fixing: float | None = None

    def __post_init__(self) -> None:
        if self.maturity <= self.effective_date:
            raise ValueError("swap maturity must be after effective_date")

    @property
    def projection_curve(self) -> str:
        return self.forward_curve or self.discount_curve


@dataclass(frozen=True)
class CrossCurrencySwap:
    """
    Fixed vs float cross currency swap with notional exchanges.

    The fixed leg is in `currency` on `fixed_notional`, discounted on
    `fixed_curve`; the float leg is in `floating_currency` on `floating_notional`,
    discounted on `floating_curve` and projected on `floating_forward_curve`
    (defaults to `floating_curve`). Notionals are exchanged on `effective_date`
    (if still in the future) and returned at `maturity`.
    `fx_pair` converts the float leg into `currency`: quote = `currency`,
    base = `floating_currency` (e.g. "USDKRW").
    pay_fixed=True: PV = spot * PV(float leg) - PV(fixed leg).
    """

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
    floating_forward_curve: str | None = None
    frequency_months: int = 3
    day_count: DayCountConvention = DayCountConvention.ACT_365F
    pay_fixed: bool = True
    current_fixing: float | None = None

    def __post_init__(self) -> None:
        if self.maturity <= self.effective_date:
            raise ValueError("swap maturity must be after effective_date")

    @property
    def projection_curve(self) -> str:
        return self.floating_forward_curve or self.floating_curve

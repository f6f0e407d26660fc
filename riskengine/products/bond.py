"""Fixed coupon bonds and Korea Treasury Bond futures (instrument data only)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from riskengine.daycount import DayCountConvention


@dataclass(frozen=True)
class Bond:
    """
    Fixed coupon bond, discounted on a single curve.

    Coupons are rolled back from `maturity` every `frequency_months`; regular
    periods pay notional * coupon_rate * frequency_months / 12 and a short first
    period accrues by `day_count`. Redemption of `notional` at maturity.
    """

    id: str
    currency: str
    discount_curve: str
    issue_date: date
    maturity: date
    coupon_rate: float
    notional: float = 100.0
    frequency_months: int = 6
    day_count: DayCountConvention = DayCountConvention.ACT_365F

    def __post_init__(self) -> None:
        if self.maturity <= self.issue_date:
            raise ValueError("bond maturity must be after issue_date")
        if self.frequency_months <= 0:
            raise ValueError("frequency_months must be positive")


@dataclass(frozen=True)
class KoreaTreasuryBondFuture:
    """
    KTB futures (KRX 3/5/10 year).

    Fair price per 100: the basket bonds are priced forward to the futures
    maturity on `discount_curve`, converted to yields, averaged, and the
    average yield prices a virtual bond (`virtual_coupon_rate`, `virtual_years`,
    `virtual_frequency` payments per year). The result is carried with the
    `borrowing_curve` discount factor to maturity.
    Value = unit_notional * (fair price - average_trade_price).
    """

    id: str
    currency: str
    maturity: date
    underlying_bonds: tuple[Bond, ...]
    discount_curve: str
    borrowing_curve: str
    virtual_coupon_rate: float = 0.05
    virtual_years: int = 3
    virtual_frequency: int = 2
    unit_notional: float = 1_000_000.0
    average_trade_price: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "underlying_bonds", tuple(self.underlying_bonds))
        if not self.underlying_bonds:
            raise ValueError("KTB futures need at least one underlying bond")
        for bond in self.underlying_bonds:
            if bond.maturity <= self.maturity:
                raise ValueError(
                    f"underlying bond {bond.id} matures on or before the futures maturity"
                )

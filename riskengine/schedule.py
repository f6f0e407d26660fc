"""Payment schedules rolled backward from maturity (no business-day adjustment)."""

from __future__ import annotations

from datetime import date

from dateutil.relativedelta import relativedelta


def payment_dates(start: date, maturity: date, frequency_months: int) -> list[date]:
    """
    Unadjusted payment dates in (start, maturity], rolled back from maturity.

    Any short stub sits at the front: the first period runs from `start` to the
    first rolled date.
    """
    if frequency_months <= 0:
        raise ValueError("frequency_months must be positive")
    if maturity <= start:
        raise ValueError("maturity must be after start")
    dates = []
    n = 0
    while True:
        d = maturity - relativedelta(months=n * frequency_months)
        if d <= start:
            break
        dates.append(d)
        n += 1
    dates.reverse()
    return dates


def accrual_periods(
    start: date, maturity: date, frequency_months: int
) -> list[tuple[date, date]]:
    """(accrual_start, accrual_end) pairs covering start..maturity."""
    ends = payment_dates(start, maturity, frequency_months)
    starts = [start] + ends[:-1]
    return list(zip(starts, ends))

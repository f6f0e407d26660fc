"""
Day count conventions.

Calendar and day-count correctness is owned by an external collaborator; this
module supplies the default `year_fraction(start, end, convention)` the engine
uses when no other day counter is injected.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class DayCountConvention(str, Enum):
    ACT_365F = "ACT/365F"
    ACT_360 = "ACT/360"
    THIRTY_360 = "30/360"
    ACT_ACT = "ACT/ACT"


DayCounter = Callable[[date, date, DayCountConvention], float]


def _act_365f(start: date, end: date) -> float:
    return (end - start).days / 365.0


def _act_360(start: date, end: date) -> float:
    return (end - start).days / 360.0


def _thirty_360(start: date, end: date) -> float:
    """30/360 bond basis (US)."""
    d1 = min(start.day, 30)
    d2 = end.day
    if d2 == 31 and d1 == 30:
        d2 = 30
    days = 360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)
    return days / 360.0


def _days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def _act_act(start: date, end: date) -> float:
    """ACT/ACT ISDA: each calendar year's days over that year's length."""
    if start.year == end.year:
        return (end - start).days / _days_in_year(start.year)
    total = (date(start.year + 1, 1, 1) - start).days / _days_in_year(start.year)
    total += end.year - start.year - 1
    total += (end - date(end.year, 1, 1)).days / _days_in_year(end.year)
    return total


_REGISTRY: dict[DayCountConvention, Callable[[date, date], float]] = {
    DayCountConvention.ACT_365F: _act_365f,
    DayCountConvention.ACT_360: _act_360,
    DayCountConvention.THIRTY_360: _thirty_360,
    DayCountConvention.ACT_ACT: _act_act,
}


def year_fraction(
    start: date,
    end: date,
    convention: DayCountConvention | str = DayCountConvention.ACT_365F,
) -> float:
    """Return the year fraction between two dates (negative if end < start)."""
    try:
        func = _REGISTRY[DayCountConvention(convention)]
    except ValueError as exc:
        raise ValueError(f"Unsupported day count convention: {convention}") from exc
    if end < start:
        logger.debug("Reversed dates for %s: %s, %s", convention, start, end)
        return -func(end, start)
    return func(start, end)

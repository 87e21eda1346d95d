"""Working-day rules: alternate-Saturday policy, Sundays and holidays."""

from __future__ import annotations

from datetime import date
from typing import AbstractSet, Iterable, Optional, Union

from ..common.datetime_utils import date_range, week_of_month
from ..core.enums import HalfYearPeriod, SaturdayPolicy

SUNDAY = 6
SATURDAY = 5

_OFF_WEEKS = {
    SaturdayPolicy.WEEK_1_3_OFF: {1, 3},
    SaturdayPolicy.WEEK_2_4_OFF: {2, 4},
}


def coerce_policy(policy: Union[SaturdayPolicy, str, None]) -> SaturdayPolicy:
    """Unknown or missing policies fall back to every Saturday working."""
    if isinstance(policy, SaturdayPolicy):
        return policy
    try:
        return SaturdayPolicy(policy)
    except ValueError:
        return SaturdayPolicy.ALL_WORKING


def is_saturday_off(value: date, policy: Union[SaturdayPolicy, str, None]) -> bool:
    if value.weekday() != SATURDAY:
        return False
    policy = coerce_policy(policy)
    if policy is SaturdayPolicy.ALL_OFF:
        return True
    return week_of_month(value) in _OFF_WEEKS.get(policy, set())


def is_working_day(
    value: date,
    policy: Union[SaturdayPolicy, str, None],
    holiday_dates: AbstractSet[date] = frozenset(),
) -> bool:
    if value.weekday() == SUNDAY:
        return False
    if is_saturday_off(value, policy):
        return False
    return value not in holiday_dates


def count_working_days(
    dates: Iterable[date],
    policy: Union[SaturdayPolicy, str, None],
    holiday_dates: AbstractSet[date] = frozenset(),
) -> int:
    return sum(1 for d in set(dates) if is_working_day(d, policy, holiday_dates))


def working_days_between(
    start: date,
    end: date,
    policy: Union[SaturdayPolicy, str, None],
    holiday_dates: AbstractSet[date] = frozenset(),
) -> int:
    if end < start:
        return 0
    return count_working_days(date_range(start, end), policy, holiday_dates)


def half_year_period(value: date) -> HalfYearPeriod:
    return HalfYearPeriod.FIRST_HALF if value.month <= 6 else HalfYearPeriod.SECOND_HALF


def half_year_bounds(year: int, period: Optional[HalfYearPeriod]) -> tuple[date, date]:
    if period is HalfYearPeriod.FIRST_HALF:
        return date(year, 1, 1), date(year, 6, 30)
    return date(year, 7, 1), date(year, 12, 31)

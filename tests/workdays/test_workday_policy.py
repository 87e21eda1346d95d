from datetime import date

from src.ams_portal.ams_portal.core.enums import HalfYearPeriod, SaturdayPolicy
from src.ams_portal.ams_portal.workdays.policy import (
    coerce_policy,
    half_year_period,
    is_saturday_off,
    is_working_day,
    working_days_between,
)

# Saturdays of October 2026
SAT_W1, SAT_W2, SAT_W3, SAT_W4, SAT_W5 = (date(2026, 10, d) for d in (3, 10, 17, 24, 31))


def test_week_1_3_policy():
    policy = SaturdayPolicy.WEEK_1_3_OFF
    assert is_saturday_off(SAT_W1, policy)
    assert not is_saturday_off(SAT_W2, policy)
    assert is_saturday_off(SAT_W3, policy)
    assert not is_saturday_off(SAT_W4, policy)


def test_fifth_saturday_is_working_under_alternating_policies():
    assert not is_saturday_off(SAT_W5, SaturdayPolicy.WEEK_1_3_OFF)
    assert not is_saturday_off(SAT_W5, SaturdayPolicy.WEEK_2_4_OFF)
    assert is_saturday_off(SAT_W5, SaturdayPolicy.ALL_OFF)


def test_unknown_policy_means_all_saturdays_working():
    assert coerce_policy("Every other Saturday") is SaturdayPolicy.ALL_WORKING
    assert not is_saturday_off(SAT_W1, None)


def test_sundays_and_holidays_are_not_working_days():
    assert not is_working_day(date(2026, 10, 4), SaturdayPolicy.ALL_WORKING)
    assert not is_working_day(date(2026, 10, 2), SaturdayPolicy.ALL_WORKING, {date(2026, 10, 2)})
    assert is_working_day(date(2026, 10, 5), SaturdayPolicy.ALL_WORKING)


def test_working_days_between():
    # 1..10 Oct: Sunday 4th off, Saturday 10th is week 2 (off)
    assert working_days_between(date(2026, 10, 1), date(2026, 10, 10), SaturdayPolicy.WEEK_2_4_OFF) == 8
    assert working_days_between(date(2026, 10, 10), date(2026, 10, 1), SaturdayPolicy.WEEK_2_4_OFF) == 0


def test_half_year_period():
    assert half_year_period(date(2026, 6, 30)) is HalfYearPeriod.FIRST_HALF
    assert half_year_period(date(2026, 7, 1)) is HalfYearPeriod.SECOND_HALF

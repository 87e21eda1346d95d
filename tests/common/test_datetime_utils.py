from datetime import date, datetime, timezone

import pytest

from src.ams_portal.ams_portal.common.datetime_utils import (
    add_months,
    format_duration,
    ist_naive,
    months_between,
    parse_iso_date,
    to_ist_date,
    week_bounds,
    week_of_month,
)
from src.ams_portal.ams_portal.core.exceptions import ValidationError


def test_add_months_clamps_to_month_end():
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2026, 8, 15), 6) == date(2027, 2, 15)


def test_utc_instant_late_in_the_evening_is_next_ist_day():
    instant = datetime(2026, 10, 13, 20, 0, tzinfo=timezone.utc)

    assert to_ist_date(instant) == date(2026, 10, 14)
    assert to_ist_date("2026-10-13T20:00:00Z") == date(2026, 10, 14)
    assert ist_naive(instant) == datetime(2026, 10, 14, 1, 30)


def test_plain_date_string_is_taken_as_ist_day():
    assert to_ist_date("2026-10-13") == date(2026, 10, 13)


def test_parse_iso_date_rejects_garbage():
    with pytest.raises(ValidationError):
        parse_iso_date("13/10/2026")


def test_week_helpers():
    assert week_of_month(date(2026, 10, 7)) == 1
    assert week_of_month(date(2026, 10, 8)) == 2
    assert week_of_month(date(2026, 10, 31)) == 5
    assert week_bounds(date(2026, 10, 14)) == (date(2026, 10, 12), date(2026, 10, 18))


def test_months_between_ignores_day_of_month():
    assert months_between(date(2026, 10, 31), date(2026, 12, 1)) == 2


def test_format_duration():
    assert format_duration(125) == "2h 5m"
    assert format_duration(-4) == "0h 0m"

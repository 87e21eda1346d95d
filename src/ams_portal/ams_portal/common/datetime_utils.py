"""Date helpers. Every business date is an IST calendar date."""

from __future__ import annotations

import calendar
import math
from datetime import date, datetime, timedelta
from typing import Iterator, Union
from zoneinfo import ZoneInfo

from ..core.constants import IST_ZONE
from ..core.exceptions import ValidationError

IST = ZoneInfo(IST_ZONE)

DateLike = Union[date, datetime, str]


def now_ist() -> datetime:
    """Current time in IST.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(IST)


def today_ist() -> date:
    return now_ist().date()


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into a date (interpreted as an IST calendar day)."""
    try:
        return datetime.strptime((value or "").strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def to_ist_date(value: DateLike) -> date:
    """Normalize a date, datetime or ISO string to its IST calendar date.

    Naive datetimes are assumed to be IST already.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(IST).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) > 10:
            try:
                return to_ist_date(datetime.fromisoformat(text.replace("Z", "+00:00")))
            except ValueError:
                pass
        return parse_iso_date(text)
    raise ValidationError(f"Unsupported date value: {value!r}")


def to_ist_datetime(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=IST)
    return value.astimezone(IST)


def format_iso_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def add_days(value: date, days: int) -> date:
    return value + timedelta(days=int(days))


def add_months(value: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's end."""
    month_index = value.month - 1 + int(months)
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def days_between(start: date, end: date) -> int:
    """Signed number of days from start to end."""
    return (end - start).days


def months_between(start: date, end: date) -> int:
    """Calendar month difference, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def is_between(value: date, start: date, end: date) -> bool:
    return start <= value <= end


def date_range(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def week_of_month(value: date) -> int:
    return math.ceil(value.day / 7)


def week_bounds(value: date) -> tuple[date, date]:
    """Monday..Sunday week containing value."""
    monday = value - timedelta(days=value.weekday())
    return monday, monday + timedelta(days=6)


def format_duration(minutes: float) -> str:
    total = max(int(minutes or 0), 0)
    return f"{total // 60}h {total % 60}m"


def ist_naive(value: datetime) -> datetime:
    """IST wall-clock time without tzinfo, the form stored in MySQL DATETIME columns."""
    return to_ist_datetime(value).replace(tzinfo=None)

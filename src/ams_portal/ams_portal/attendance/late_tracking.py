from __future__ import annotations

from dataclasses import replace
from datetime import date

from ..common.datetime_utils import week_bounds
from ..core.constants import WEEKLY_LATE_ALLOWANCE
from .model import WeeklyLateRecord
from .repository import WeeklyLateRepository


class WeeklyLateTracker:
    """Counts late clock-ins per Monday-Sunday week; informational only."""

    def __init__(self, repo: WeeklyLateRepository):
        self._repo = repo

    def record_late(self, user_id: int, late_date: date) -> WeeklyLateRecord:
        week_start, week_end = week_bounds(late_date)
        record = self._repo.get(user_id, week_start) or WeeklyLateRecord(
            user_id=user_id, week_start=week_start, week_end=week_end
        )
        if late_date in record.late_dates:
            return record
        record = replace(record, late_dates=tuple(sorted(record.late_dates + (late_date,))))
        self._repo.upsert(record)
        return record

    def weekly_stats(self, user_id: int, today: date) -> dict:
        week_start, _ = week_bounds(today)
        record = self._repo.get(user_id, week_start)
        count = record.late_count if record else 0
        return {
            "currentWeekLateCount": count,
            "lateDates": [d.isoformat() for d in (record.late_dates if record else ())],
            "remainingLateLogins": max(0, WEEKLY_LATE_ALLOWANCE - count),
        }

from datetime import date

from src.ams_portal.ams_portal.attendance.late_tracking import WeeklyLateTracker


def test_late_days_are_counted_once_per_day(weekly_late_repo):
    tracker = WeeklyLateTracker(weekly_late_repo)

    tracker.record_late(1, date(2026, 10, 12))
    tracker.record_late(1, date(2026, 10, 12))
    record = tracker.record_late(1, date(2026, 10, 14))

    assert record.late_count == 2
    assert tracker.weekly_stats(1, date(2026, 10, 15)) == {
        "currentWeekLateCount": 2,
        "lateDates": ["2026-10-12", "2026-10-14"],
        "remainingLateLogins": 1,
    }


def test_new_week_starts_fresh(weekly_late_repo):
    tracker = WeeklyLateTracker(weekly_late_repo)
    for day in (12, 13, 14, 16):
        tracker.record_late(1, date(2026, 10, day))

    assert tracker.weekly_stats(1, date(2026, 10, 18))["remainingLateLogins"] == 0
    assert tracker.weekly_stats(1, date(2026, 10, 19))["currentWeekLateCount"] == 0
    assert tracker.weekly_stats(2, date(2026, 10, 14))["remainingLateLogins"] == 3

from dataclasses import replace
from datetime import date, datetime

import pytest

from src.ams_portal.ams_portal.attendance.half_day import HalfDayService, late_minutes
from src.ams_portal.ams_portal.attendance.model import AttendanceLog
from src.ams_portal.ams_portal.core.enums import AdminOverride, AttendanceStatus, HalfDaySource, Role
from src.ams_portal.ams_portal.core.exceptions import AuthorizationError, NotFoundError
from src.ams_portal.ams_portal.notifications.service import NotificationService

DAY = date(2026, 10, 14)


def _log(hour: int, minute: int = 0, **overrides) -> AttendanceLog:
    values = dict(log_id=0, user_id=1, attendance_date=DAY, clock_in=datetime(2026, 10, 14, hour, minute))
    values.update(overrides)
    return AttendanceLog(**values)


@pytest.fixture
def service(attendance_repo, users_repo, notifications_repo):
    notifications = NotificationService(notifications_repo, users_repo)
    return HalfDayService(attendance_repo, users_repo, notifications=notifications, grace_minutes=30)


def test_late_minutes_against_shift_start(general_shift):
    assert late_minutes(datetime(2026, 10, 14, 8, 55), general_shift) == 0
    assert late_minutes(datetime(2026, 10, 14, 9, 31, 40), general_shift) == 31
    assert late_minutes(datetime(2026, 10, 14, 9, 31), None) == 0


def test_late_within_grace_is_not_half_day(service, general_shift):
    decision = service.evaluate(_log(9, 30), shift=general_shift, has_half_day_leave=False)

    assert not decision.is_half_day
    assert decision.status() == AttendanceStatus.LATE


def test_late_beyond_grace_is_half_day(service, general_shift):
    decision = service.evaluate(_log(9, 31), shift=general_shift, has_half_day_leave=False)

    assert decision.is_half_day
    assert decision.source == HalfDaySource.LATE


def test_half_day_leave_wins_over_lateness(service, general_shift):
    decision = service.evaluate(_log(13, 45), shift=general_shift, has_half_day_leave=True)

    assert decision.source == HalfDaySource.LEAVE
    assert decision.late_minutes == 285


def test_short_day_after_clock_out(service, general_shift):
    log = _log(9, 0, clock_out=datetime(2026, 10, 14, 16, 0))

    decision = service.evaluate(log, shift=general_shift, has_half_day_leave=False)

    assert decision.source == HalfDaySource.HOURS
    assert service.evaluate(_log(9, 0), shift=general_shift, has_half_day_leave=False).is_half_day is False


def test_admin_override_beats_every_rule(service, general_shift):
    log = _log(10, 30, admin_override=AdminOverride.OVERRIDE_HALF_DAY, override_reason="Client visit")

    decision = service.evaluate(log, shift=general_shift, has_half_day_leave=True)

    assert not decision.is_half_day
    assert decision.status() == AttendanceStatus.LATE


def test_override_late_clears_lateness(service, general_shift):
    log = _log(9, 45, admin_override=AdminOverride.OVERRIDE_LATE)

    decision = service.evaluate(log, shift=general_shift, has_half_day_leave=False)

    assert decision.late_minutes == 0
    assert decision.status() == AttendanceStatus.ON_TIME


def test_mark_and_unmark(service, attendance_repo, users_repo, notifications_repo, make_user, fixed_now):
    admin = users_repo.add(make_user(99, role=Role.ADMIN))
    users_repo.add(make_user(1))
    log_id = attendance_repo.create(_log(9, 0, clock_out=datetime(2026, 10, 14, 18, 0)))

    marked = service.mark_half_day(admin, log_id, "Left for personal work", now=fixed_now)

    assert marked.is_half_day and marked.half_day_source == HalfDaySource.ADMIN
    assert marked.override_by == admin.user_id
    assert attendance_repo.get_by_id(log_id).status == AttendanceStatus.HALF_DAY
    assert any(n.user_id == 1 for n in notifications_repo.items)

    unmarked = service.unmark_half_day(admin, log_id, now=fixed_now)

    assert not unmarked.is_half_day
    assert unmarked.admin_override == AdminOverride.OVERRIDE_HALF_DAY
    assert unmarked.status == AttendanceStatus.ON_TIME


def test_admin_mark_survives_reevaluation(service, general_shift):
    log = _log(9, 0, is_half_day=True, half_day_source=HalfDaySource.ADMIN, half_day_reason="Marked")

    decision = service.evaluate(replace(log, clock_out=datetime(2026, 10, 14, 18, 30)), shift=general_shift, has_half_day_leave=False)

    assert decision.source == HalfDaySource.ADMIN


def test_only_managers_mark_half_day(service, attendance_repo, users_repo, make_user):
    employee = users_repo.add(make_user(1))
    log_id = attendance_repo.create(_log(9, 0))

    with pytest.raises(AuthorizationError):
        service.mark_half_day(employee, log_id, "no")
    with pytest.raises(NotFoundError):
        service.mark_half_day(make_user(99, role=Role.HR), 404, "missing")

from dataclasses import replace
from datetime import date

from src.ams_portal.ams_portal.core.enums import (
    EmploymentStatus,
    HalfYearPeriod,
    LeaveDayType,
    LeaveRequestType,
    RequestStatus,
)
from src.ams_portal.ams_portal.leaves.model import LeaveRequest
from src.ams_portal.ams_portal.leaves.validation import LeaveValidationService
from src.ams_portal.ams_portal.users.model import LeaveBalances

TODAY = date(2026, 10, 14)


def _approved_planned(*days) -> LeaveRequest:
    return LeaveRequest(
        request_id=9,
        user_id=1,
        request_type=LeaveRequestType.PLANNED,
        leave_dates=tuple(days),
        reason="trip",
        status=RequestStatus.APPROVED,
    )


def test_planned_needs_two_calendar_months(make_user):
    outcome = LeaveValidationService().validate(
        make_user(), LeaveRequestType.PLANNED, [date(2026, 11, 23)], today=TODAY
    )

    assert not outcome.valid
    assert "2 months" in outcome.errors[0]
    assert outcome.half_year_period is HalfYearPeriod.SECOND_HALF


def test_planned_half_year_quota(make_user):
    used = _approved_planned(*(date(2026, 8, d) for d in (3, 4, 5, 6)))

    outcome = LeaveValidationService().validate(
        make_user(),
        LeaveRequestType.PLANNED,
        [date(2026, 12, 21), date(2026, 12, 22)],
        today=TODAY,
        approved_planned=[used],
    )

    assert not outcome.valid
    assert outcome.errors == [
        "You can only use 1 more day(s) of planned leave in Second Half (2026). "
        "You have already used 4 out of 5 days."
    ]


def test_planned_quota_counts_half_days(make_user):
    used = replace(_approved_planned(*(date(2026, 8, d) for d in (3, 4, 5, 6))), leave_type=LeaveDayType.FIRST_HALF)

    outcome = LeaveValidationService().validate(
        make_user(),
        LeaveRequestType.PLANNED,
        [date(2026, 12, 21), date(2026, 12, 22)],
        today=TODAY,
        approved_planned=[used],
    )

    assert outcome.valid


def test_sick_requires_certificate_and_warns_before_return(make_user):
    outcome = LeaveValidationService().validate(
        make_user(), LeaveRequestType.SICK, [date(2026, 10, 15)], today=TODAY
    )

    assert not outcome.valid
    assert outcome.errors == ["Medical certificate is mandatory for sick leave applications."]
    assert outcome.applied_after_return is False
    assert outcome.warnings


def test_sick_after_return_with_certificate(make_user):
    outcome = LeaveValidationService().validate(
        make_user(),
        LeaveRequestType.SICK,
        [date(2026, 10, 12), date(2026, 10, 13)],
        today=TODAY,
        medical_certificate="/uploads/medical_certificates/1_cert.pdf",
    )

    assert outcome.valid
    assert outcome.applied_after_return is True
    assert outcome.warnings == []


def test_backdated_casual_skips_notice(make_user):
    outcome = LeaveValidationService().validate(
        make_user(), LeaveRequestType.CASUAL, [date(2026, 10, 12)], today=TODAY
    )

    assert outcome.valid


def test_casual_balance(make_user):
    user = make_user(leave_balances=LeaveBalances(casual=0.5))

    outcome = LeaveValidationService().validate(
        user, LeaveRequestType.CASUAL, [date(2026, 10, 26)], LeaveDayType.FULL_DAY, today=TODAY
    )

    assert outcome.errors == ["Insufficient casual leave balance. Available: 0.5 days, Required: 1 days."]


def test_probation_casual_is_rejected(make_user):
    user = make_user(employment_status=EmploymentStatus.PROBATION)

    outcome = LeaveValidationService().validate(user, LeaveRequestType.CASUAL, [date(2026, 10, 26)], today=TODAY)

    assert not outcome.valid


def test_other_request_types_have_no_entitlement_rules(make_user):
    user = make_user(employment_status=EmploymentStatus.INTERN)

    outcome = LeaveValidationService().validate(user, LeaveRequestType.LOSS_OF_PAY, [date(2026, 10, 26)], today=TODAY)

    assert outcome.valid

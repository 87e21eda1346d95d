from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "Admin"
    HR = "HR"
    EMPLOYEE = "Employee"
    INTERN = "Intern"


MANAGER_ROLES = frozenset({Role.ADMIN, Role.HR})


class AuthMethod(str, Enum):
    LOCAL = "local"
    SSO = "SSO"


class EmploymentStatus(str, Enum):
    PERMANENT = "Permanent"
    PROBATION = "Probation"
    INTERN = "Intern"


class SaturdayPolicy(str, Enum):
    """Which Saturdays of the month an employee has off."""

    ALL_WORKING = "All Saturdays Working"
    ALL_OFF = "All Saturdays Off"
    WEEK_1_3_OFF = "Week 1 & 3 Off"
    WEEK_2_4_OFF = "Week 2 & 4 Off"


class RequestStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class LeaveRequestType(str, Enum):
    PLANNED = "Planned"
    SICK = "Sick"
    CASUAL = "Casual"
    LOSS_OF_PAY = "Loss of Pay"
    COMPENSATORY = "Compensatory"
    BACKDATED = "Backdated Leave"
    SWAP = "Swap Leave"
    YEAR_END = "YEAR_END"


class LeaveDayType(str, Enum):
    FULL_DAY = "Full Day"
    FIRST_HALF = "Half Day - First Half"
    SECOND_HALF = "Half Day - Second Half"

    @property
    def weight(self) -> float:
        return 1.0 if self is LeaveDayType.FULL_DAY else 0.5


class LeaveBalanceKind(str, Enum):
    SICK = "sick"
    CASUAL = "casual"
    PAID = "paid"


class YearEndAction(str, Enum):
    CARRY_FORWARD = "CARRY_FORWARD"
    ENCASH = "ENCASH"


class HalfYearPeriod(str, Enum):
    FIRST_HALF = "First Half"
    SECOND_HALF = "Second Half"


class AttendanceStatus(str, Enum):
    """Status persisted on an attendance log."""

    ON_TIME = "On-time"
    LATE = "Late"
    HALF_DAY = "Half-day"
    ABSENT = "Absent"


class AdminOverride(str, Enum):
    NONE = "None"
    OVERRIDE_HALF_DAY = "Override Half Day"
    OVERRIDE_LATE = "Override Late"


class HalfDaySource(str, Enum):
    LEAVE = "leave"
    LATE = "late"
    HOURS = "hours"
    ADMIN = "admin"


class ShiftType(str, Enum):
    FIXED = "Fixed"
    FLEXIBLE = "Flexible"


class NotificationType(str, Enum):
    CHECK_IN = "checkin"
    CHECK_OUT = "checkout"
    BREAK_START = "break_start"
    BREAK_END = "break_end"
    LEAVE_REQUEST = "leave_request"
    LEAVE_APPROVAL = "leave_approval"
    LEAVE_REJECTION = "leave_rejection"
    HALF_DAY_MARKED = "half_day_marked"
    SYSTEM = "system"


class ExcelLogType(str, Enum):
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAIL = "LOGIN_FAIL"
    CLOCK_IN = "CLOCK_IN"
    CLOCK_OUT = "CLOCK_OUT"
    BREAK_START = "BREAK_START"
    BREAK_END = "BREAK_END"
    LEAVE_REQUEST_SUBMITTED = "LEAVE_REQUEST_SUBMITTED"
    LEAVE_REQUEST_APPROVED = "LEAVE_REQUEST_APPROVED"
    LEAVE_REQUEST_REJECTED = "LEAVE_REQUEST_REJECTED"
    MARK_HALF_DAY = "MARK_HALF_DAY"
    UNMARK_HALF_DAY = "UNMARK_HALF_DAY"

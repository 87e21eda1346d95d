from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import (
    HalfYearPeriod,
    LeaveBalanceKind,
    LeaveDayType,
    LeaveRequestType,
    RequestStatus,
    YearEndAction,
)


@dataclass(frozen=True)
class LeaveRequest:
    """Domain entity: a leave (or year-end) request.

    leave_dates is kept sorted and unique.
    """

    request_id: int
    user_id: int
    request_type: LeaveRequestType
    leave_dates: tuple[date, ...]
    reason: str
    leave_type: LeaveDayType = LeaveDayType.FULL_DAY
    status: RequestStatus = RequestStatus.PENDING
    alternate_date: Optional[date] = None
    medical_certificate: Optional[str] = None
    is_backdated: bool = False
    applied_after_return: bool = False
    half_year_period: Optional[HalfYearPeriod] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_notes: Optional[str] = None
    year_end_action: Optional[YearEndAction] = None
    year_end_leave_type: Optional[LeaveBalanceKind] = None
    year_end_days: Optional[float] = None
    year_end_year: Optional[int] = None
    is_processed: bool = False
    created_at: Optional[datetime] = None

    @property
    def start_date(self) -> Optional[date]:
        return self.leave_dates[0] if self.leave_dates else None

    @property
    def end_date(self) -> Optional[date]:
        return self.leave_dates[-1] if self.leave_dates else None

    @property
    def is_year_end(self) -> bool:
        return self.request_type == LeaveRequestType.YEAR_END

    def covers(self, value: date) -> bool:
        return value in self.leave_dates

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "userId": self.user_id,
            "requestType": self.request_type.value,
            "leaveType": self.leave_type.value,
            "leaveDates": [d.isoformat() for d in self.leave_dates],
            "alternateDate": self.alternate_date.isoformat() if self.alternate_date else None,
            "reason": self.reason,
            "status": self.status.value,
            "medicalCertificate": self.medical_certificate,
            "isBackdated": self.is_backdated,
            "appliedAfterReturn": self.applied_after_return,
            "halfYearPeriod": self.half_year_period.value if self.half_year_period else None,
            "approvedBy": self.approved_by,
            "approvedAt": self.approved_at.isoformat() if self.approved_at else None,
            "rejectionNotes": self.rejection_notes,
            "yearEndSubType": self.year_end_action.value if self.year_end_action else None,
            "yearEndLeaveType": self.year_end_leave_type.value if self.year_end_leave_type else None,
            "yearEndDays": self.year_end_days,
            "yearEndYear": self.year_end_year,
            "isProcessed": self.is_processed,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class LeaveApplication:
    """A newly stored request plus the non-blocking warnings raised while validating it."""

    request: LeaveRequest
    warnings: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"request": self.request.to_dict(), "warnings": list(self.warnings)}

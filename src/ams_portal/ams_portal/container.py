from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.half_day import HalfDayService
from .attendance.late_tracking import WeeklyLateTracker
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository, MySQLWeeklyLateRepository
from .attendance.service import AttendanceService
from .auth.sso import SSOSettings, SSOVerifier
from .auth.tokens import TokenService, TokenSettings
from .database.connection import DBConfig, DatabaseConnection
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.policy import LeavePolicyService
from .leaves.service import LeaveService
from .leaves.validation import LeaveValidationService
from .leaves.year_end import YearEndService
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.service import NotificationService, SocketEmitter
from .payroll.service import PayrollReportService
from .reports.excel_log import ExcelLogService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.service import ShiftService
from .uploads.storage import UploadStorage
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService
from .workdays.mysql_holiday_repository import MySQLHolidayRepository
from .workdays.service import HolidayService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    shifts_repo: MySQLShiftRepository
    holidays_repo: MySQLHolidayRepository
    attendance_repo: MySQLAttendanceRepository
    weekly_late_repo: MySQLWeeklyLateRepository
    leaves_repo: MySQLLeaveRepository
    notifications_repo: MySQLNotificationRepository

    token_service: TokenService
    sso_verifier: SSOVerifier
    upload_storage: UploadStorage
    excel_log: ExcelLogService
    notification_service: NotificationService

    auth_service: AuthService
    user_service: UserService
    shift_service: ShiftService
    holiday_service: HolidayService
    late_tracker: WeeklyLateTracker
    half_day_service: HalfDayService
    attendance_service: AttendanceService
    leave_service: LeaveService
    year_end_service: YearEndService
    payroll_report_service: PayrollReportService


def build_container(*, db_config: dict, settings: ModuleType, emitter: Optional[SocketEmitter] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    shifts_repo = MySQLShiftRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    weekly_late_repo = MySQLWeeklyLateRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn)

    token_service = TokenService(
        TokenSettings(
            private_key_path=getattr(settings, "JWT_PRIVATE_KEY_PATH", None),
            public_key_path=getattr(settings, "JWT_PUBLIC_KEY_PATH", None),
            key_id=getattr(settings, "JWT_KEY_ID", "ams-key"),
            fallback_secret=getattr(settings, "JWT_SECRET", None),
            expires_days=int(getattr(settings, "JWT_EXPIRES_DAYS", 7)),
        )
    )
    sso_verifier = SSOVerifier(
        SSOSettings(
            jwks_url=getattr(settings, "SSO_JWKS_URL", None),
            issuer=getattr(settings, "SSO_ISSUER", "sso-portal"),
            audience=getattr(settings, "SSO_AUDIENCE", "sso-apps"),
        )
    )
    upload_storage = UploadStorage(
        getattr(settings, "UPLOAD_FOLDER", "uploads"),
        max_bytes=getattr(settings, "MAX_CONTENT_LENGTH", None),
    )
    excel_log = ExcelLogService(getattr(settings, "EXCEL_LOG_PATH", "excel_logs/attendance_log.xlsx"))
    notification_service = NotificationService(notifications_repo, users_repo, emitter=emitter)

    half_day_service = HalfDayService(
        attendance_repo,
        users_repo,
        excel_log=excel_log,
        notifications=notification_service,
        grace_minutes=int(getattr(settings, "HALF_DAY_GRACE_MINUTES", 30)),
    )
    late_tracker = WeeklyLateTracker(weekly_late_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        shifts_repo,
        half_day=half_day_service,
        late_tracker=late_tracker,
        leaves=leaves_repo,
        holidays=holidays_repo,
        strategy_factory=AttendanceStrategyFactory(),
        excel_log=excel_log,
        notifications=notification_service,
    )
    leave_service = LeaveService(
        leaves_repo,
        users_repo,
        holidays=holidays_repo,
        policy=LeavePolicyService(),
        validation=LeaveValidationService(),
        storage=upload_storage,
        excel_log=excel_log,
        notifications=notification_service,
    )
    year_end_service = YearEndService(
        leaves_repo, users_repo, excel_log=excel_log, notifications=notification_service
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        shifts_repo=shifts_repo,
        holidays_repo=holidays_repo,
        attendance_repo=attendance_repo,
        weekly_late_repo=weekly_late_repo,
        leaves_repo=leaves_repo,
        notifications_repo=notifications_repo,
        token_service=token_service,
        sso_verifier=sso_verifier,
        upload_storage=upload_storage,
        excel_log=excel_log,
        notification_service=notification_service,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, storage=upload_storage),
        shift_service=ShiftService(shifts_repo),
        holiday_service=HolidayService(holidays_repo),
        late_tracker=late_tracker,
        half_day_service=half_day_service,
        attendance_service=attendance_service,
        leave_service=leave_service,
        year_end_service=year_end_service,
        payroll_report_service=PayrollReportService(attendance_repo, users_repo, leaves_repo),
    )

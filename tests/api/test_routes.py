from dataclasses import replace
from datetime import timedelta

import pytest
from werkzeug.security import generate_password_hash

from src.ams_portal.ams_portal.attendance.half_day import HalfDayService
from src.ams_portal.ams_portal.attendance.late_tracking import WeeklyLateTracker
from src.ams_portal.ams_portal.attendance.service import AttendanceService
from src.ams_portal.ams_portal.auth.sso import SSOSettings, SSOVerifier
from src.ams_portal.ams_portal.auth.tokens import TokenService, TokenSettings
from src.ams_portal.ams_portal.common.datetime_utils import today_ist
from src.ams_portal.ams_portal.container import Container
from src.ams_portal.ams_portal.core.enums import Role
from src.ams_portal.ams_portal.leaves.service import LeaveService
from src.ams_portal.ams_portal.leaves.year_end import YearEndService
from src.ams_portal.ams_portal.main import create_app, socketio
from src.ams_portal.ams_portal.notifications.service import NotificationService
from src.ams_portal.ams_portal.payroll.service import PayrollReportService
from src.ams_portal.ams_portal.reports.excel_log import ExcelLogService
from src.ams_portal.ams_portal.shifts.service import ShiftService
from src.ams_portal.ams_portal.uploads.storage import UploadStorage
from src.ams_portal.ams_portal.users.service import AuthService, UserService
from src.ams_portal.ams_portal.workdays.service import HolidayService

PASSWORD = "secret123"


@pytest.fixture
def container(
    tmp_path,
    users_repo,
    shifts_repo,
    holidays_repo,
    attendance_repo,
    weekly_late_repo,
    leaves_repo,
    notifications_repo,
    emitter,
    make_user,
):
    users_repo.add(make_user(1, password_hash=generate_password_hash(PASSWORD)))
    users_repo.add(make_user(99, role=Role.ADMIN, password_hash=generate_password_hash(PASSWORD)))

    excel_log = ExcelLogService(tmp_path / "attendance_log.xlsx")
    storage = UploadStorage(tmp_path / "uploads")
    notifications = NotificationService(notifications_repo, users_repo, emitter=emitter)
    half_day = HalfDayService(attendance_repo, users_repo, excel_log=excel_log, notifications=notifications)
    late_tracker = WeeklyLateTracker(weekly_late_repo)

    return Container(
        conn=None,
        users_repo=users_repo,
        shifts_repo=shifts_repo,
        holidays_repo=holidays_repo,
        attendance_repo=attendance_repo,
        weekly_late_repo=weekly_late_repo,
        leaves_repo=leaves_repo,
        notifications_repo=notifications_repo,
        token_service=TokenService(TokenSettings(fallback_secret="route-test-secret-0123456789abcdef")),
        sso_verifier=SSOVerifier(SSOSettings()),
        upload_storage=storage,
        excel_log=excel_log,
        notification_service=notifications,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, storage=storage),
        shift_service=ShiftService(shifts_repo),
        holiday_service=HolidayService(holidays_repo),
        late_tracker=late_tracker,
        half_day_service=half_day,
        attendance_service=AttendanceService(
            attendance_repo,
            users_repo,
            shifts_repo,
            half_day=half_day,
            late_tracker=late_tracker,
            leaves=leaves_repo,
            holidays=holidays_repo,
            excel_log=excel_log,
            notifications=notifications,
        ),
        leave_service=LeaveService(
            leaves_repo,
            users_repo,
            holidays=holidays_repo,
            storage=storage,
            excel_log=excel_log,
            notifications=notifications,
        ),
        year_end_service=YearEndService(leaves_repo, users_repo, excel_log=excel_log, notifications=notifications),
        payroll_report_service=PayrollReportService(attendance_repo, users_repo, leaves_repo),
    )


@pytest.fixture
def client(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return app.test_client()


def _login(client, email: str) -> dict:
    res = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.get_json()['token']}"}


def test_health(client):
    assert client.get("/api/health").get_json() == {"status": "ok"}


def test_login_failure_is_401_and_logged(client, container):
    res = client.post("/api/auth/login", json={"email": "emp1@example.com", "password": "nope"})

    assert res.status_code == 401
    assert res.get_json()["success"] is False
    assert container.excel_log.path.exists()


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401

    headers = _login(client, "emp1@example.com")
    body = client.get("/api/auth/me", headers=headers).get_json()
    assert body["user"]["employeeCode"] == "EMP001"


def test_clock_in_flow(client):
    headers = _login(client, "emp1@example.com")

    assert client.post("/api/attendance/clock-in", headers=headers).status_code == 201
    second = client.post("/api/attendance/clock-in", headers=headers)
    assert second.status_code == 400
    assert second.get_json()["message"] == "You have already clocked in today"

    status = client.get("/api/attendance/status", headers=headers).get_json()
    assert status["attendance"]["clockOut"] is None
    assert status["breaks"]["paidBreakAllowance"] == 30


def test_admin_routes_are_forbidden_for_employees(client):
    headers = _login(client, "emp1@example.com")

    assert client.get("/api/admin/leaves/all", headers=headers).status_code == 403
    assert client.get("/api/employees", headers=headers).status_code == 403


def test_leave_request_reports_rule(client):
    headers = _login(client, "emp1@example.com")
    tomorrow = (today_ist() + timedelta(days=1)).isoformat()

    res = client.post(
        "/api/leaves/request",
        headers=headers,
        json={"requestType": "Casual", "leaveDates": [tomorrow], "reason": "Errand"},
    )

    assert res.status_code == 400
    assert res.get_json()["rule"] == "LEAVE_VALIDATION"


def test_leave_request_needs_date_list(client):
    headers = _login(client, "emp1@example.com")

    res = client.post("/api/leaves/request", headers=headers, json={"requestType": "Casual", "leaveDates": "soon"})

    assert res.status_code == 400


def test_admin_lists_employees(client):
    headers = _login(client, "emp99@example.com")

    body = client.get("/api/employees", headers=headers).get_json()

    assert {e["id"] for e in body["employees"]} == {1, 99}


def test_profile_includes_probation(client):
    headers = _login(client, "emp1@example.com")

    body = client.get("/api/users/profile", headers=headers).get_json()

    assert body["user"]["id"] == 1
    assert body["probation"]["onProbation"] is False


def test_token_with_malformed_user_id_is_401(client, container):
    token = container.token_service.sign({"userId": "abc", "role": "Employee"})

    res = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert res.status_code == 401
    assert res.get_json()["success"] is False


def test_deactivated_user_token_is_401(client, container, users_repo):
    headers = _login(client, "emp1@example.com")
    users_repo.update(replace(users_repo.get_by_id(1), is_active=False))

    assert client.get("/api/auth/me", headers=headers).status_code == 401


def _socket(container, monkeypatch, token):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container)
    return socketio.test_client(app, auth={"token": token})


def test_socket_connect_rejects_malformed_user_id(container, monkeypatch):
    token = container.token_service.sign({"userId": "abc"})

    assert not _socket(container, monkeypatch, token).is_connected()


def test_socket_join_rejects_deactivated_user(container, monkeypatch, users_repo):
    token = container.token_service.issue_for(users_repo.get_by_id(1))
    socket = _socket(container, monkeypatch, token)
    assert socket.is_connected()

    users_repo.update(replace(users_repo.get_by_id(1), is_active=False))
    socket.emit("join", {"token": token})

    assert not socket.is_connected()


def test_leave_request_returns_warnings(client):
    headers = _login(client, "emp1@example.com")
    start = today_ist() + timedelta(days=14)
    monday = start + timedelta(days=-start.weekday() % 7)

    res = client.post(
        "/api/leaves/request",
        headers=headers,
        json={
            "requestType": "Sick",
            "leaveDates": [monday.isoformat()],
            "reason": "Surgery follow-up",
            "medicalCertificate": "/uploads/medical/cert.pdf",
        },
    )

    assert res.status_code == 201
    body = res.get_json()
    assert body["request"]["status"] == "Pending"
    assert any("applied after returning to office" in w for w in body["warnings"])

from datetime import date
from io import BytesIO

import pytest
from werkzeug.datastructures import FileStorage
from werkzeug.security import generate_password_hash

from src.ams_portal.ams_portal.core.enums import AuthMethod, EmploymentStatus, Role
from src.ams_portal.ams_portal.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from src.ams_portal.ams_portal.uploads.storage import UploadStorage
from src.ams_portal.ams_portal.users.service import AuthService, UserService


def test_authenticate_with_password(users_repo, make_user):
    users_repo.add(make_user(1, password_hash=generate_password_hash("secret123")))
    auth = AuthService(users_repo)

    assert auth.authenticate("EMP1@example.com ", "secret123").user_id == 1
    with pytest.raises(AuthenticationError):
        auth.authenticate("emp1@example.com", "wrong")


def test_sso_only_accounts_cannot_use_password(users_repo, make_user):
    users_repo.add(make_user(1, auth_method=AuthMethod.SSO))

    with pytest.raises(AuthenticationError, match="SSO"):
        AuthService(users_repo).authenticate("emp1@example.com", "anything")


def test_sso_login_matches_by_email(users_repo, make_user):
    users_repo.add(make_user(1))
    auth = AuthService(users_repo)

    assert auth.login_with_sso({"sub": "x", "user": {"email": "Emp1@Example.com"}}).user_id == 1
    with pytest.raises(AuthenticationError):
        auth.login_with_sso({"sub": "x", "email": "stranger@example.com"})


def test_create_employee_on_probation(users_repo):
    service = UserService(users_repo)

    user_id = service.create_employee(
        current_role=Role.HR,
        employee_code="EMP010",
        full_name="Meera Nair",
        email="Meera@Example.com",
        password="secret123",
        joining_date=date(2026, 8, 31),
    )

    created = users_repo.get_by_id(user_id)
    assert created.email == "meera@example.com"
    assert created.employment_status == EmploymentStatus.PROBATION
    assert created.probation_end_date == date(2027, 2, 28)
    assert created.password_hash != "secret123"


def test_create_employee_rules(users_repo, make_user):
    users_repo.add(make_user(1))
    service = UserService(users_repo)
    base = dict(full_name="X", password="secret123", joining_date=date(2026, 1, 1))

    with pytest.raises(ValidationError):
        service.create_employee(current_role=Role.ADMIN, employee_code="N1", email="emp1@example.com", **base)
    with pytest.raises(AuthorizationError):
        service.create_employee(current_role=Role.HR, employee_code="N2", email="n2@example.com", role="Admin", **base)
    with pytest.raises(AuthorizationError):
        service.create_employee(current_role=Role.EMPLOYEE, employee_code="N3", email="n3@example.com", **base)


def test_confirming_employee_clears_probation(users_repo, make_user):
    users_repo.add(make_user(1, employment_status=EmploymentStatus.PROBATION, probation_end_date=date(2026, 12, 1)))

    updated = UserService(users_repo).update_employee(
        current_role=Role.ADMIN, user_id=1, changes={"employmentStatus": "Permanent", "department": "QA"}
    )

    assert updated.is_permanent
    assert updated.probation_end_date is None
    assert users_repo.get_by_id(1).department == "QA"


def test_probation_status(make_user):
    user = make_user(employment_status=EmploymentStatus.PROBATION, probation_end_date=date(2026, 10, 24))

    assert UserService.probation_status(user, date(2026, 10, 14)) == {
        "onProbation": True,
        "probationEndDate": "2026-10-24",
        "daysRemaining": 10,
        "isOverdue": False,
    }
    assert UserService.probation_status(user, date(2026, 11, 1))["isOverdue"] is True
    assert UserService.probation_status(make_user(), date(2026, 10, 14))["onProbation"] is False


def test_deactivate_is_admin_only(users_repo, make_user):
    users_repo.add(make_user(1))
    service = UserService(users_repo)

    with pytest.raises(AuthorizationError):
        service.deactivate(current_role=Role.HR, user_id=1)
    service.deactivate(current_role=Role.ADMIN, user_id=1)
    assert not users_repo.get_by_id(1).is_active


def test_profile_image_upload(users_repo, make_user, tmp_path):
    users_repo.add(make_user(1))
    service = UserService(users_repo, storage=UploadStorage(tmp_path, max_bytes=1024))

    url = service.update_profile_image(
        user_id=1, file=FileStorage(stream=BytesIO(b"\x89PNG...."), filename="../me.png")
    )

    assert url.startswith("/uploads/avatars/1_") and url.endswith("_me.png")
    assert users_repo.get_by_id(1).profile_image_url == url
    assert len(list((tmp_path / "avatars").iterdir())) == 1
    with pytest.raises(ValidationError):
        service.update_profile_image(user_id=1, file=FileStorage(stream=BytesIO(b"MZ"), filename="me.exe"))
    with pytest.raises(ValidationError):
        service.update_profile_image(user_id=1, file=FileStorage(stream=BytesIO(b"x" * 2048), filename="big.png"))

import pytest

from src.ams_portal.ams_portal.core.enums import NotificationType, RequestStatus, Role
from src.ams_portal.ams_portal.notifications.service import EVENT_NAME, NotificationService


class BrokenEmitter:
    def emit(self, event, data=None, **kwargs):
        raise RuntimeError("socket gone")


@pytest.fixture
def people(users_repo, make_user):
    return {
        "admin": users_repo.add(make_user(90, role=Role.ADMIN)),
        "hr": users_repo.add(make_user(91, role=Role.HR)),
        "employee": users_repo.add(make_user(1, full_name="Ravi Kumar")),
    }


def test_admin_broadcast_reaches_every_manager_room(notifications_repo, users_repo, emitter, people):
    service = NotificationService(notifications_repo, users_repo, emitter=emitter)

    service.notify_check_in(people["employee"])

    assert sorted(room for _, _, room in emitter.emitted) == ["user_90", "user_91"]
    event, payload, _ = emitter.emitted[0]
    assert event == EVENT_NAME
    assert payload["message"] == "Ravi Kumar clocked in."
    assert payload["type"] == NotificationType.CHECK_IN.value


def test_manager_does_not_notify_themselves(notifications_repo, users_repo, emitter, people):
    service = NotificationService(notifications_repo, users_repo, emitter=emitter)

    service.notify_break(people["hr"], started=True, paid=False)

    assert [room for _, _, room in emitter.emitted] == ["user_90"]


def test_leave_response_goes_to_the_employee(notifications_repo, users_repo, emitter, people):
    service = NotificationService(notifications_repo, users_repo, emitter=emitter)

    service.notify_leave_response(1, RequestStatus.APPROVED, "Sick")

    assert emitter.emitted[0][2] == "user_1"
    assert notifications_repo.items[0].message == "Your Sick leave request has been approved."


def test_delivery_failure_does_not_raise(notifications_repo, users_repo, people):
    service = NotificationService(notifications_repo, users_repo, emitter=BrokenEmitter())

    stored = service.notify_user(1, "hello")

    assert stored is not None
    assert len(notifications_repo.items) == 1


def test_listing_and_marking_read(notifications_repo, users_repo, people):
    service = NotificationService(notifications_repo, users_repo)
    service.notify_check_in(people["employee"])
    mine = service.notify_user(1, "Payslip ready")

    assert [n.message for n in service.list_for(people["employee"])] == ["Payslip ready"]
    assert len(service.list_for(people["admin"])) == 1
    assert not service.mark_read(people["hr"], 999)
    assert service.mark_read(people["employee"], mine.notification_id)
    assert notifications_repo.items[1].is_read

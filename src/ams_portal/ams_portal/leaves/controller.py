from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..auth.decorators import roles_required, token_required
from ..common.datetime_utils import to_ist_date
from ..common.http import json_body
from ..core.enums import RequestStatus, Role
from ..core.exceptions import ValidationError


def _leave_dates(data: dict) -> list:
    raw = data.get("leaveDates")
    if not isinstance(raw, list):
        raise ValidationError("leaveDates must be a list of dates")
    return [to_ist_date(str(value)) for value in raw]


def _optional_int(name: str):
    raw = request.args.get(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number")


def register(app: Flask, container) -> None:
    leaves = container.leave_service
    year_end = container.year_end_service

    @app.get("/api/leaves/my-leave-balances", endpoint="leaves_my_balances")
    @token_required
    def my_balances():
        user = g.current_user
        return jsonify(
            {
                "success": True,
                "balances": user.leave_balances.as_dict(),
                "entitlements": user.leave_entitlements.as_dict(),
            }
        )

    @app.post("/api/leaves/check-eligibility", endpoint="leaves_check_eligibility")
    @token_required
    def check_eligibility():
        data = json_body()
        result = leaves.check_eligibility(
            g.current_user,
            request_type=data.get("requestType", ""),
            leave_type=data.get("leaveType", "Full Day"),
            dates=_leave_dates(data),
            medical_certificate=data.get("medicalCertificate"),
        )
        return jsonify({"success": True, **result})

    @app.post("/api/leaves/request", endpoint="leaves_request")
    @token_required
    def apply_leave():
        data = json_body()
        alternate = data.get("alternateDate")
        application = leaves.apply(
            g.current_user,
            request_type=data.get("requestType", ""),
            leave_type=data.get("leaveType", "Full Day"),
            dates=_leave_dates(data),
            reason=data.get("reason", ""),
            alternate_date=to_ist_date(str(alternate)) if alternate else None,
            medical_certificate=data.get("medicalCertificate"),
        )
        return jsonify({"success": True, **application.to_dict()}), 201

    @app.post("/api/leaves/upload-medical-certificate", endpoint="leaves_upload_certificate")
    @token_required
    def upload_certificate():
        url = leaves.upload_medical_certificate(g.current_user, request.files.get("medicalCertificate"))
        return jsonify({"success": True, "url": url}), 201

    @app.post("/api/leaves/<int:request_id>/medical-certificate", endpoint="leaves_attach_certificate")
    @token_required
    def attach_certificate(request_id: int):
        updated = leaves.attach_medical_certificate(
            g.current_user, request_id, request.files.get("medicalCertificate")
        )
        return jsonify({"success": True, "request": updated.to_dict()})

    @app.get("/api/leaves/my-requests", endpoint="leaves_my_requests")
    @token_required
    def my_requests():
        rows = leaves.list_mine(g.current_user, status=request.args.get("status"))
        return jsonify({"success": True, "requests": [r.to_dict() for r in rows]})

    @app.get("/api/leaves/<int:request_id>", endpoint="leaves_get")
    @token_required
    def get_request(request_id: int):
        return jsonify({"success": True, "request": leaves.get(g.current_user, request_id).to_dict()})

    @app.delete("/api/leaves/<int:request_id>", endpoint="leaves_delete")
    @token_required
    def delete_request(request_id: int):
        leaves.delete(g.current_user, request_id)
        return jsonify({"success": True, "message": "Leave request deleted"})

    @app.post("/api/leaves/year-end", endpoint="leaves_year_end_submit")
    @token_required
    def submit_year_end():
        data = json_body()
        created = year_end.submit(
            g.current_user,
            leave_type=data.get("leaveType", ""),
            action=data.get("yearEndSubType", ""),
            days=data.get("days"),
            year=data.get("year"),
        )
        return jsonify({"success": True, "request": created.to_dict()}), 201

    @app.get("/api/admin/leaves/all", endpoint="admin_leaves_all")
    @roles_required(Role.ADMIN, Role.HR)
    def all_requests():
        rows = leaves.list_all(
            g.current_user,
            status=request.args.get("status"),
            user_id=_optional_int("userId"),
            year=_optional_int("year"),
            month=_optional_int("month"),
        )
        return jsonify({"success": True, "requests": [r.to_dict() for r in rows]})

    @app.patch("/api/admin/leaves/<int:request_id>/status", endpoint="admin_leaves_status")
    @roles_required(Role.ADMIN, Role.HR)
    def update_status(request_id: int):
        data = json_body()
        updated = leaves.update_status(
            g.current_user,
            request_id,
            status=data.get("status", ""),
            rejection_notes=data.get("rejectionNotes"),
        )
        return jsonify({"success": True, "request": updated.to_dict()})

    @app.delete("/api/admin/leaves/<int:request_id>", endpoint="admin_leaves_delete")
    @roles_required(Role.ADMIN, Role.HR)
    def admin_delete(request_id: int):
        leaves.delete(g.current_user, request_id)
        return jsonify({"success": True, "message": "Leave request deleted"})

    @app.post("/api/admin/leaves/allocate", endpoint="admin_leaves_allocate")
    @roles_required(Role.ADMIN, Role.HR)
    def allocate():
        data = json_body()
        user_ids = data.get("userIds")
        if user_ids is not None and not isinstance(user_ids, list):
            raise ValidationError("userIds must be a list")
        count = leaves.allocate(
            g.current_user,
            entitlements=data.get("entitlements") or {},
            user_ids=None if data.get("all") else user_ids,
        )
        return jsonify({"success": True, "updated": count})

    @app.get("/api/admin/leaves/year-end-requests", endpoint="admin_year_end_list")
    @roles_required(Role.ADMIN, Role.HR)
    def year_end_requests():
        rows = year_end.list_requests(g.current_user, status=request.args.get("status"))
        return jsonify({"success": True, "requests": [r.to_dict() for r in rows]})

    @app.patch("/api/admin/leaves/year-end/<int:request_id>/status", endpoint="admin_year_end_status")
    @roles_required(Role.ADMIN, Role.HR)
    def year_end_status(request_id: int):
        data = json_body()
        status = data.get("status")
        if status == RequestStatus.APPROVED.value:
            updated = year_end.approve(g.current_user, request_id)
        elif status == RequestStatus.REJECTED.value:
            updated = year_end.reject(g.current_user, request_id, notes=data.get("rejectionNotes"))
        else:
            raise ValidationError("Status must be Approved or Rejected")
        return jsonify({"success": True, "request": updated.to_dict()})

    @app.delete("/api/admin/leaves/year-end/<int:request_id>", endpoint="admin_year_end_delete")
    @roles_required(Role.ADMIN, Role.HR)
    def year_end_delete(request_id: int):
        leaves.delete(g.current_user, request_id)
        return jsonify({"success": True, "message": "Year-End request deleted"})

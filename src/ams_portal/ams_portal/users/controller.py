from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..auth.decorators import roles_required, token_required
from ..common.datetime_utils import today_ist
from ..common.http import json_body, parse_json_date
from ..core.enums import Role


def register(app: Flask, container) -> None:
    users = container.user_service

    @app.get("/api/users/profile", endpoint="users_profile")
    @token_required
    def profile():
        return jsonify({"success": True, **users.get_profile(g.current_user.user_id, today_ist())})

    @app.post("/api/users/profile-image", endpoint="users_profile_image")
    @token_required
    def profile_image():
        url = users.update_profile_image(user_id=g.current_user.user_id, file=request.files.get("profileImage"))
        return jsonify({"success": True, "profileImageUrl": url})

    @app.get("/api/employees", endpoint="employees_list")
    @roles_required(Role.ADMIN, Role.HR)
    def list_employees():
        active_only = request.args.get("includeInactive") not in ("1", "true")
        rows = users.list_employees(current_role=g.current_user.role, active_only=active_only)
        return jsonify({"success": True, "employees": [u.to_public_dict() for u in rows]})

    @app.get("/api/employees/<int:user_id>", endpoint="employees_get")
    @roles_required(Role.ADMIN, Role.HR)
    def get_employee(user_id: int):
        profile = users.get_profile(user_id, today_ist())
        return jsonify({"success": True, "employee": profile["user"], "probation": profile["probation"]})

    @app.post("/api/employees", endpoint="employees_create")
    @roles_required(Role.ADMIN, Role.HR)
    def create_employee():
        data = json_body()
        user_id = users.create_employee(
            current_role=g.current_user.role,
            employee_code=data.get("employeeCode", ""),
            full_name=data.get("fullName", ""),
            email=data.get("email", ""),
            password=data.get("password"),
            role=data.get("role", Role.EMPLOYEE.value),
            auth_method=data.get("authMethod", "local"),
            joining_date=parse_json_date(data.get("joiningDate"), "joiningDate"),
            department=data.get("department"),
            designation=data.get("designation"),
            saturday_policy=data.get("alternateSaturdayPolicy", "All Saturdays Working"),
            employment_status=data.get("employmentStatus", "Probation"),
            shift_id=data.get("shiftId"),
        )
        return jsonify({"success": True, "employee": users.get(user_id).to_public_dict()}), 201

    @app.put("/api/employees/<int:user_id>", endpoint="employees_update")
    @roles_required(Role.ADMIN, Role.HR)
    def update_employee(user_id: int):
        user = users.update_employee(current_role=g.current_user.role, user_id=user_id, changes=json_body())
        return jsonify({"success": True, "employee": user.to_public_dict()})

    @app.delete("/api/employees/<int:user_id>", endpoint="employees_deactivate")
    @roles_required(Role.ADMIN)
    def deactivate_employee(user_id: int):
        users.deactivate(current_role=g.current_user.role, user_id=user_id)
        return jsonify({"success": True, "message": "Employee deactivated"})

    @app.get("/api/employees/<int:user_id>/probation-status", endpoint="employees_probation")
    @roles_required(Role.ADMIN, Role.HR)
    def probation_status(user_id: int):
        return jsonify({"success": True, **users.probation_status(users.get(user_id), today_ist())})

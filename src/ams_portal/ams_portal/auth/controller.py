from __future__ import annotations

import logging

from flask import Flask, g, jsonify

from ..common.http import json_body
from ..core.enums import ExcelLogType
from ..core.exceptions import AuthenticationError
from .decorators import token_required

logger = logging.getLogger(__name__)


def register(app: Flask, container) -> None:
    auth = container.auth_service
    tokens = container.token_service
    excel_log = container.excel_log

    @app.post("/api/auth/login", endpoint="auth_login")
    def login():
        data = json_body()
        email = str(data.get("email", "")).strip().lower()
        try:
            user = auth.authenticate(email, data.get("password", ""))
        except AuthenticationError as e:
            logger.info("Login failed for %s: %s", email, e)
            known = container.users_repo.get_by_email(email) if email else None
            excel_log.log_event(known, ExcelLogType.LOGIN_FAIL, f"{email}: {e}")
            raise

        excel_log.log_event(user, ExcelLogType.LOGIN_SUCCESS, "local")
        return jsonify({"success": True, "token": tokens.issue_for(user), "user": user.to_public_dict()})

    @app.post("/api/auth/sso", endpoint="auth_sso")
    def sso_login():
        data = json_body()
        try:
            claims = container.sso_verifier.verify(data.get("token") or data.get("sso_token") or "")
            user = auth.login_with_sso(claims)
        except AuthenticationError as e:
            logger.info("SSO login failed: %s", e)
            excel_log.log_event(None, ExcelLogType.LOGIN_FAIL, f"SSO: {e}")
            raise

        excel_log.log_event(user, ExcelLogType.LOGIN_SUCCESS, "SSO")
        return jsonify({"success": True, "token": tokens.issue_for(user), "user": user.to_public_dict()})

    @app.get("/api/auth/me", endpoint="auth_me")
    @token_required
    def me():
        return jsonify({"success": True, "user": g.current_user.to_public_dict()})

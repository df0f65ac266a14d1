from __future__ import annotations

import time
from typing import Optional

from flask import Flask, g, jsonify, request, send_file, session

from ..common.logging import get_logger
from ..common.responses import error_response, success_response
from ..container import Container
from ..core.exceptions import AuthenticationError, DomainError, StoreError
from ..users.model import User
from .dispatcher import ActionDispatcher

log = get_logger("hr_backoffice.http")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def register(app: Flask, container: Container) -> None:
    dispatcher = ActionDispatcher(container)

    def _request_payload() -> dict:
        payload = dict(request.args.items())
        body = request.get_json(silent=True)
        if isinstance(body, dict):
            payload.update(body)
        return payload

    def current_user(payload: Optional[dict] = None) -> Optional[User]:
        """Session first, then the SSO header, then the demo switch."""
        user_id = session.get("user_id")
        if user_id:
            user = container.directory.get_by_id(user_id)
            if user:
                return user
            session.clear()

        header = app.config.get("AUTH_EMAIL_HEADER")
        if header and request.headers.get(header):
            return container.directory.get_by_email(request.headers[header])

        if app.config.get("DEMO_MODE"):
            email = (payload or {}).get("demoEmail") or request.headers.get("X-Demo-Email")
            if email:
                return container.directory.get_by_email(email)
        return None

    @app.errorhandler(StoreError)
    def _store_unavailable(e: StoreError):
        # Routes outside the action dispatcher still answer with an envelope.
        log.error("store_unavailable", path=request.path, code=e.code, error=str(e))
        return jsonify(error_response(str(e), e.code)), 503

    @app.before_request
    def _start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        if request.path.startswith("/api/"):
            started = getattr(g, "request_started", None)
            duration_ms = round((time.perf_counter() - started) * 1000, 1) if started else None
            log.info(
                "http_request",
                method=request.method,
                path=request.path,
                status=response.status_code,
                duration_ms=duration_ms,
            )
        return response

    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    def login():
        if not app.config.get("DEMO_MODE"):
            return jsonify(error_response("Email login is only available in demo mode", "UNAUTHORIZED")), 403

        payload = _request_payload()
        user = container.directory.get_by_email(payload.get("email"))
        if not user:
            return jsonify(error_response("No user with this email", AuthenticationError.code)), 401

        session.clear()
        session["user_id"] = user.user_id
        log.info("user_logged_in", user_id=user.user_id)
        return jsonify(success_response(user.to_dict()))

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    def logout():
        session.clear()
        return jsonify(success_response({"loggedOut": True}))

    @app.route("/api/reports/pto-balances.xlsx", methods=["GET"], endpoint="pto_balance_report")
    def pto_balance_report():
        actor = current_user(dict(request.args.items()))
        if actor is None:
            return jsonify(error_response("Unable to resolve the current user", "UNAUTHENTICATED")), 401
        try:
            output = container.balance_report.to_excel(actor=actor, year=request.args.get("year"))
        except StoreError:
            raise
        except DomainError as e:
            status = 403 if e.code == "UNAUTHORIZED" else 400
            return jsonify(error_response(str(e), e.code)), status

        year = request.args.get("year") or "current"
        return send_file(
            output,
            download_name=f"pto_balances_{year}.xlsx",
            as_attachment=True,
            mimetype=XLSX_MIMETYPE,
        )

    @app.route("/api/<action>", methods=["GET", "POST"], endpoint="api_action")
    def api_action(action: str):
        payload = _request_payload()
        # Action responses are always 200; callers branch on `success` / `code`.
        return jsonify(dispatcher.dispatch(action, lambda: current_user(payload), payload))

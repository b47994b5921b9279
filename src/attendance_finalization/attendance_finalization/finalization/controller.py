from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..core.enums import Role
from ..core.exceptions import CalendarLookupError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container) -> None:
    orchestrator = container.orchestrator

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Authentication required"}), 401

            if session.get("role") != Role.ADMIN.value:
                return jsonify({"success": False, "message": "Admin access required"}), 403

            return view(*args, **kwargs)

        return wrapper

    def _date_param(value: Optional[str]) -> Optional[date]:
        if not value:
            return None
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError("Invalid date format. Use YYYY-MM-DD")

    def _requested_date() -> Optional[date]:
        body = request.get_json(silent=True) or {}
        return _date_param(body.get("date") or request.args.get("date"))

    def _handle(action):
        try:
            return jsonify({"success": True, "data": action()}), 200
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except CalendarLookupError as e:
            logger.error("Finalization request aborted: %s", e)
            return jsonify({"success": False, "message": str(e)}), 503
        except Exception:
            logger.exception("Attendance finalization request failed")
            return jsonify({"success": False, "message": "Attendance finalization failed"}), 500

    @app.route("/admin/attendance/finalize", methods=["POST"], endpoint="finalize_attendance")
    @admin_required
    def finalize_attendance():
        def action():
            target = _requested_date()
            logger.info(
                "Manual finalization triggered by user %s for %s",
                session.get("user_id"),
                target.isoformat() if target else "today",
            )
            return orchestrator.finalize_day(target).as_dict()

        return _handle(action)

    @app.route(
        "/admin/attendance/finalize/<int:employee_id>",
        methods=["POST"],
        endpoint="finalize_employee_attendance",
    )
    @admin_required
    def finalize_employee_attendance(employee_id: int):
        def action():
            target = _requested_date()
            logger.info("Manual finalization of employee %s triggered by user %s", employee_id, session.get("user_id"))
            return orchestrator.finalize_employee(employee_id, target).as_dict()

        return _handle(action)

    @app.route("/admin/attendance/finalization-status", methods=["GET"], endpoint="finalization_status")
    @admin_required
    def finalization_status():
        return _handle(lambda: orchestrator.day_status(_date_param(request.args.get("date"))))

    @app.route(
        "/admin/attendance/finalization-status/<int:employee_id>",
        methods=["GET"],
        endpoint="employee_finalization_status",
    )
    @admin_required
    def employee_finalization_status(employee_id: int):
        return _handle(lambda: orchestrator.employee_status(employee_id, _date_param(request.args.get("date"))))

    @app.route("/admin/attendance/not-clocked-in", methods=["GET"], endpoint="not_clocked_in")
    @admin_required
    def not_clocked_in():
        return _handle(lambda: orchestrator.not_clocked_in(_date_param(request.args.get("date"))))

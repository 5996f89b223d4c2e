from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_utc, parse_iso_date
from ..common.http import current_user_id, login_required
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _parse_date(value: str):
        try:
            return parse_iso_date(value)
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD")

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_attendance_today")
    @login_required
    def api_attendance_today():
        user_id = current_user_id()
        company_id = request.args.get("company_id", "")
        container.membership_service.require_member(user_id=user_id, company_id=company_id)

        record = container.attendance_recorder.get_today(user_id, company_id, now_utc().date())
        return jsonify({"success": True, "attendance": record.to_dict() if record else None})

    @app.route("/api/attendance/history", methods=["GET"], endpoint="api_attendance_history")
    @login_required
    def api_attendance_history():
        user_id = current_user_id()
        company_id = request.args.get("company_id", "")
        container.membership_service.require_member(user_id=user_id, company_id=company_id)

        try:
            limit = int(request.args.get("limit", DEFAULT_HISTORY_LIMIT))
        except ValueError:
            raise ValidationError("limit must be an integer")

        rows = container.attendance_recorder.get_history(user_id, company_id, limit=limit)
        return jsonify({"success": True, "attendance": [r.to_dict() for r in rows]})

    @app.route("/api/companies/<company_id>/attendance", methods=["GET"], endpoint="api_company_attendance")
    @login_required
    def api_company_attendance(company_id: str):
        container.membership_service.require_member(
            user_id=current_user_id(), company_id=company_id, roles=(Role.ADMIN, Role.HR)
        )

        raw = request.args.get("date")
        work_date = _parse_date(raw) if raw else now_utc().date()
        rows = container.attendance_recorder.list_for_company_date(company_id, work_date)
        return jsonify({"success": True, "date": work_date.isoformat(), "attendance": [r.to_dict() for r in rows]})

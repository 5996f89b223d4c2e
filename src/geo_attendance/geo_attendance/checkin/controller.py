from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user_id, json_body, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _run(action: str):
        user_id = current_user_id()
        data = json_body()
        company_id = data.get("company_id")
        container.membership_service.require_member(user_id=user_id, company_id=company_id)

        run = container.checkin_orchestrator.check_in if action == "in" else container.checkin_orchestrator.check_out
        result = run(
            user_id,
            company_id,
            data.get("latitude"),
            data.get("longitude"),
            data.get("photo_base64") or data.get("photo"),
        )
        return jsonify(result.to_dict()), 200

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="api_check_in")
    @login_required
    def api_check_in():
        return _run("in")

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="api_check_out")
    @login_required
    def api_check_out():
        return _run("out")

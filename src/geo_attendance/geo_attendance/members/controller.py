from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user_id, json_body, login_required
from ..container import Container


def _face_photo(data: dict):
    return data.get("face_photo") or data.get("photo_base64") or data.get("photo")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/companies", methods=["POST"], endpoint="api_create_company")
    @login_required
    def api_create_company():
        data = json_body()
        result = container.company_service.create_company(
            user_id=current_user_id(), name=data.get("name"), face_photo=_face_photo(data)
        )
        return jsonify(result.to_dict()), 201

    @app.route("/api/companies/join", methods=["POST"], endpoint="api_join_company")
    @login_required
    def api_join_company():
        data = json_body()
        result = container.company_service.join_company(
            user_id=current_user_id(), code=data.get("code"), face_photo=_face_photo(data)
        )
        return jsonify(result.to_dict())

    @app.route("/api/companies/<company_id>/invites", methods=["POST"], endpoint="api_generate_invite")
    @login_required
    def api_generate_invite(company_id: str):
        data = json_body()
        invite = container.company_service.generate_invite(
            user_id=current_user_id(),
            company_id=company_id,
            max_uses=data.get("max_uses"),
            expires_in_days=data.get("expires_in_days"),
            role=data.get("role"),
        )
        return jsonify({"success": True, "invite_code": invite.to_dict()}), 201

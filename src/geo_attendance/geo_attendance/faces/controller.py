from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user_id, json_body, login_required
from ..core.enums import Role
from ..core.exceptions import NotFound
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/faces/verify", methods=["POST"], endpoint="api_verify_face")
    @login_required
    def api_verify_face():
        user_id = current_user_id()
        data = json_body()
        company_id = data.get("company_id")
        if container.members_repo.get(company_id=company_id, user_id=user_id) is None:
            raise NotFound("User is not a member of this company")

        result = container.face_service.verify_identity(
            user_id, company_id, data.get("photo_base64") or data.get("photo")
        )
        return jsonify({"success": True, **result.to_dict()})

    @app.route(
        "/api/companies/<company_id>/members/<user_id>/reference-photo",
        methods=["GET"],
        endpoint="api_get_reference_photo",
    )
    @login_required
    def api_get_reference_photo(company_id: str, user_id: str):
        container.membership_service.require_member(
            user_id=current_user_id(), company_id=company_id, roles=(Role.ADMIN, Role.HR)
        )
        reference = container.face_service.get_reference(user_id, company_id)
        return jsonify(
            {
                "success": True,
                "enrolled": reference is not None,
                "enrolled_at": reference.created_at.isoformat() if reference and reference.created_at else None,
            }
        )

    @app.route(
        "/api/companies/<company_id>/members/<user_id>/reference-photo",
        methods=["POST"],
        endpoint="api_register_reference_photo",
    )
    @login_required
    def api_register_reference_photo(company_id: str, user_id: str):
        container.membership_service.require_member(
            user_id=current_user_id(), company_id=company_id, roles=(Role.ADMIN, Role.HR)
        )
        container.membership_service.require_member(user_id=user_id, company_id=company_id)
        data = json_body()
        reference = container.face_service.register_reference(
            user_id, company_id, data.get("photo_base64") or data.get("photo")
        )
        return jsonify({"success": True, "enrolled": True, "photo_id": reference.photo_id}), 201

    @app.route(
        "/api/companies/<company_id>/members/<user_id>/reference-photo",
        methods=["DELETE"],
        endpoint="api_reset_reference_photo",
    )
    @login_required
    def api_reset_reference_photo(company_id: str, user_id: str):
        container.membership_service.require_member(
            user_id=current_user_id(), company_id=company_id, roles=(Role.ADMIN, Role.HR)
        )
        container.face_service.reset_reference(user_id, company_id)
        return jsonify({"success": True})

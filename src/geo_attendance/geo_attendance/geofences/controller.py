from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user_id, json_body, login_required
from ..core.enums import Role
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/geofences/validate", methods=["POST"], endpoint="api_validate_geofence")
    @login_required
    def api_validate_geofence():
        data = json_body()
        company_id = data.get("company_id")
        container.membership_service.require_member(user_id=current_user_id(), company_id=company_id)

        result = container.geofence_service.validate_location(company_id, data.get("latitude"), data.get("longitude"))
        return jsonify({"success": True, **result.to_dict()})

    @app.route("/api/companies/<company_id>/geofences", methods=["GET"], endpoint="api_list_geofences")
    @login_required
    def api_list_geofences(company_id: str):
        container.membership_service.require_member(user_id=current_user_id(), company_id=company_id)
        rows = container.geofence_service.list_geofences(company_id)
        return jsonify({"success": True, "geofences": [g.to_dict() for g in rows]})

    @app.route("/api/companies/<company_id>/geofences", methods=["POST"], endpoint="api_create_geofence")
    @login_required
    def api_create_geofence(company_id: str):
        container.membership_service.require_member(
            user_id=current_user_id(), company_id=company_id, roles=(Role.ADMIN,)
        )
        data = json_body()
        geofence = container.geofence_service.create_geofence(
            company_id=company_id,
            name=data.get("name"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            radius_meters=data.get("radius_meters"),
        )
        return jsonify({"success": True, "geofence": geofence.to_dict()}), 201

    @app.route(
        "/api/companies/<company_id>/geofences/<int:geofence_id>",
        methods=["DELETE"],
        endpoint="api_delete_geofence",
    )
    @login_required
    def api_delete_geofence(company_id: str, geofence_id: int):
        container.membership_service.require_member(
            user_id=current_user_id(), company_id=company_id, roles=(Role.ADMIN,)
        )
        container.geofence_service.delete_geofence(company_id=company_id, geofence_id=geofence_id)
        return jsonify({"success": True})

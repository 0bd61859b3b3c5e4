# Overview: Flask API routes for the service catalog; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..services import catalog_service
from ..decorators import require_auth, require_permission, current_actor
from .responses import error_response


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/services")


@catalog_bp.get("")
@require_auth
@require_permission("VIEW_SERVICES")
def list_services_route():
    try:
        services = catalog_service.list_services()
        return jsonify({"services": [s.to_dict() for s in services]}), 200
    except Exception as e:
        return error_response(e, "list services")


@catalog_bp.post("")
@require_auth
@require_permission("MANAGE_SERVICES")
def create_service_route():
    """Body: {"name", "price", "duration", "commission_rate"}"""
    payload = request.get_json(silent=True) or {}
    try:
        service = catalog_service.create_service(current_actor(), payload)
        return jsonify({"service": service.to_dict()}), 201
    except Exception as e:
        return error_response(e, "create service")


@catalog_bp.get("/<service_id>")
@require_auth
@require_permission("VIEW_SERVICES")
def get_service_route(service_id: str):
    try:
        return jsonify({"service": catalog_service.get_service(service_id).to_dict()}), 200
    except Exception as e:
        return error_response(e, "get service")


@catalog_bp.patch("/<service_id>")
@require_auth
@require_permission("MANAGE_SERVICES")
def update_service_route(service_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        service = catalog_service.update_service(current_actor(), service_id, payload)
        return jsonify({"service": service.to_dict()}), 200
    except Exception as e:
        return error_response(e, "update service")


@catalog_bp.delete("/<service_id>")
@require_auth
@require_permission("MANAGE_SERVICES")
def delete_service_route(service_id: str):
    try:
        catalog_service.delete_service(current_actor(), service_id)
        return jsonify({"ok": True}), 200
    except Exception as e:
        return error_response(e, "delete service")

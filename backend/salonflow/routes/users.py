# Overview: Flask API routes for users and barber accounts; parses input and returns JSON responses.

"""
User and barber account routes.

SECURITY:
- Listing users and creating/deleting barbers requires MANAGE_BARBERS
- Barbers may edit their own username/avatar (UPDATE_PROFILE); the service
  layer refuses edits of other accounts and password resets by non-managers
"""

from flask import Blueprint, request, jsonify

from ..services import user_service
from ..decorators import require_auth, require_permission, current_actor
from .responses import error_response


users_bp = Blueprint("users", __name__, url_prefix="/api")


@users_bp.get("/users")
@require_auth
@require_permission("MANAGE_BARBERS")
def list_users_route():
    try:
        users = user_service.list_users()
        return jsonify({"users": [u.to_dict() for u in users]}), 200
    except Exception as e:
        return error_response(e, "list users")


@users_bp.get("/barbers")
@require_auth
@require_permission("VIEW_BARBERS")
def list_barbers_route():
    try:
        barbers = user_service.list_barbers()
        return jsonify({"barbers": [b.to_dict() for b in barbers]}), 200
    except Exception as e:
        return error_response(e, "list barbers")


@users_bp.post("/barbers")
@require_auth
@require_permission("MANAGE_BARBERS")
def create_barber_route():
    """
    Body: {"username", "password", "avatar_url"?, "email"?}
    Email defaults to <username>@ACCOUNT_EMAIL_DOMAIN.
    """
    payload = request.get_json(silent=True) or {}
    try:
        barber = user_service.create_barber(current_actor(), payload)
        return jsonify({"barber": barber.to_dict()}), 201
    except Exception as e:
        return error_response(e, "create barber")


@users_bp.get("/barbers/<barber_id>")
@require_auth
@require_permission("VIEW_BARBERS")
def get_barber_route(barber_id: str):
    try:
        return jsonify({"barber": user_service.get_barber(barber_id).to_dict()}), 200
    except Exception as e:
        return error_response(e, "get barber")


@users_bp.patch("/barbers/<barber_id>")
@require_auth
@require_permission("UPDATE_PROFILE")
def update_barber_route(barber_id: str):
    """Body: {"username"?, "avatar_url"?, "password"? (managers only)}"""
    payload = request.get_json(silent=True) or {}
    try:
        barber = user_service.update_barber(current_actor(), barber_id, payload)
        return jsonify({"barber": barber.to_dict()}), 200
    except Exception as e:
        return error_response(e, "update barber")


@users_bp.delete("/barbers/<barber_id>")
@require_auth
@require_permission("MANAGE_BARBERS")
def delete_barber_route(barber_id: str):
    try:
        user_service.delete_barber(current_actor(), barber_id)
        return jsonify({"ok": True}), 200
    except Exception as e:
        return error_response(e, "delete barber")

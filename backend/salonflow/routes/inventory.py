# Overview: Flask API routes for inventory operations; parses input and returns JSON responses.

"""
Inventory routes.

SECURITY:
- Read operations require VIEW_INVENTORY
- Item writes require MANAGE_INVENTORY
- Stock adjustments require ADJUST_INVENTORY; adjusted_by is the session user
"""

from flask import Blueprint, request, jsonify

from ..services import inventory_service
from ..decorators import require_auth, require_permission, current_actor
from .responses import error_response


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/items")
@require_auth
@require_permission("VIEW_INVENTORY")
def list_items_route():
    try:
        items = inventory_service.list_items()
        return jsonify({"items": [i.to_dict() for i in items]}), 200
    except Exception as e:
        return error_response(e, "list inventory items")


@inventory_bp.post("/items")
@require_auth
@require_permission("MANAGE_INVENTORY")
def create_item_route():
    payload = request.get_json(silent=True) or {}
    try:
        item = inventory_service.create_item(current_actor(), payload)
        return jsonify({"item": item.to_dict()}), 201
    except Exception as e:
        return error_response(e, "create inventory item")


@inventory_bp.get("/items/<item_id>")
@require_auth
@require_permission("VIEW_INVENTORY")
def get_item_route(item_id: str):
    try:
        return jsonify({"item": inventory_service.get_item(item_id).to_dict()}), 200
    except Exception as e:
        return error_response(e, "get inventory item")


@inventory_bp.patch("/items/<item_id>")
@require_auth
@require_permission("MANAGE_INVENTORY")
def update_item_route(item_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        item = inventory_service.update_item(current_actor(), item_id, payload)
        return jsonify({"item": item.to_dict()}), 200
    except Exception as e:
        return error_response(e, "update inventory item")


@inventory_bp.delete("/items/<item_id>")
@require_auth
@require_permission("MANAGE_INVENTORY")
def delete_item_route(item_id: str):
    try:
        inventory_service.delete_item(current_actor(), item_id)
        return jsonify({"ok": True}), 200
    except Exception as e:
        return error_response(e, "delete inventory item")


@inventory_bp.post("/items/<item_id>/adjust")
@require_auth
@require_permission("ADJUST_INVENTORY")
def adjust_stock_route(item_id: str):
    """
    Body: {"quantity": int >= 1, "type": "add"|"deduct"|"damage"|"return", "reason"?: str}

    409 when the adjustment would take stock below zero.
    """
    payload = request.get_json(silent=True) or {}
    try:
        item, adjustment = inventory_service.adjust_stock(current_actor(), item_id, payload)
        return jsonify({"item": item.to_dict(), "adjustment": adjustment.to_dict()}), 201
    except Exception as e:
        return error_response(e, "adjust stock")


@inventory_bp.get("/items/<item_id>/adjustments")
@require_auth
@require_permission("VIEW_INVENTORY")
def list_adjustments_route(item_id: str):
    try:
        adjustments = inventory_service.list_adjustments(item_id)
        return jsonify({"adjustments": [a.to_dict() for a in adjustments]}), 200
    except Exception as e:
        return error_response(e, "list stock adjustments")


@inventory_bp.get("/kpis")
@require_auth
@require_permission("VIEW_INVENTORY")
def inventory_kpis_route():
    try:
        return jsonify(inventory_service.inventory_kpis()), 200
    except Exception as e:
        return error_response(e, "compute inventory KPIs")

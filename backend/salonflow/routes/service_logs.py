# Overview: Flask API routes for service logs and their approval; parses input and returns JSON responses.

"""
Service log routes.

- POST   /api/service-logs                 log one or more services for a barber
- GET    /api/service-logs                 list (barbers: own logs only)
- GET    /api/service-logs/pending         approval queue
- GET    /api/service-logs/<id>            one log (owner or manager)
- POST   /api/service-logs/<id>/approve    pending -> approved
- POST   /api/service-logs/<id>/reject     pending -> rejected
- POST   /api/service-logs/approve         batch approve {"ids": [...]}
- POST   /api/service-logs/reject          batch reject {"ids": [...]}
- DELETE /api/service-logs/<id>            delete while pending

SECURITY: barber/manager identity always comes from the session, never
from the request body. A barber_id in the body only selects whose work a
manager is logging.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import service_log_service, lifecycle_service
from ..decorators import require_auth, require_permission, current_actor
from salonflow.time_utils import parse_calendar_date
from .responses import error_response


service_logs_bp = Blueprint("service_logs", __name__, url_prefix="/api/service-logs")


@service_logs_bp.post("")
@require_auth
@require_permission("LOG_SERVICES")
def create_service_logs_route():
    """
    Body: {"barber_id"?: str, "entries": [{"service_id": str, "price"?: number}]}

    barber_id defaults to the caller. Logged by a barber -> pending;
    logged by a manager -> approved.

    201 when at least one log was created (failures listed alongside),
    400 when every entry failed.
    """
    data = request.get_json(silent=True) or {}
    barber_id = data.get("barber_id") or g.current_user.id

    try:
        result = service_log_service.create_service_logs(
            current_actor(),
            barber_id,
            data.get("entries"),
        )
    except Exception as e:
        return error_response(e, "create service logs")

    body = result.to_dict()
    if not result.created:
        body["error"] = "No service logs were created"
        return jsonify(body), 400

    if result.failures:
        current_app.logger.warning(
            "Service log batch for barber %s partially failed: %d created, %d failed",
            barber_id,
            len(result.created),
            len(result.failures),
        )
    return jsonify(body), 201


@service_logs_bp.get("")
@require_auth
def list_service_logs_route():
    """
    Query params:
    - barber_id: filter (managers; barbers may only pass their own id)
    - status: pending | approved | rejected
    - date: YYYY-MM-DD, local calendar day of created_at
    """
    try:
        day = parse_calendar_date(request.args.get("date"))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    try:
        logs = service_log_service.list_service_logs(
            current_actor(),
            barber_id=request.args.get("barber_id"),
            status=request.args.get("status"),
            day=day,
            tz_name=current_app.config.get("SALON_TIMEZONE", "UTC"),
        )
        return jsonify({"service_logs": [log.to_dict() for log in logs]}), 200
    except Exception as e:
        return error_response(e, "list service logs")


@service_logs_bp.get("/pending")
@require_auth
@require_permission("APPROVE_LOGS")
def list_pending_route():
    try:
        logs = service_log_service.list_pending_service_logs()
        return jsonify({"service_logs": [log.to_dict() for log in logs]}), 200
    except Exception as e:
        return error_response(e, "list pending service logs")


@service_logs_bp.get("/<log_id>")
@require_auth
def get_service_log_route(log_id: str):
    try:
        log = service_log_service.get_visible_service_log(current_actor(), log_id)
        return jsonify({"service_log": log.to_dict()}), 200
    except Exception as e:
        return error_response(e, "get service log")


@service_logs_bp.post("/<log_id>/approve")
@require_auth
@require_permission("APPROVE_LOGS")
def approve_route(log_id: str):
    """
    Error responses:
        404: log not found
        409: log is not pending
    """
    try:
        log = lifecycle_service.approve_service_log(current_actor(), log_id)
        return jsonify({"service_log": log.to_dict()}), 200
    except Exception as e:
        return error_response(e, "approve service log")


@service_logs_bp.post("/<log_id>/reject")
@require_auth
@require_permission("APPROVE_LOGS")
def reject_route(log_id: str):
    try:
        log = lifecycle_service.reject_service_log(current_actor(), log_id)
        return jsonify({"service_log": log.to_dict()}), 200
    except Exception as e:
        return error_response(e, "reject service log")


def _batch_response(succeeded, failed, verb: str):
    if failed:
        current_app.logger.warning(
            "Batch %s: %d succeeded, %d failed", verb, len(succeeded), len(failed)
        )
    return jsonify({
        "succeeded": [log.to_dict() for log in succeeded],
        "failed": failed,
    }), 200


@service_logs_bp.post("/approve")
@require_auth
@require_permission("APPROVE_LOGS")
def approve_batch_route():
    """Body: {"ids": [...]}; each id succeeds or fails on its own."""
    data = request.get_json(silent=True) or {}
    try:
        succeeded, failed = lifecycle_service.approve_service_logs_batch(current_actor(), data.get("ids"))
    except Exception as e:
        return error_response(e, "approve service logs")
    return _batch_response(succeeded, failed, "approve")


@service_logs_bp.post("/reject")
@require_auth
@require_permission("APPROVE_LOGS")
def reject_batch_route():
    data = request.get_json(silent=True) or {}
    try:
        succeeded, failed = lifecycle_service.reject_service_logs_batch(current_actor(), data.get("ids"))
    except Exception as e:
        return error_response(e, "reject service logs")
    return _batch_response(succeeded, failed, "reject")


@service_logs_bp.delete("/<log_id>")
@require_auth
@require_permission("DELETE_PENDING_LOGS")
def delete_route(log_id: str):
    """
    Error responses:
        403: not the owner (barbers)
        404: log not found
        409: log already approved or rejected
    """
    try:
        lifecycle_service.delete_service_log(current_actor(), log_id)
        return jsonify({"ok": True}), 200
    except Exception as e:
        return error_response(e, "delete service log")

# Overview: Flask API routes for dashboards and leaderboards; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..services import reporting_service
from ..decorators import require_auth, require_permission, current_actor
from .responses import error_response


analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


@analytics_bp.get("/dashboard")
@require_auth
@require_permission("VIEW_REPORTS")
def dashboard_route():
    try:
        return jsonify(reporting_service.dashboard_summary()), 200
    except Exception as e:
        return error_response(e, "build dashboard")


@analytics_bp.get("/leaderboard/barbers")
@require_auth
@require_permission("VIEW_REPORTS")
def barber_leaderboard_route():
    try:
        return jsonify({"leaderboard": reporting_service.barber_leaderboard()}), 200
    except Exception as e:
        return error_response(e, "build barber leaderboard")


@analytics_bp.get("/leaderboard/services")
@require_auth
@require_permission("VIEW_REPORTS")
def service_leaderboard_route():
    try:
        return jsonify({"leaderboard": reporting_service.service_leaderboard()}), 200
    except Exception as e:
        return error_response(e, "build service leaderboard")


@analytics_bp.get("/barber-daily/<barber_id>")
@require_auth
def barber_daily_route(barber_id: str):
    """
    A barber's day (by created_at). Barbers may only ask for themselves.

    Query params:
    - date: YYYY-MM-DD (default: today in SALON_TIMEZONE)
    """
    try:
        stats = reporting_service.barber_daily_stats(
            current_actor(),
            barber_id,
            day=request.args.get("date"),
            tz_name=current_app.config.get("SALON_TIMEZONE"),
        )
        return jsonify(stats), 200
    except Exception as e:
        return error_response(e, "build barber daily stats")

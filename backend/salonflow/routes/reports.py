# Overview: Flask API routes for daily financial reports; parses input and returns JSON responses.

"""
Daily report routes.

A report for a date may be saved many times; GET by date returns the most
recent snapshot. The preview endpoint computes figures without saving.
"""

from flask import Blueprint, request, jsonify

from ..services import reporting_service
from ..decorators import require_auth, require_permission, current_actor
from .responses import error_response


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/daily")
@require_auth
@require_permission("VIEW_REPORTS")
def list_daily_reports_route():
    """Query params: limit (default 100, max 500)."""
    limit = request.args.get("limit", default=100, type=int)
    limit = max(1, min(limit, 500))
    try:
        reports = reporting_service.list_daily_reports(limit=limit)
        return jsonify({"reports": [r.to_dict() for r in reports]}), 200
    except Exception as e:
        return error_response(e, "list daily reports")


@reports_bp.post("/daily")
@require_auth
@require_permission("GENERATE_REPORTS")
def generate_daily_report_route():
    """
    Body: {"date"?: "YYYY-MM-DD", "timezone"?: IANA name}
    Defaults: today, SALON_TIMEZONE.
    """
    data = request.get_json(silent=True) or {}
    try:
        report = reporting_service.generate_and_save_daily_report(
            current_actor(),
            data.get("date"),
            data.get("timezone"),
        )
        return jsonify({"report": report.to_dict()}), 201
    except Exception as e:
        return error_response(e, "generate daily report")


@reports_bp.get("/daily/<report_date>")
@require_auth
@require_permission("VIEW_REPORTS")
def get_daily_report_route(report_date: str):
    try:
        report = reporting_service.get_daily_report_by_date(report_date)
    except Exception as e:
        return error_response(e, "get daily report")

    if report is None:
        return jsonify({"error": f"No report saved for {report_date}"}), 404
    return jsonify({"report": report.to_dict()}), 200


@reports_bp.get("/daily/<report_date>/preview")
@require_auth
@require_permission("VIEW_REPORTS")
def preview_daily_report_route(report_date: str):
    """Compute the report for a date without saving. Query param: timezone."""
    try:
        figures = reporting_service.generate_daily_report(report_date, request.args.get("timezone"))
        return jsonify({"report": figures}), 200
    except Exception as e:
        return error_response(e, "preview daily report")

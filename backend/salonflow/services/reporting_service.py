# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

from __future__ import annotations

from datetime import date

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import DailyReport, DailyReportBarberLine, User
from ..models.auth import ROLE_BARBER
from . import aggregation
from .catalog_service import service_names
from .concurrency import run_with_retry
from .permission_service import Actor, require_manager, require_self_or_manager
from .service_log_service import (
    list_all_service_logs,
    list_approved_service_logs,
    list_barber_logs_between,
)
from .user_service import user_names
from salonflow.time_utils import (
    local_day_bounds,
    local_day_range,
    local_today,
    parse_calendar_date,
    resolve_timezone,
    utcnow,
    to_utc_z,
)


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


def _resolve_tz(tz_name: str | None) -> str:
    tz_name = tz_name or current_app.config.get("SALON_TIMEZONE", "UTC")
    try:
        resolve_timezone(tz_name)
    except ValueError as e:
        raise ReportError(str(e))
    return tz_name


def _resolve_day(day: str | date | None, tz_name: str) -> date:
    try:
        parsed = parse_calendar_date(day)
    except ValueError as e:
        raise ReportError(str(e))
    return parsed or local_today(tz_name)


# -- Dashboards --

def dashboard_summary() -> dict:
    logs = list_all_service_logs()
    active_barbers = run_with_retry(
        lambda: db.session.query(User).filter(
            User.role == ROLE_BARBER,
            User.is_active.is_(True),
        ).count()
    )
    return aggregation.dashboard_kpis(logs, active_barbers)


def barber_leaderboard() -> list[dict]:
    return aggregation.barber_leaderboard(list_approved_service_logs(), user_names())


def service_leaderboard() -> list[dict]:
    return aggregation.service_leaderboard(list_approved_service_logs(), service_names())


def barber_daily_stats(
    actor: Actor,
    barber_id: str,
    *,
    day: str | date | None = None,
    tz_name: str | None = None,
) -> dict:
    """Stats for one barber's local day, by created_at. Barbers see only their own."""
    require_self_or_manager(actor, barber_id, "view daily stats")
    tz_name = _resolve_tz(tz_name)
    target = _resolve_day(day, tz_name)
    start, next_start = local_day_range(target, tz_name)

    stats = aggregation.barber_daily_stats(list_barber_logs_between(barber_id, start, next_start))
    stats.update({"barber_id": barber_id, "date": target.isoformat(), "timezone": tz_name})
    return stats


# -- Daily reports --

def generate_daily_report(day: str | date | None = None, tz_name: str | None = None) -> dict:
    """
    Compute (but do not persist) the report for a local calendar day.

    Approved logs with approved_at from local midnight up to (not including)
    the next local midnight are included; window_end is the last displayed
    millisecond of the day. Same approved-log set -> same figures.
    """
    tz_name = _resolve_tz(tz_name)
    target = _resolve_day(day, tz_name)
    start, next_start = local_day_range(target, tz_name)
    end = local_day_bounds(target, tz_name)[1]

    logs = list_approved_service_logs(start=start, before=next_start)
    figures = aggregation.daily_report_figures(logs, user_names())

    figures.update({
        "date": target.isoformat(),
        "timezone": tz_name,
        "window_start": to_utc_z(start),
        "window_end": to_utc_z(end),
    })
    return figures


def save_daily_report(actor: Actor, figures: dict) -> DailyReport:
    """
    Persist a generated report as a new snapshot.

    Earlier snapshots for the same date are kept.
    """
    require_manager(actor, "save daily reports")

    report = DailyReport(
        report_date=parse_calendar_date(figures["date"]),
        timezone=figures["timezone"],
        total_revenue=figures["total_revenue"],
        total_barber_commissions=figures["total_barber_commissions"],
        profit=figures["profit"],
        manager_commission=figures["manager_commission"],
        owner_cut=figures["owner_cut"],
        approved_service_count=figures["approved_service_count"],
        generated_by_user_id=actor.user_id,
        created_at=utcnow(),
    )
    for position, line in enumerate(figures["barber_breakdown"]):
        report.lines.append(
            DailyReportBarberLine(
                position=position,
                barber_id=line["barber_id"],
                barber_name=line["barber_name"],
                revenue=line["revenue"],
                commission=line["commission"],
                service_count=line["service_count"],
            )
        )

    db.session.add(report)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Daily report %s saved for %s (%s): revenue=%.2f services=%d",
        report.id,
        report.report_date.isoformat(),
        report.timezone,
        report.total_revenue,
        report.approved_service_count,
    )
    return report


def generate_and_save_daily_report(
    actor: Actor,
    day: str | date | None = None,
    tz_name: str | None = None,
) -> DailyReport:
    require_manager(actor, "generate daily reports")
    return save_daily_report(actor, generate_daily_report(day, tz_name))


def list_daily_reports(limit: int = 100) -> list[DailyReport]:
    """Newest date first; for one date, newest snapshot first."""
    return run_with_retry(
        lambda: (
            db.session.query(DailyReport)
            .order_by(DailyReport.report_date.desc(), DailyReport.created_at.desc())
            .limit(limit)
            .all()
        )
    )


def get_daily_report_by_date(day: str | date) -> DailyReport | None:
    """Latest snapshot for the date, or None if never generated."""
    try:
        target = parse_calendar_date(day)
    except ValueError as e:
        raise ReportError(str(e))
    if target is None:
        raise ReportError("date is required")

    return run_with_retry(
        lambda: (
            db.session.query(DailyReport)
            .filter(DailyReport.report_date == target)
            .order_by(DailyReport.created_at.desc(), DailyReport.id.desc())
            .first()
        )
    )

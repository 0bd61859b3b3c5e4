# Overview: Pure aggregation over service logs and inventory items (no database access).

"""
Leaderboards, KPIs and the daily financial report.

Every function here takes plain collections (ORM rows or any object with
the same attributes) plus id -> name lookups, and returns dicts ready for
JSON. Nothing is read from or written to the database, so the same inputs
always give the same outputs.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from ..models.service_logs import STATUS_APPROVED, STATUS_PENDING


UNKNOWN_NAME = "Unknown"

# Fixed business rule: profit is split evenly between manager and owner
MANAGER_PROFIT_SHARE = 0.5


def _new_bucket() -> dict:
    return {"service_count": 0, "revenue": 0.0, "commission": 0.0}


def _accumulate(logs: Iterable, key: str) -> dict[str, dict]:
    """
    Single pass: per key value, count / sum(price) / sum(commission_amount).
    Dict insertion order keeps first-seen order.
    """
    buckets: dict[str, dict] = {}
    for log in logs:
        group = getattr(log, key)
        bucket = buckets.get(group)
        if bucket is None:
            bucket = buckets[group] = _new_bucket()
        bucket["service_count"] += 1
        bucket["revenue"] += log.price
        bucket["commission"] += log.commission_amount
    return buckets


def _avg(bucket: dict) -> float:
    count = bucket["service_count"]
    return bucket["revenue"] / count if count else 0.0


def barber_leaderboard(approved_logs: Iterable, barber_names: Mapping[str, str]) -> list[dict]:
    """Per-barber totals, highest revenue first."""
    rows = [
        {
            "barber_id": barber_id,
            "barber_name": barber_names.get(barber_id, UNKNOWN_NAME),
            "service_count": bucket["service_count"],
            "revenue": bucket["revenue"],
            "commission": bucket["commission"],
            "avg_service_price": _avg(bucket),
        }
        for barber_id, bucket in _accumulate(approved_logs, "barber_id").items()
    ]
    # sorted() is stable: ties keep first-seen order
    return sorted(rows, key=lambda r: r["revenue"], reverse=True)


def service_leaderboard(approved_logs: Iterable, service_names: Mapping[str, str]) -> list[dict]:
    """Per-service totals, most performed first."""
    rows = [
        {
            "service_id": service_id,
            "service_name": service_names.get(service_id, UNKNOWN_NAME),
            "service_count": bucket["service_count"],
            "revenue": bucket["revenue"],
            "commission": bucket["commission"],
            "avg_service_price": _avg(bucket),
        }
        for service_id, bucket in _accumulate(approved_logs, "service_id").items()
    ]
    return sorted(rows, key=lambda r: r["service_count"], reverse=True)


def dashboard_kpis(all_logs: Iterable, active_barber_count: int) -> dict:
    """
    Manager dashboard numbers.

    total_revenue counts approved logs only; total_services counts every
    log regardless of status.
    """
    total_revenue = 0.0
    total_services = 0
    pending = 0
    for log in all_logs:
        total_services += 1
        if log.status == STATUS_APPROVED:
            total_revenue += log.price
        elif log.status == STATUS_PENDING:
            pending += 1

    return {
        "total_revenue": total_revenue,
        "total_services": total_services,
        "active_barbers": active_barber_count,
        "pending_approvals": pending,
    }


def barber_daily_stats(day_logs: Iterable) -> dict:
    """
    One barber's day: every log they submitted, and the approved subset.
    """
    stats = {
        "services": 0,
        "commission": 0.0,
        "approved_services": 0,
        "approved_commission": 0.0,
        "pending_services": 0,
    }
    for log in day_logs:
        stats["services"] += 1
        stats["commission"] += log.commission_amount
        if log.status == STATUS_APPROVED:
            stats["approved_services"] += 1
            stats["approved_commission"] += log.commission_amount
        elif log.status == STATUS_PENDING:
            stats["pending_services"] += 1
    return stats


def daily_report_figures(approved_logs: Iterable, barber_names: Mapping[str, str]) -> dict:
    """
    Financial figures for one day's approved logs.

    profit = revenue - barber commissions (may go negative, not clamped)
    manager_commission = owner_cut = profit * 0.5

    An empty input is valid and gives zeros with an empty breakdown.
    """
    logs = list(approved_logs)

    total_revenue = sum(log.price for log in logs)
    total_commissions = sum(log.commission_amount for log in logs)
    profit = total_revenue - total_commissions
    manager_commission = profit * MANAGER_PROFIT_SHARE
    owner_cut = profit * (1 - MANAGER_PROFIT_SHARE)

    breakdown = [
        {
            "barber_id": barber_id,
            "barber_name": barber_names.get(barber_id, UNKNOWN_NAME),
            "revenue": bucket["revenue"],
            "commission": bucket["commission"],
            "service_count": bucket["service_count"],
        }
        for barber_id, bucket in _accumulate(logs, "barber_id").items()
    ]

    return {
        "total_revenue": float(total_revenue),
        "total_barber_commissions": float(total_commissions),
        "profit": float(profit),
        "manager_commission": float(manager_commission),
        "owner_cut": float(owner_cut),
        "barber_breakdown": breakdown,
        "approved_service_count": len(logs),
    }


def inventory_kpis(items: Iterable) -> dict:
    """
    total_value: sum of cost_price * stock
    low_stock_count: 0 < stock <= reorder_point
    out_of_stock_count: stock == 0 (never also counted as low stock)
    """
    total_value = 0.0
    low_stock = 0
    out_of_stock = 0
    for item in items:
        total_value += item.cost_price * item.stock
        if item.stock == 0:
            out_of_stock += 1
        elif 0 < item.stock <= item.reorder_point:
            low_stock += 1

    return {
        "total_value": total_value,
        "low_stock_count": low_stock,
        "out_of_stock_count": out_of_stock,
    }

# Overview: Service-layer operations for service logs; creation and queries.

"""
Service Log Creation and Queries

A barber logs services they performed; each entry becomes one ServiceLog
with the catalog price (or an override) and commission rate snapshotted.

- Barber logging own work -> status "pending", awaits manager approval
- Manager logging on a barber's behalf -> status "approved" immediately

Entries are written independently (one commit each). A failed entry does
not undo the ones before it; the result reports both.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..errors import NotFoundError, AuthorizationError, describe_error
from ..models import ServiceLog, Service, User
from ..models.auth import ROLE_BARBER
from ..models.service_logs import STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED
from ..validation import ValidationError, parse_log_entry
from .concurrency import run_with_retry
from .permission_service import Actor, require_self_or_manager
from salonflow.time_utils import utcnow, local_day_range


VALID_STATUSES = {STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED}


@dataclass
class EntryFailure:
    index: int
    service_id: Optional[str]
    error: str

    def to_dict(self) -> dict:
        return {"index": self.index, "service_id": self.service_id, "error": self.error}


@dataclass
class LogBatchResult:
    created: list[ServiceLog] = field(default_factory=list)
    failures: list[EntryFailure] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.created) and bool(self.failures)

    def to_dict(self) -> dict:
        return {
            "created": [log.to_dict() for log in self.created],
            "failures": [f.to_dict() for f in self.failures],
        }


def compute_commission(price: float, commission_rate: float) -> float:
    return price * commission_rate


def build_service_log(
    *,
    barber_id: str,
    service: Service,
    override_price: Optional[float],
    auto_approve: bool,
    created_by_user_id: Optional[str] = None,
    now=None,
) -> ServiceLog:
    """
    Build (not persist) a ServiceLog from a catalog service.

    An override of 0 is a real price, only None falls back to the catalog.
    """
    now = now or utcnow()
    price = override_price if override_price is not None else service.price
    rate = service.commission_rate

    return ServiceLog(
        barber_id=barber_id,
        service_id=service.id,
        price=price,
        commission_rate=rate,
        commission_amount=compute_commission(price, rate),
        status=STATUS_APPROVED if auto_approve else STATUS_PENDING,
        created_at=now,
        approved_at=now if auto_approve else None,
        rejected_at=None,
        created_by_user_id=created_by_user_id,
        decided_by_user_id=created_by_user_id if auto_approve else None,
    )


def create_service_logs(actor: Actor, barber_id: str, entries: list) -> LogBatchResult:
    """
    Log one ServiceLog per entry for barber_id.

    entries: [{"service_id": str, "price": number | null}, ...]

    Raises (whole request):
        AuthorizationError: a barber logging for someone else
        NotFoundError: barber_id is not a barber
        ValidationError: entries missing or empty
    Per-entry problems land in result.failures.
    """
    require_self_or_manager(actor, barber_id, "log services")

    barber = db.session.get(User, barber_id)
    if barber is None or barber.role != ROLE_BARBER:
        raise NotFoundError("Barber not found")

    if not isinstance(entries, list) or not entries:
        raise ValidationError("entries must be a non-empty list")

    auto_approve = actor.is_manager
    result = LogBatchResult()

    for index, entry in enumerate(entries):
        raw_service_id = entry.get("service_id") if isinstance(entry, dict) else None
        try:
            service_id, override_price = parse_log_entry(entry)
        except ValidationError as e:
            result.failures.append(EntryFailure(index, raw_service_id, str(e)))
            continue

        service = db.session.get(Service, service_id)
        if service is None:
            result.failures.append(EntryFailure(index, service_id, "Service not found"))
            continue

        log = build_service_log(
            barber_id=barber_id,
            service=service,
            override_price=override_price,
            auto_approve=auto_approve,
            created_by_user_id=actor.user_id,
        )
        db.session.add(log)
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            message, _status = describe_error(e)
            result.failures.append(EntryFailure(index, service_id, message))
            continue

        result.created.append(log)

    return result


def get_service_log(log_id: str) -> ServiceLog:
    log = run_with_retry(lambda: db.session.get(ServiceLog, log_id))
    if log is None:
        raise NotFoundError("Service log not found")
    return log


def get_visible_service_log(actor: Actor, log_id: str) -> ServiceLog:
    """Managers see every log, barbers only their own."""
    log = get_service_log(log_id)
    if not actor.is_manager and log.barber_id != actor.user_id:
        raise AuthorizationError("You can only view your own service logs")
    return log


def list_service_logs(
    actor: Actor,
    *,
    barber_id: Optional[str] = None,
    status: Optional[str] = None,
    day: Optional[date] = None,
    tz_name: str = "UTC",
    limit: int = 500,
) -> list[ServiceLog]:
    """
    Newest first. Barbers are always scoped to their own logs.

    day filters on created_at within the local calendar day.
    """
    if status is not None and status not in VALID_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(sorted(VALID_STATUSES))}")

    if not actor.is_manager:
        if barber_id is not None and barber_id != actor.user_id:
            raise AuthorizationError("You can only view your own service logs")
        barber_id = actor.user_id

    def _query():
        q = db.session.query(ServiceLog)
        if barber_id is not None:
            q = q.filter(ServiceLog.barber_id == barber_id)
        if status is not None:
            q = q.filter(ServiceLog.status == status)
        if day is not None:
            start, next_start = local_day_range(day, tz_name)
            q = q.filter(ServiceLog.created_at >= start, ServiceLog.created_at < next_start)
        return q.order_by(ServiceLog.created_at.desc(), ServiceLog.id.desc()).limit(limit).all()

    return run_with_retry(_query)


def list_pending_service_logs() -> list[ServiceLog]:
    """Approval queue, oldest first."""
    return run_with_retry(
        lambda: (
            db.session.query(ServiceLog)
            .filter(ServiceLog.status == STATUS_PENDING)
            .order_by(ServiceLog.created_at.asc(), ServiceLog.id.asc())
            .all()
        )
    )


def list_approved_service_logs(
    *,
    start=None,
    before=None,
) -> list[ServiceLog]:
    """Approved logs, optionally with approved_at in [start, before)."""
    def _query():
        q = db.session.query(ServiceLog).filter(ServiceLog.status == STATUS_APPROVED)
        if start is not None:
            q = q.filter(ServiceLog.approved_at >= start)
        if before is not None:
            q = q.filter(ServiceLog.approved_at < before)
        return q.order_by(ServiceLog.approved_at.asc(), ServiceLog.id.asc()).all()

    return run_with_retry(_query)


def list_all_service_logs() -> list[ServiceLog]:
    return run_with_retry(lambda: db.session.query(ServiceLog).all())


def list_barber_logs_between(barber_id: str, start, before) -> list[ServiceLog]:
    """A barber's logs with created_at in [start, before), any status."""
    return run_with_retry(
        lambda: (
            db.session.query(ServiceLog)
            .filter(
                ServiceLog.barber_id == barber_id,
                ServiceLog.created_at >= start,
                ServiceLog.created_at < before,
            )
            .order_by(ServiceLog.created_at.asc())
            .all()
        )
    )

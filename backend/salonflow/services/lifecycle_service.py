# Overview: Service-layer operations for service log approval lifecycle.

"""
Service Log Approval Lifecycle

STATE MACHINE:
    pending -> approved
    pending -> rejected

    pending:  awaiting manager review; may be deleted by its barber or a manager
    approved: terminal; counts toward revenue, commissions and reports
    rejected: terminal; never counted

RULES:
1. Only managers approve or reject
2. Approved and rejected are terminal (no further transitions)
3. approve sets approved_at only; reject sets rejected_at only
4. Only pending logs can be deleted (enforced here, not just in the UI)

Transitions go through ChangeCommand: if the commit fails the in-memory
log is restored to its prior status and timestamps before the error
propagates.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..errors import NotFoundError, AuthorizationError, describe_error
from ..models import ServiceLog
from ..models.service_logs import STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED
from ..validation import ValidationError
from .commands import ChangeCommand
from .permission_service import Actor, require_manager
from .service_log_service import get_service_log
from salonflow.time_utils import utcnow


VALID_STATUSES = {STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED}


class LifecycleError(ValueError):
    """
    Raised when an invalid lifecycle transition is attempted.

    This is a domain error, not a technical error.
    """
    pass


def validate_status(status: str) -> None:
    if status not in VALID_STATUSES:
        raise LifecycleError(
            f"Invalid status '{status}'. Must be one of: {', '.join(sorted(VALID_STATUSES))}"
        )


def can_transition(from_status: str, to_status: str) -> bool:
    """
    Valid transitions:
    - pending -> approved
    - pending -> rejected

    Everything else (including same-state) is refused.
    """
    validate_status(from_status)
    validate_status(to_status)

    valid_transitions = {
        (STATUS_PENDING, STATUS_APPROVED),
        (STATUS_PENDING, STATUS_REJECTED),
    }
    return (from_status, to_status) in valid_transitions


def can_delete_service_log(log: ServiceLog) -> bool:
    return log.status == STATUS_PENDING


def _transition(actor: Actor, log_id: str, to_status: str) -> ServiceLog:
    require_manager(actor, "approve or reject service logs")
    log = get_service_log(log_id)

    if not can_transition(log.status, to_status):
        raise LifecycleError(
            f"Cannot mark service log {log_id} as '{to_status}': "
            f"current status is '{log.status}', must be 'pending'"
        )

    now = utcnow()
    patch = {"status": to_status, "decided_by_user_id": actor.user_id}
    if to_status == STATUS_APPROVED:
        patch["approved_at"] = now
    else:
        patch["rejected_at"] = now

    return ChangeCommand.for_patch(log, patch).execute()


def approve_service_log(actor: Actor, log_id: str) -> ServiceLog:
    """pending -> approved, stamping approved_at."""
    return _transition(actor, log_id, STATUS_APPROVED)


def reject_service_log(actor: Actor, log_id: str) -> ServiceLog:
    """pending -> rejected, stamping rejected_at."""
    return _transition(actor, log_id, STATUS_REJECTED)


def delete_service_log(actor: Actor, log_id: str) -> None:
    """
    Delete a pending log.

    Allowed for the owning barber or a manager. Decided logs are permanent.
    """
    log = get_service_log(log_id)

    if not actor.is_manager and log.barber_id != actor.user_id:
        raise AuthorizationError("You can only delete your own service logs")

    if not can_delete_service_log(log):
        raise LifecycleError(
            f"Cannot delete service log {log_id}: status is '{log.status}', only pending logs can be deleted"
        )

    db.session.delete(log)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def _run_batch(func, actor: Actor, log_ids) -> tuple[list[ServiceLog], list[dict]]:
    if not isinstance(log_ids, list) or not log_ids:
        raise ValidationError("ids must be a non-empty list")

    # Role failure applies to the whole batch
    require_manager(actor, "approve or reject service logs")

    succeeded: list[ServiceLog] = []
    failed: list[dict] = []
    for log_id in log_ids:
        try:
            succeeded.append(func(actor, str(log_id)))
        except (NotFoundError, LifecycleError) as e:
            failed.append({"id": log_id, "error": str(e)})
        except SQLAlchemyError as e:
            message, _status = describe_error(e)
            failed.append({"id": log_id, "error": message})
    return succeeded, failed


def approve_service_logs_batch(actor: Actor, log_ids: list) -> tuple[list[ServiceLog], list[dict]]:
    """
    Approve many logs. Each id is independent.

    Returns (approved_logs, [{"id", "error"}, ...]).
    """
    return _run_batch(approve_service_log, actor, log_ids)


def reject_service_logs_batch(actor: Actor, log_ids: list) -> tuple[list[ServiceLog], list[dict]]:
    """Reject many logs. Same contract as approve_service_logs_batch."""
    return _run_batch(reject_service_log, actor, log_ids)

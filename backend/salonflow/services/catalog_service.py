# Overview: Service-layer operations for the service catalog.

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..errors import NotFoundError
from ..models import Service
from ..validation import SERVICE_POLICY, validate_payload, enforce_rules_service
from .commands import ChangeCommand
from .concurrency import run_with_retry
from .permission_service import Actor, require_manager


def list_services() -> list[Service]:
    return run_with_retry(
        lambda: db.session.query(Service).order_by(Service.name.asc()).all()
    )


def get_service(service_id: str) -> Service:
    service = run_with_retry(lambda: db.session.get(Service, service_id))
    if service is None:
        raise NotFoundError("Service not found")
    return service


def service_names() -> dict[str, str]:
    """id -> name for every service (aggregation lookup)."""
    rows = run_with_retry(lambda: db.session.query(Service.id, Service.name).all())
    return {row.id: row.name for row in rows}


def create_service(actor: Actor, payload: dict) -> Service:
    require_manager(actor, "manage services")

    patch = validate_payload(model=Service, payload=payload, policy=SERVICE_POLICY, partial=False)
    enforce_rules_service(patch)

    service = Service(**patch)
    db.session.add(service)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return service


def update_service(actor: Actor, service_id: str, payload: dict) -> Service:
    """
    Edit a catalog entry. Existing service logs keep their snapshots.
    """
    require_manager(actor, "manage services")
    service = get_service(service_id)

    patch = validate_payload(model=Service, payload=payload, policy=SERVICE_POLICY, partial=True)
    enforce_rules_service(patch)

    return ChangeCommand.for_patch(service, patch).execute()


def delete_service(actor: Actor, service_id: str) -> None:
    """Delete a catalog entry. Logs that reference it are left in place."""
    require_manager(actor, "manage services")
    service = get_service(service_id)

    db.session.delete(service)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

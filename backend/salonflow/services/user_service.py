# Overview: Service-layer operations for barber accounts and user listings.

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..errors import NotFoundError
from ..models import User
from ..models.auth import ROLE_BARBER
from ..validation import (
    ValidationError,
    ConflictError,
    BARBER_PROFILE_POLICY,
    validate_payload,
)
from .auth_service import create_user, hash_password
from .commands import ChangeCommand
from .concurrency import run_with_retry
from .permission_service import Actor, require_manager, require_self_or_manager
from .session_service import revoke_all_user_sessions


def list_users() -> list[User]:
    return run_with_retry(
        lambda: db.session.query(User).order_by(User.role.asc(), User.username.asc()).all()
    )


def list_barbers() -> list[User]:
    return run_with_retry(
        lambda: (
            db.session.query(User)
            .filter(User.role == ROLE_BARBER)
            .order_by(User.username.asc())
            .all()
        )
    )


def get_barber(barber_id: str) -> User:
    user = run_with_retry(lambda: db.session.get(User, barber_id))
    if user is None or user.role != ROLE_BARBER:
        raise NotFoundError("Barber not found")
    return user


def user_names() -> dict[str, str]:
    """id -> username for every user (aggregation lookup)."""
    rows = run_with_retry(lambda: db.session.query(User.id, User.username).all())
    return {row.id: row.username for row in rows}


def create_barber(actor: Actor, payload: dict) -> User:
    """
    Create a barber account.

    payload: {"username", "password", "avatar_url"?, "email"?}
    """
    require_manager(actor, "create barber accounts")

    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    extra = set(payload) - {"username", "password", "avatar_url", "email"}
    if extra:
        raise ValidationError(f"Field not allowed: {sorted(extra)[0]}")

    return create_user(
        username=payload.get("username") or "",
        password=payload.get("password"),
        role=ROLE_BARBER,
        email=payload.get("email"),
        avatar_url=payload.get("avatar_url"),
    )


def update_barber(actor: Actor, barber_id: str, payload: dict) -> User:
    """
    Update username/avatar. A manager may also reset the password.

    Role is never writable here.
    """
    require_self_or_manager(actor, barber_id, "edit the profile")
    barber = get_barber(barber_id)

    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    payload = dict(payload)
    new_password = payload.pop("password", None)

    patch = validate_payload(
        model=User,
        payload=payload,
        policy=BARBER_PROFILE_POLICY,
        partial=True,
    )

    if "username" in patch and patch["username"] != barber.username:
        taken = db.session.query(User).filter(
            User.username == patch["username"],
            User.id != barber.id,
        ).first()
        if taken:
            raise ConflictError("Username already exists")

    if new_password is not None:
        require_manager(actor, "reset passwords")
        patch["password_hash"] = hash_password(new_password)
        # Force re-login everywhere after a reset; committed with the command
        revoke_all_user_sessions(barber.id, reason="Password reset")

    return ChangeCommand.for_patch(barber, patch).execute()


def delete_barber(actor: Actor, barber_id: str) -> None:
    """
    Delete a barber account.

    Sessions go with the account. Service logs stay and resolve to
    "Unknown" in reports.
    """
    require_manager(actor, "delete barber accounts")
    barber = get_barber(barber_id)

    # session_tokens cascade with the user
    db.session.delete(barber)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

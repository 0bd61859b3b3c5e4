# Overview: Service-layer operations for permission; encapsulates business logic and database work.

"""
Permission Checking, Actor Identity and Security Event Logging

WHY: Enforce role-based access control and create an audit trail.
Permission denials and failed logins are written to security_events.

DESIGN PRINCIPLES:
- Fail closed: unknown roles hold no permissions
- Log denials only: permission grants are not logged
- Static mapping: role -> permissions lives in salonflow.permissions
- Service operations receive an explicit Actor and re-check role and
  ownership themselves, independent of the route decorators
"""

from dataclasses import dataclass

from ..extensions import db
from ..errors import AuthorizationError
from ..models import User, SecurityEvent
from ..models.auth import ROLE_MANAGER
from ..permissions import get_role_permissions
from salonflow.time_utils import utcnow


class PermissionDeniedError(Exception):
    """Raised when user lacks required permission."""
    pass


@dataclass(frozen=True)
class Actor:
    """Authenticated identity passed into service operations."""
    user_id: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(user_id=user.id, role=user.role)

    @property
    def is_manager(self) -> bool:
        return self.role == ROLE_MANAGER


def log_security_event(
    user_id: str | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SecurityEvent:
    """
    Log security event to audit trail.

    event_type examples:
    - PERMISSION_DENIED
    - LOGIN_FAILED
    - LOGOUT
    - USER_CREATED
    - PASSWORD_RESET
    """
    event = SecurityEvent(
        user_id=user_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow()
    )

    db.session.add(event)
    db.session.commit()

    return event


def get_user_permissions(user_id: str) -> set[str]:
    """
    Get all permission codes for a user, resolved from their role.

    Inactive or missing users hold no permissions.
    """
    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        return set()
    return get_role_permissions(user.role)


def user_has_permission(user_id: str, permission_code: str) -> bool:
    """Check if user has a specific permission."""
    return permission_code in get_user_permissions(user_id)


def require_permission(
    user_id: str,
    permission_code: str,
    resource: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """
    Require user to have permission, raise PermissionDeniedError if not.

    Denials are logged to security_events.

    Usage:
        require_permission(user.id, "APPROVE_LOGS", resource="/api/service-logs/approve")
    """
    if not user_has_permission(user_id, permission_code):
        log_security_event(
            user_id=user_id,
            event_type="PERMISSION_DENIED",
            success=False,
            resource=resource,
            action=permission_code,
            reason=f"Missing permission: {permission_code}",
            ip_address=ip_address,
            user_agent=user_agent,
        )
        raise PermissionDeniedError(f"Permission denied: {permission_code}")


def require_manager(actor: Actor, action: str) -> None:
    """Raise AuthorizationError unless the actor is a manager."""
    if not actor.is_manager:
        raise AuthorizationError(f"Only managers can {action}")


def require_self_or_manager(actor: Actor, user_id: str, action: str) -> None:
    """Raise AuthorizationError unless the actor is a manager or is user_id."""
    if actor.is_manager or actor.user_id == user_id:
        return
    raise AuthorizationError(f"You can only {action} for your own account")

from __future__ import annotations

from ..extensions import db
from salonflow.time_utils import to_utc_z
from .common import new_id


class SecurityEvent(db.Model):
    """
    Security event audit log.

    WHY: Track permission denials and failed logins.

    IMMUTABLE: Never update or delete (except retention cleanup). Append-only.
    """
    __tablename__ = "security_events"
    __table_args__ = (
        db.Index("ix_security_events_user_type", "user_id", "event_type"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    # Plain reference: events outlive deleted users
    user_id = db.Column(db.String(36), nullable=True, index=True)

    event_type = db.Column(db.String(64), nullable=False, index=True)  # PERMISSION_DENIED, LOGIN_FAILED, ...
    resource = db.Column(db.String(128), nullable=True)  # e.g., "/api/service-logs/<id>/approve"
    action = db.Column(db.String(64), nullable=True)     # e.g., "APPROVE_LOGS"

    success = db.Column(db.Boolean, nullable=False, index=True)
    reason = db.Column(db.Text, nullable=True)

    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "event_type": self.event_type,
            "resource": self.resource,
            "action": self.action,
            "success": self.success,
            "reason": self.reason,
            "ip_address": self.ip_address,
            "occurred_at": to_utc_z(self.occurred_at),
        }

from __future__ import annotations

from ..extensions import db
from salonflow.time_utils import to_utc_z
from .common import new_id


STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"


class ServiceLog(db.Model):
    """
    One service performed by one barber.

    Lifecycle: pending -> approved | rejected (both terminal).
    price and commission_rate are snapshots taken at creation;
    commission_amount is always price * commission_rate.

    barber_id and service_id are plain references, not foreign keys:
    deleting a user or a service leaves its logs in place.
    """
    __tablename__ = "service_logs"
    __table_args__ = (
        db.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_service_logs_status",
        ),
        db.Index("ix_service_logs_status_approved", "status", "approved_at"),
        db.Index("ix_service_logs_barber_created", "barber_id", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    barber_id = db.Column(db.String(36), nullable=False, index=True)
    service_id = db.Column(db.String(36), nullable=False, index=True)

    price = db.Column(db.Float, nullable=False)
    commission_rate = db.Column(db.Float, nullable=False)
    commission_amount = db.Column(db.Float, nullable=False)

    status = db.Column(db.String(16), nullable=False, default=STATUS_PENDING, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)
    rejected_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_by_user_id = db.Column(db.String(36), nullable=True)
    decided_by_user_id = db.Column(db.String(36), nullable=True)

    def __repr__(self) -> str:
        return f"<ServiceLog id={self.id} barber_id={self.barber_id} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "barber_id": self.barber_id,
            "service_id": self.service_id,
            "price": self.price,
            "commission_rate": self.commission_rate,
            "commission_amount": self.commission_amount,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "approved_at": to_utc_z(self.approved_at),
            "rejected_at": to_utc_z(self.rejected_at),
            "created_by_user_id": self.created_by_user_id,
            "decided_by_user_id": self.decided_by_user_id,
        }

from __future__ import annotations

from ..extensions import db
from salonflow.time_utils import to_utc_z
from .common import new_id


class Service(db.Model):
    """
    Billable catalog entry.

    commission_rate is the barber's share of price (0.0 - 1.0).
    Editing a service never rewrites ServiceLogs: logs snapshot price and rate.
    """
    __tablename__ = "services"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(100), nullable=False)

    # Currency units (LKR), not cents
    price = db.Column(db.Float, nullable=False)
    duration = db.Column(db.Integer, nullable=False)  # minutes
    commission_rate = db.Column(db.Float, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Service id={self.id} name={self.name!r} price={self.price}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "duration": self.duration,
            "commission_rate": self.commission_rate,
            "created_at": to_utc_z(self.created_at),
        }

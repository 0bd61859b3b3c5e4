from __future__ import annotations

from ..extensions import db
from salonflow.time_utils import to_utc_z
from .common import new_id


class DailyReport(db.Model):
    """
    Persisted financial snapshot for one local calendar day.

    Regenerating for a date adds a new row; readers take the most recently
    created row for a date as the current one.
    """
    __tablename__ = "daily_reports"
    __table_args__ = (
        db.Index("ix_daily_reports_date_created", "report_date", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    report_date = db.Column(db.Date, nullable=False)
    timezone = db.Column(db.String(64), nullable=False, default="UTC")

    total_revenue = db.Column(db.Float, nullable=False, default=0.0)
    total_barber_commissions = db.Column(db.Float, nullable=False, default=0.0)
    profit = db.Column(db.Float, nullable=False, default=0.0)
    manager_commission = db.Column(db.Float, nullable=False, default=0.0)
    owner_cut = db.Column(db.Float, nullable=False, default=0.0)
    approved_service_count = db.Column(db.Integer, nullable=False, default=0)

    generated_by_user_id = db.Column(db.String(36), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False)

    lines = db.relationship(
        "DailyReportBarberLine",
        backref="report",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="DailyReportBarberLine.position",
    )

    def __repr__(self) -> str:
        return f"<DailyReport id={self.id} date={self.report_date} revenue={self.total_revenue}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.report_date.isoformat(),
            "timezone": self.timezone,
            "total_revenue": self.total_revenue,
            "total_barber_commissions": self.total_barber_commissions,
            "profit": self.profit,
            "manager_commission": self.manager_commission,
            "owner_cut": self.owner_cut,
            "barber_breakdown": [line.to_dict() for line in self.lines],
            "approved_service_count": self.approved_service_count,
            "generated_by_user_id": self.generated_by_user_id,
            "created_at": to_utc_z(self.created_at),
        }


class DailyReportBarberLine(db.Model):
    """Per-barber slice of a daily report, in first-seen order."""
    __tablename__ = "daily_report_barber_lines"
    __table_args__ = (
        db.UniqueConstraint("report_id", "barber_id", name="uq_daily_report_lines_report_barber"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    report_id = db.Column(db.String(36), db.ForeignKey("daily_reports.id", ondelete="CASCADE"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    barber_id = db.Column(db.String(36), nullable=False)
    barber_name = db.Column(db.String(64), nullable=False)
    revenue = db.Column(db.Float, nullable=False, default=0.0)
    commission = db.Column(db.Float, nullable=False, default=0.0)
    service_count = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self) -> dict:
        return {
            "barber_id": self.barber_id,
            "barber_name": self.barber_name,
            "revenue": self.revenue,
            "commission": self.commission,
            "service_count": self.service_count,
        }

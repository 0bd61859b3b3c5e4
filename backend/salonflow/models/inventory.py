from __future__ import annotations

from ..extensions import db
from salonflow.time_utils import to_utc_z
from .common import new_id


ADJUSTMENT_TYPES = ("add", "deduct", "damage", "return")


class InventoryItem(db.Model):
    """
    Stock-tracked product (shampoo, wax, blades...).

    Stock is a stored quantity, changed by direct edits and StockAdjustment
    entries. A sellable item must carry a selling price.
    """
    __tablename__ = "inventory_items"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_inventory_items_stock_nonneg"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)

    name = db.Column(db.String(255), nullable=False, index=True)
    brand = db.Column(db.String(120), nullable=False)
    category = db.Column(db.String(120), nullable=False)
    sku = db.Column(db.String(64), nullable=False, unique=True)

    stock = db.Column(db.Integer, nullable=False, default=0)
    price = db.Column(db.Float, nullable=True)
    cost_price = db.Column(db.Float, nullable=False)
    reorder_point = db.Column(db.Integer, nullable=False, default=0)
    unit_of_measure = db.Column(db.String(32), nullable=False)
    supplier_id = db.Column(db.String(64), nullable=True)
    is_sellable = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_updated = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<InventoryItem id={self.id} sku={self.sku!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "brand": self.brand,
            "category": self.category,
            "sku": self.sku,
            "stock": self.stock,
            "price": self.price,
            "cost_price": self.cost_price,
            "reorder_point": self.reorder_point,
            "unit_of_measure": self.unit_of_measure,
            "supplier_id": self.supplier_id,
            "is_sellable": self.is_sellable,
            "created_at": to_utc_z(self.created_at),
            "last_updated": to_utc_z(self.last_updated),
        }


class StockAdjustment(db.Model):
    """
    Audit entry for one stock change.

    'add' raises stock by quantity; 'deduct', 'damage' and 'return'
    lower it. Written in the same transaction as the stock change.
    """
    __tablename__ = "stock_adjustments"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_stock_adjustments_quantity_pos"),
        db.CheckConstraint(
            "type IN ('add', 'deduct', 'damage', 'return')",
            name="ck_stock_adjustments_type",
        ),
        db.Index("ix_stock_adjustments_item_adjusted", "item_id", "adjusted_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    item_id = db.Column(db.String(36), db.ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    type = db.Column(db.String(16), nullable=False)
    reason = db.Column(db.Text, nullable=True)
    adjusted_by = db.Column(db.String(36), nullable=False)
    adjusted_at = db.Column(db.DateTime(timezone=True), nullable=False)

    item = db.relationship(
        "InventoryItem",
        backref=db.backref("adjustments", lazy=True, cascade="all, delete-orphan"),
    )

    @property
    def stock_delta(self) -> int:
        return self.quantity if self.type == "add" else -self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "quantity": self.quantity,
            "type": self.type,
            "reason": self.reason,
            "adjusted_by": self.adjusted_by,
            "adjusted_at": to_utc_z(self.adjusted_at),
        }

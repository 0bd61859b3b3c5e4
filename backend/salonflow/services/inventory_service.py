# Overview: Service-layer operations for inventory items and stock adjustments.

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..errors import NotFoundError
from ..models import InventoryItem, StockAdjustment
from ..validation import (
    ConflictError,
    INVENTORY_ITEM_POLICY,
    validate_payload,
    enforce_rules_inventory_item,
    enforce_rules_stock_adjustment,
)
from . import aggregation
from .commands import ChangeCommand
from .concurrency import run_with_retry, lock_for_update
from .permission_service import Actor, require_manager
from salonflow.time_utils import utcnow


class InsufficientStockError(ConflictError):
    """Adjustment would take stock below zero."""


def list_items() -> list[InventoryItem]:
    return run_with_retry(
        lambda: db.session.query(InventoryItem).order_by(InventoryItem.name.asc()).all()
    )


def get_item(item_id: str) -> InventoryItem:
    item = run_with_retry(lambda: db.session.get(InventoryItem, item_id))
    if item is None:
        raise NotFoundError("Inventory item not found")
    return item


def _ensure_sku_free(sku: str, *, exclude_id: str | None = None) -> None:
    q = db.session.query(InventoryItem).filter(InventoryItem.sku == sku)
    if exclude_id is not None:
        q = q.filter(InventoryItem.id != exclude_id)
    if q.first() is not None:
        raise ConflictError(f"SKU '{sku}' already exists")


def create_item(actor: Actor, payload: dict) -> InventoryItem:
    require_manager(actor, "manage inventory")

    patch = validate_payload(
        model=InventoryItem,
        payload=payload,
        policy=INVENTORY_ITEM_POLICY,
        partial=False,
    )
    enforce_rules_inventory_item(patch)
    _ensure_sku_free(patch["sku"])

    item = InventoryItem(**patch)
    db.session.add(item)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return item


def update_item(actor: Actor, item_id: str, payload: dict) -> InventoryItem:
    require_manager(actor, "manage inventory")
    item = get_item(item_id)

    patch = validate_payload(
        model=InventoryItem,
        payload=payload,
        policy=INVENTORY_ITEM_POLICY,
        partial=True,
    )
    enforce_rules_inventory_item(patch, current=item)
    if "sku" in patch:
        _ensure_sku_free(patch["sku"], exclude_id=item.id)

    if patch:
        patch["last_updated"] = utcnow()
    return ChangeCommand.for_patch(item, patch).execute()


def delete_item(actor: Actor, item_id: str) -> None:
    """Delete an item together with its adjustment history."""
    require_manager(actor, "manage inventory")
    item = get_item(item_id)

    db.session.delete(item)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def adjust_stock(actor: Actor, item_id: str, payload: dict) -> tuple[InventoryItem, StockAdjustment]:
    """
    Record a StockAdjustment and apply it to the item's stock.

    Both writes share one transaction: either the audit row and the new
    stock level are stored together or neither is.

    Raises:
        ValidationError: bad quantity/type
        NotFoundError: unknown item
        InsufficientStockError: stock would go negative
    """
    require_manager(actor, "adjust inventory")
    data = enforce_rules_stock_adjustment(payload)

    item = lock_for_update(
        db.session.query(InventoryItem).filter(InventoryItem.id == item_id)
    ).first()
    if item is None:
        raise NotFoundError("Inventory item not found")

    now = utcnow()
    adjustment = StockAdjustment(
        item_id=item.id,
        quantity=data["quantity"],
        type=data["type"],
        reason=data["reason"],
        adjusted_by=actor.user_id,
        adjusted_at=now,
    )

    new_stock = item.stock + adjustment.stock_delta
    if new_stock < 0:
        db.session.rollback()
        raise InsufficientStockError(
            f"Cannot {data['type']} {data['quantity']} of '{item.name}': only {item.stock} in stock"
        )

    # The pending adjustment row commits with the stock change
    db.session.add(adjustment)
    ChangeCommand.for_patch(item, {"stock": new_stock, "last_updated": now}).execute()

    return item, adjustment


def list_adjustments(item_id: str, limit: int = 200) -> list[StockAdjustment]:
    """Adjustment history for an item, newest first."""
    get_item(item_id)
    return run_with_retry(
        lambda: (
            db.session.query(StockAdjustment)
            .filter(StockAdjustment.item_id == item_id)
            .order_by(StockAdjustment.adjusted_at.desc(), StockAdjustment.id.desc())
            .limit(limit)
            .all()
        )
    )


def inventory_kpis() -> dict:
    return aggregation.inventory_kpis(list_items())

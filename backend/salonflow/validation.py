from __future__ import annotations
from datetime import datetime
from salonflow.time_utils import parse_iso_datetime

import math
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import Boolean, Float, Integer, String, Text, DateTime
from sqlalchemy.orm import DeclarativeMeta


# Catalog limits (currency units, minutes)
MAX_SERVICE_PRICE = 100_000
MAX_SERVICE_DURATION = 480
MAX_SERVICE_NAME_LENGTH = 100

MIN_PASSWORD_LENGTH = 6

ADJUSTMENT_TYPES = {"add", "deduct", "damage", "return"}


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate SKU)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


SERVICE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price", "duration", "commission_rate"},
    required_on_create={"name", "price", "duration", "commission_rate"},
)

INVENTORY_ITEM_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "brand", "category", "sku", "stock", "price", "cost_price",
        "reorder_point", "unit_of_measure", "supplier_id", "is_sellable",
    },
    required_on_create={
        "name", "brand", "category", "sku", "cost_price", "unit_of_measure",
    },
)

# role is deliberately absent: it is fixed at creation
BARBER_PROFILE_POLICY = ModelValidationPolicy(
    writable_fields={"username", "avatar_url"},
    required_on_create={"username"},
)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_number(key: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise ValidationError(f"{key} must be a number")
    else:
        raise ValidationError(f"{key} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{key} must be a finite number")
    return number


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        # String input - must be plain digits (with optional leading minus)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer")
            # Reject scientific notation (e.g., "1e15", "1E10")
            if 'e' in stripped.lower():
                raise ValidationError(f"{col.key} must be a plain integer (scientific notation not allowed)")
            # Reject decimal points (e.g., "12.5")
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        # Reject floats explicitly
        if isinstance(value, float):
            raise ValidationError(f"{col.key} must be an integer, not a decimal")
        raise ValidationError(f"{col.key} must be an integer")

    # Amounts and rates
    if isinstance(coltype, Float):
        return _coerce_number(col.key, value)

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} must be true or false")

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_rules_service(patch: dict) -> None:
    """
    Catalog rules not captured by column metadata.
    """
    if "name" in patch and len(patch["name"]) > MAX_SERVICE_NAME_LENGTH:
        raise ValidationError(f"name exceeds max length {MAX_SERVICE_NAME_LENGTH}")

    if "price" in patch:
        price = patch["price"]
        if price < 0:
            raise ValidationError("price must be >= 0")
        if price > MAX_SERVICE_PRICE:
            raise ValidationError(f"price cannot exceed {MAX_SERVICE_PRICE:,}")

    if "duration" in patch:
        duration = patch["duration"]
        if duration < 1 or duration > MAX_SERVICE_DURATION:
            raise ValidationError(f"duration must be between 1 and {MAX_SERVICE_DURATION} minutes")

    if "commission_rate" in patch:
        rate = patch["commission_rate"]
        if rate < 0 or rate > 1:
            raise ValidationError("commission_rate must be between 0 and 1")


def enforce_rules_inventory_item(patch: dict, *, current=None) -> None:
    """
    current: the existing InventoryItem on update, so cross-field rules
    (sellable => price) see the merged state.
    """
    for key in ("stock", "reorder_point"):
        if key in patch and patch[key] is not None and patch[key] < 0:
            raise ValidationError(f"{key} must be >= 0")

    for key in ("cost_price", "price"):
        if key in patch and patch[key] is not None and patch[key] < 0:
            raise ValidationError(f"{key} must be >= 0")

    is_sellable = patch.get("is_sellable", current.is_sellable if current is not None else False)
    price = patch["price"] if "price" in patch else (current.price if current is not None else None)
    if is_sellable and price is None:
        raise ValidationError("price is required for sellable items")


def enforce_rules_stock_adjustment(payload: dict) -> dict:
    """
    Validates an adjustment request body.
    Returns {"quantity": int, "type": str, "reason": Optional[str]}.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    quantity = payload.get("quantity")
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("quantity must be an integer")
    if quantity < 1:
        raise ValidationError("quantity must be >= 1")

    adj_type = payload.get("type")
    if adj_type not in ADJUSTMENT_TYPES:
        raise ValidationError(f"type must be one of: {', '.join(sorted(ADJUSTMENT_TYPES))}")

    reason = payload.get("reason")
    if reason is not None:
        reason = str(reason).strip() or None

    return {"quantity": quantity, "type": adj_type, "reason": reason}


def parse_log_entry(entry: Any) -> tuple[str, Optional[float]]:
    """
    One service-log entry: {"service_id": str, "price": number | null}.
    A missing or null price means "use the catalog price".
    """
    if not isinstance(entry, dict):
        raise ValidationError("Each entry must be an object")

    service_id = entry.get("service_id")
    if not isinstance(service_id, str) or not service_id.strip():
        raise ValidationError("service_id is required")

    price = entry.get("price")
    if price is not None:
        price = _coerce_number("price", price)
        if price < 0:
            raise ValidationError("price must be >= 0")
        if price > MAX_SERVICE_PRICE:
            raise ValidationError(f"price cannot exceed {MAX_SERVICE_PRICE:,}")

    return service_id.strip(), price


def enforce_password(password: Any) -> str:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return password

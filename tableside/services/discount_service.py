"""Discount rule management for restaurant owners."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from tableside.auth import OWNER_ROLES, RestaurantContext, ensure_role
from tableside.db.session import atomic
from tableside.models.discount import DISCOUNT_SCOPES, DISCOUNT_TYPES, Discount
from tableside.models.menu import MenuItem
from tableside.services.errors import DiscountNotFoundError, MenuItemNotFoundError, ValidationError
from tableside.utils.time import as_utc

logger = logging.getLogger(__name__)


def _validate_window(start_time: datetime | None, end_time: datetime | None) -> None:
    if start_time is not None and end_time is not None and as_utc(end_time) < as_utc(start_time):
        raise ValidationError("end_time", "must not be before start_time")


def _validate_target(
    db: Session,
    ctx: RestaurantContext,
    *,
    apply_to: str,
    category_id: str | None,
    item_id: int | None,
) -> tuple[str | None, int | None]:
    """Check the scope target exists in this restaurant's menu; return the cleaned target."""
    if apply_to == "all":
        return None, None
    if apply_to == "category":
        category = (category_id or "").strip()
        if not category:
            raise ValidationError("category_id", "is required when apply_to is category")
        exists = (
            db.query(MenuItem.id)
            .filter(MenuItem.restaurant_id == ctx.restaurant_id, MenuItem.category == category)
            .first()
        )
        if exists is None:
            raise ValidationError("category_id", f'Category "{category}" not found in your menu')
        return category, None
    if item_id is None:
        raise ValidationError("item_id", "is required when apply_to is item")
    item = (
        db.query(MenuItem)
        .filter(MenuItem.id == item_id, MenuItem.restaurant_id == ctx.restaurant_id)
        .first()
    )
    if item is None:
        raise MenuItemNotFoundError("Menu item not found in your restaurant")
    return None, item_id


def list_discounts(db: Session, ctx: RestaurantContext) -> list[Discount]:
    """Return all discounts of one restaurant in creation order."""
    return (
        db.query(Discount)
        .filter(Discount.restaurant_id == ctx.restaurant_id)
        .order_by(Discount.id.asc())
        .all()
    )


def get_discount(db: Session, ctx: RestaurantContext, discount_id: int) -> Discount:
    discount: Discount | None = (
        db.query(Discount)
        .filter(Discount.id == discount_id, Discount.restaurant_id == ctx.restaurant_id)
        .first()
    )
    if discount is None:
        raise DiscountNotFoundError("Discount not found")
    return discount


def create_discount(
    db: Session,
    ctx: RestaurantContext,
    *,
    discount_type: str,
    discount_value: Decimal,
    apply_to: str = "all",
    category_id: str | None = None,
    item_id: int | None = None,
    start_time: datetime | None = None,
    end_time: datetime | None = None,
    is_active: bool = True,
) -> Discount:
    """Create a discount rule after validating its scope target."""
    ensure_role(ctx, OWNER_ROLES)
    if discount_type not in DISCOUNT_TYPES:
        raise ValidationError("discount_type", f"must be one of: {', '.join(DISCOUNT_TYPES)}")
    if apply_to not in DISCOUNT_SCOPES:
        raise ValidationError("apply_to", f"must be one of: {', '.join(DISCOUNT_SCOPES)}")
    value = Decimal(str(discount_value))
    if not value.is_finite() or value <= 0:
        raise ValidationError("discount_value", "Discount value must be positive")
    _validate_window(start_time, end_time)
    category_id, item_id = _validate_target(db, ctx, apply_to=apply_to, category_id=category_id, item_id=item_id)

    discount = Discount(
        restaurant_id=ctx.restaurant_id,
        discount_type=discount_type,
        discount_value=value,
        apply_to=apply_to,
        category_id=category_id,
        item_id=item_id,
        start_time=start_time,
        end_time=end_time,
        is_active=is_active,
    )
    with atomic(db, "create discount"):
        db.add(discount)
    db.refresh(discount)
    logger.info("[DISCOUNTS] Created discount id=%s restaurant_id=%s", discount.id, ctx.restaurant_id)
    return discount


def update_discount(db: Session, ctx: RestaurantContext, discount_id: int, changes: dict[str, Any]) -> Discount:
    """Edit value, window or active flag of a discount."""
    ensure_role(ctx, OWNER_ROLES)
    discount = get_discount(db, ctx, discount_id)

    if changes.get("discount_value") is not None:
        value = Decimal(str(changes["discount_value"]))
        if not value.is_finite() or value <= 0:
            raise ValidationError("discount_value", "Discount value must be positive")
        changes = {**changes, "discount_value": value}
    start_time = changes.get("start_time", discount.start_time)
    end_time = changes.get("end_time", discount.end_time)
    _validate_window(start_time, end_time)

    with atomic(db, "update discount"):
        for field in ("discount_value", "start_time", "end_time", "is_active"):
            if field not in changes:
                continue
            # Only the window bounds can be cleared with None.
            if changes[field] is None and field not in ("start_time", "end_time"):
                continue
            setattr(discount, field, changes[field])
    db.refresh(discount)
    return discount


def delete_discount(db: Session, ctx: RestaurantContext, discount_id: int) -> None:
    """Delete a discount; orders that used it keep their stored amounts."""
    ensure_role(ctx, OWNER_ROLES)
    discount = get_discount(db, ctx, discount_id)
    with atomic(db, "delete discount"):
        db.delete(discount)

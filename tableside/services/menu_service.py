"""Menu service helpers shared by staff and customer routes."""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import update
from sqlalchemy.orm import Session

from tableside.auth import OWNER_ROLES, RestaurantContext, ensure_role
from tableside.db.session import atomic
from tableside.models.discount import Discount
from tableside.models.inventory import MenuItemIngredient
from tableside.models.menu import MenuItem
from tableside.models.order import OrderItem
from tableside.services.errors import MenuItemNotFoundError, ValidationError
from tableside.services.order_pricing import resolve_active_table

logger = logging.getLogger(__name__)

EDITABLE_FIELDS: frozenset[str] = frozenset({"name", "description", "price", "category", "is_available"})


def _validate_price(price: Any) -> Decimal:
    try:
        parsed = Decimal(str(price))
    except ArithmeticError as exc:
        raise ValidationError("price", "must be a number") from exc
    if not parsed.is_finite() or parsed <= 0:
        raise ValidationError("price", "must be positive")
    return parsed


def _get_item(db: Session, ctx: RestaurantContext, menu_item_id: int) -> MenuItem:
    item: MenuItem | None = (
        db.query(MenuItem)
        .filter(MenuItem.id == menu_item_id, MenuItem.restaurant_id == ctx.restaurant_id)
        .first()
    )
    if item is None:
        raise MenuItemNotFoundError("Menu item not found")
    return item


def list_menu_items(db: Session, ctx: RestaurantContext) -> list[MenuItem]:
    """Return the complete menu for one restaurant, available and unavailable."""
    return (
        db.query(MenuItem)
        .filter(MenuItem.restaurant_id == ctx.restaurant_id)
        .order_by(MenuItem.category.asc(), MenuItem.id.asc())
        .all()
    )


def list_menu_for_table(db: Session, table_id: int) -> list[MenuItem]:
    """Return customer-visible items of the restaurant that owns the table."""
    table = resolve_active_table(db, table_id)
    return (
        db.query(MenuItem)
        .filter(MenuItem.restaurant_id == table.restaurant_id, MenuItem.is_available.is_(True))
        .order_by(MenuItem.category.asc(), MenuItem.id.asc())
        .all()
    )


def create_menu_item(
    db: Session,
    ctx: RestaurantContext,
    *,
    name: str,
    price: Decimal,
    category: str | None = None,
    description: str | None = None,
    is_available: bool = True,
) -> MenuItem:
    """Create and persist a menu item."""
    ensure_role(ctx, OWNER_ROLES)
    cleaned_name = (name or "").strip()
    if not cleaned_name:
        raise ValidationError("name", "must not be empty")
    item = MenuItem(
        restaurant_id=ctx.restaurant_id,
        name=cleaned_name,
        description=description,
        price=_validate_price(price),
        category=(category or "").strip() or None,
        is_available=is_available,
    )
    with atomic(db, "create menu item"):
        db.add(item)
    db.refresh(item)
    return item


def update_menu_item(db: Session, ctx: RestaurantContext, menu_item_id: int, changes: dict[str, Any]) -> MenuItem:
    """Edit a menu item; placed orders keep their own snapshots."""
    ensure_role(ctx, OWNER_ROLES)
    item = _get_item(db, ctx, menu_item_id)

    with atomic(db, "update menu item"):
        for field, value in changes.items():
            if field not in EDITABLE_FIELDS:
                continue
            if field == "price":
                value = _validate_price(value)
            elif field == "name":
                value = (value or "").strip()
                if not value:
                    raise ValidationError("name", "must not be empty")
            setattr(item, field, value)
    db.refresh(item)
    return item


def delete_menu_item(db: Session, ctx: RestaurantContext, menu_item_id: int) -> None:
    """Delete a menu item with its recipe and item-scoped discounts.

    Placed orders keep their line snapshots; only the link back to the item is cleared.
    """
    ensure_role(ctx, OWNER_ROLES)
    item = _get_item(db, ctx, menu_item_id)
    with atomic(db, "delete menu item"):
        db.execute(
            update(OrderItem)
            .where(OrderItem.menu_item_id == item.id)
            .values(menu_item_id=None)
            .execution_options(synchronize_session=False)
        )
        db.query(MenuItemIngredient).filter(MenuItemIngredient.menu_item_id == item.id).delete(
            synchronize_session=False
        )
        db.query(Discount).filter(Discount.item_id == item.id).delete(synchronize_session=False)
        db.delete(item)
    logger.info("[MENU] Deleted menu item id=%s restaurant_id=%s", menu_item_id, ctx.restaurant_id)

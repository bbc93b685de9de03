"""Server-side cart pricing shared by the customer preview and order placement."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tableside.models.discount import Discount
from tableside.models.menu import MenuItem
from tableside.models.restaurant import Restaurant, RestaurantTable
from tableside.schemas.order import CartItemPayload, PricingPreviewResponse
from tableside.services.discounts import CartLine, DiscountResult, DiscountRule, compute_best_discount
from tableside.services.errors import (
    ItemUnavailableError,
    MenuItemNotFoundError,
    StoreError,
    TableNotFoundError,
    ValidationError,
)
from tableside.services.pricing import OrderPricing, calculate_order_pricing

logger = logging.getLogger(__name__)


class QuoteLine(BaseModel):
    """Cart line priced from the current menu row."""

    menu_item_id: int
    name: str
    category: str | None
    unit_price: Decimal
    qty: int
    line_subtotal: Decimal


class OrderQuote(BaseModel):
    """Full price breakdown for a cart at one table."""

    restaurant_id: int
    table_id: int
    lines: list[QuoteLine]
    subtotal: Decimal
    discount: DiscountResult
    pricing: OrderPricing


def resolve_active_table(db: Session, table_id: int) -> RestaurantTable:
    """Return an active table of an active restaurant."""
    table: RestaurantTable | None = (
        db.query(RestaurantTable)
        .join(Restaurant, Restaurant.id == RestaurantTable.restaurant_id)
        .filter(
            RestaurantTable.id == table_id,
            RestaurantTable.is_active.is_(True),
            Restaurant.is_active.is_(True),
        )
        .first()
    )
    if table is None:
        raise TableNotFoundError("Table not found or inactive")
    return table


def merge_cart(items: Sequence[CartItemPayload]) -> dict[int, int]:
    """Validate cart lines and merge repeated menu items, keeping first-seen order."""
    if not items:
        raise ValidationError("items", "order must contain at least one item")
    qty_by_item: dict[int, int] = {}
    for index, item in enumerate(items):
        if item.qty < 1:
            raise ValidationError(f"items[{index}].qty", "must be a positive integer")
        qty_by_item[item.menu_item_id] = qty_by_item.get(item.menu_item_id, 0) + item.qty
    return qty_by_item


def load_discount_rules(db: Session, restaurant_id: int) -> list[DiscountRule]:
    """Return the restaurant's active discounts in creation order."""
    rows: list[Discount] = (
        db.query(Discount)
        .filter(Discount.restaurant_id == restaurant_id, Discount.is_active.is_(True))
        .order_by(Discount.id.asc())
        .all()
    )
    return [DiscountRule.model_validate(row) for row in rows]


def build_order_quote(
    db: Session,
    *,
    table_id: int,
    items: Sequence[CartItemPayload],
    now: datetime | None = None,
) -> OrderQuote:
    """Price a cart from live menu rows and discount rules; client prices are never used."""
    qty_by_item = merge_cart(items)
    table = resolve_active_table(db, table_id)

    menu_items: list[MenuItem] = (
        db.query(MenuItem)
        .filter(MenuItem.restaurant_id == table.restaurant_id, MenuItem.id.in_(qty_by_item.keys()))
        .all()
    )
    if len(menu_items) != len(qty_by_item):
        raise MenuItemNotFoundError("One or more items not found")
    if any(not item.is_available for item in menu_items):
        raise ItemUnavailableError("Some items are unavailable")

    by_id: dict[int, MenuItem] = {item.id: item for item in menu_items}
    lines: list[QuoteLine] = []
    for menu_item_id, qty in qty_by_item.items():
        menu_item = by_id[menu_item_id]
        unit_price = Decimal(menu_item.price)
        lines.append(
            QuoteLine(
                menu_item_id=menu_item.id,
                name=menu_item.name,
                category=menu_item.category,
                unit_price=unit_price,
                qty=qty,
                line_subtotal=unit_price * qty,
            )
        )

    subtotal = sum((line.line_subtotal for line in lines), Decimal("0"))
    discount = compute_best_discount(
        subtotal,
        [CartLine(menu_item_id=line.menu_item_id, category=line.category, line_subtotal=line.line_subtotal) for line in lines],
        load_discount_rules(db, table.restaurant_id),
        now=now,
    )
    pricing = calculate_order_pricing(max(Decimal("0"), subtotal - discount.discount_amount))

    return OrderQuote(
        restaurant_id=table.restaurant_id,
        table_id=table.id,
        lines=lines,
        subtotal=subtotal,
        discount=discount,
        pricing=pricing,
    )


def preview_order_pricing(
    db: Session,
    *,
    table_id: int,
    items: Sequence[CartItemPayload],
    now: datetime | None = None,
) -> PricingPreviewResponse:
    """Read-only price preview for a customer cart."""
    try:
        quote = build_order_quote(db, table_id=table_id, items=items, now=now)
    except SQLAlchemyError as exc:
        logger.exception("[PRICING] Preview failed for table_id=%s", table_id)
        raise StoreError("Failed to preview pricing") from exc
    finally:
        # Previews never write; drop whatever the reads opened.
        db.rollback()

    return PricingPreviewResponse(
        subtotal=quote.subtotal,
        discount=quote.discount.discount_amount,
        total=quote.pricing.total,
    )

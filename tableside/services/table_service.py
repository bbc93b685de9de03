"""Dining table management for restaurant owners."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tableside.auth import OWNER_ROLES, RestaurantContext, ensure_role
from tableside.db.session import atomic
from tableside.models.order import Order
from tableside.models.restaurant import TABLE_STATUSES, RestaurantTable
from tableside.services.errors import TableHasOrdersError, TableNotFoundError, ValidationError

logger = logging.getLogger(__name__)


def get_table(db: Session, ctx: RestaurantContext, table_id: int) -> RestaurantTable:
    table: RestaurantTable | None = (
        db.query(RestaurantTable)
        .filter(RestaurantTable.id == table_id, RestaurantTable.restaurant_id == ctx.restaurant_id)
        .first()
    )
    if table is None:
        raise TableNotFoundError("Table not found")
    return table


def list_tables(db: Session, ctx: RestaurantContext) -> list[RestaurantTable]:
    """Return every table of the restaurant, active or not."""
    return (
        db.query(RestaurantTable)
        .filter(RestaurantTable.restaurant_id == ctx.restaurant_id)
        .order_by(RestaurantTable.table_number.asc(), RestaurantTable.id.asc())
        .all()
    )


def create_table(
    db: Session,
    ctx: RestaurantContext,
    *,
    table_number: str,
    capacity: int = 4,
    location: str | None = None,
) -> RestaurantTable:
    """Add an active, available table; numbers are unique per restaurant."""
    ensure_role(ctx, OWNER_ROLES)
    number = (table_number or "").strip()
    if not number:
        raise ValidationError("table_number", "must not be empty")
    if len(number) > 32:
        raise ValidationError("table_number", "must be at most 32 characters")
    if capacity < 1:
        raise ValidationError("capacity", "must be positive")
    taken = db.scalar(
        select(RestaurantTable.id).where(
            RestaurantTable.restaurant_id == ctx.restaurant_id,
            RestaurantTable.table_number == number,
        )
    )
    if taken is not None:
        raise ValidationError("table_number", f'Table "{number}" already exists')

    table = RestaurantTable(
        restaurant_id=ctx.restaurant_id,
        table_number=number,
        capacity=capacity,
        location=(location or "").strip() or None,
        status="available",
        is_active=True,
    )
    with atomic(db, "create table"):
        db.add(table)
    db.refresh(table)
    logger.info("[TABLES] Created table id=%s number=%s restaurant_id=%s", table.id, number, ctx.restaurant_id)
    return table


def update_table(db: Session, ctx: RestaurantContext, table_id: int, changes: dict[str, Any]) -> RestaurantTable:
    """Change seating status or the active flag; inactive tables take no orders."""
    ensure_role(ctx, OWNER_ROLES)
    table = get_table(db, ctx, table_id)
    new_status = changes.get("status")
    if new_status is not None and new_status not in TABLE_STATUSES:
        raise ValidationError("status", f"must be one of: {', '.join(TABLE_STATUSES)}")

    with atomic(db, "update table"):
        if new_status is not None:
            table.status = new_status
        if changes.get("is_active") is not None:
            table.is_active = bool(changes["is_active"])
    db.refresh(table)
    return table


def delete_table(db: Session, ctx: RestaurantContext, table_id: int) -> None:
    """Delete a table that no order references."""
    ensure_role(ctx, OWNER_ROLES)
    table = get_table(db, ctx, table_id)
    order_count = db.scalar(select(func.count(Order.id)).where(Order.table_id == table.id)) or 0
    if order_count:
        raise TableHasOrdersError(f"Table has {order_count} orders; deactivate it instead")
    with atomic(db, "delete table"):
        db.delete(table)
    logger.info("[TABLES] Deleted table id=%s restaurant_id=%s", table_id, ctx.restaurant_id)

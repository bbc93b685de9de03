"""Order lifecycle: placement, status transitions and atomic cancellation.

Status changes are conditional UPDATEs gated on the set of statuses the target
may be reached from (``WHERE id = ? AND status IN (...)``). A cancel therefore
still lands when the kitchen has just moved the order from pending to
preparing, while a cancel and a complete racing on the same order resolve to
exactly one winner: the loser matches zero rows, re-reads, and fails its
precondition.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from tableside.auth import OWNER_ROLES, STAFF_ROLES, RestaurantContext, ensure_role
from tableside.db.session import atomic
from tableside.models.order import Order, OrderItem
from tableside.models.restaurant import RestaurantTable
from tableside.schemas.order import CartItemPayload, KitchenOrderItem, KitchenOrderResponse
from tableside.services.audit_service import log_action
from tableside.services.errors import (
    CannotCancelCompletedError,
    ConcurrentUpdateError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
    ValidationError,
)
from tableside.services.inventory_service import consume_for_order
from tableside.services.order_pricing import build_order_quote
from tableside.services.order_status import (
    ORDER_STATUSES,
    can_transition,
    consumes_inventory_at,
    source_statuses,
    status_values,
)
from tableside.utils.time import as_utc, utcnow

logger = logging.getLogger(__name__)

KITCHEN_STATUSES: tuple[str, ...] = ("pending", "preparing", "completed")
KITCHEN_BOARD_LIMIT = 100


def _optional_text(field: str, value: str | None, max_length: int) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    if len(cleaned) > max_length:
        raise ValidationError(field, f"must be at most {max_length} characters")
    return cleaned or None


def place_order(
    db: Session,
    *,
    table_id: int,
    items: Sequence[CartItemPayload],
    customer_name: str | None = None,
    notes: str | None = None,
    now: datetime | None = None,
    policy: str | None = None,
) -> Order:
    """Create a pending order with frozen line snapshots and stored pricing."""
    now = now or utcnow()
    customer_name = _optional_text("customer_name", customer_name, 100)
    notes = _optional_text("notes", notes, 500)

    with atomic(db, "place order"):
        quote = build_order_quote(db, table_id=table_id, items=items, now=now)
        applied = quote.discount.applied
        order = Order(
            restaurant_id=quote.restaurant_id,
            table_id=quote.table_id,
            customer_name=customer_name,
            notes=notes,
            status="pending",
            subtotal_amount=quote.subtotal,
            discount_amount=quote.discount.discount_amount,
            discount_id=applied.discount_id if applied is not None else None,
            vat_amount=quote.pricing.vat_amount,
            tip_amount=quote.pricing.tip_amount,
            total_amount=quote.pricing.total,
            commission_rate=quote.pricing.commission_rate,
            commission_amount=quote.pricing.commission_amount,
            created_at=now,
            status_updated_at=now,
        )
        db.add(order)
        db.flush()

        for line in quote.lines:
            db.add(
                OrderItem(
                    order_id=order.id,
                    menu_item_id=line.menu_item_id,
                    name=line.name,
                    unit_price=line.unit_price,
                    qty=line.qty,
                    line_total=line.line_subtotal,
                )
            )

        if consumes_inventory_at("pending", policy):
            consume_for_order(
                db,
                restaurant_id=quote.restaurant_id,
                order_id=order.id,
                lines=[(line.menu_item_id, line.qty) for line in quote.lines],
            )
            order.inventory_consumed = True

        log_action(
            db,
            restaurant_id=quote.restaurant_id,
            actor=None,
            action_type="order_placed",
            order_id=order.id,
            after_snapshot={"status": "pending", "total": str(quote.pricing.total)},
        )

    db.refresh(order)
    logger.info("[ORDERS] Placed order id=%s restaurant_id=%s total=%s", order.id, order.restaurant_id, order.total_amount)
    return order


def _get_scoped_order(db: Session, ctx: RestaurantContext, order_id: int) -> Order:
    order: Order | None = db.get(Order, order_id, populate_existing=True)
    if order is None:
        raise OrderNotFoundError("Order not found")
    ctx.ensure_owns(order.restaurant_id)
    return order


def _check_transition(current: str, target: str) -> None:
    if current == "completed" and target == "cancelled":
        raise CannotCancelCompletedError("Completed orders cannot be cancelled")
    if not can_transition(current, target):
        raise InvalidStatusTransitionError(current, target)


def _classify_lost_write(db: Session, ctx: RestaurantContext, order_id: int, new_status: str) -> None:
    """Raise the error explaining why a guarded status UPDATE matched no row."""
    row = db.execute(select(Order.status, Order.restaurant_id).where(Order.id == order_id)).first()
    if row is None:
        raise OrderNotFoundError("Order not found")
    ctx.ensure_owns(row.restaurant_id)
    _check_transition(row.status, new_status)


def _transition(
    db: Session,
    ctx: RestaurantContext,
    order_id: int,
    new_status: str,
    *,
    now: datetime | None,
    policy: str | None,
) -> Order:
    now = now or utcnow()
    order = _get_scoped_order(db, ctx, order_id)
    previous = order.status
    _check_transition(previous, new_status)
    needs_consumption = (
        new_status != "cancelled"
        and not order.inventory_consumed
        and consumes_inventory_at(new_status, policy)
    )

    guards = [
        Order.id == order.id,
        Order.restaurant_id == ctx.restaurant_id,
        Order.status.in_(source_statuses(new_status)),
    ]
    if new_status != "cancelled":
        # A concurrent move between sources may already have consumed stock.
        guards.append(Order.inventory_consumed == bool(order.inventory_consumed))

    with atomic(db, f"move order to {new_status}"):
        values = status_values(new_status, now)
        if needs_consumption:
            values["inventory_consumed"] = True
        result = db.execute(
            update(Order)
            .where(*guards)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.info("[ORDERS] Lost status race order_id=%s wanted=%s observed=%s", order.id, new_status, previous)
            _classify_lost_write(db, ctx, order.id, new_status)
            raise ConcurrentUpdateError("Order status changed concurrently, retry")

        if needs_consumption:
            consume_for_order(
                db,
                restaurant_id=order.restaurant_id,
                order_id=order.id,
                lines=[(item.menu_item_id, item.qty) for item in order.items],
            )

        log_action(
            db,
            restaurant_id=order.restaurant_id,
            actor=ctx,
            action_type=f"order_{new_status}",
            order_id=order.id,
            before_snapshot={"status": previous},
            after_snapshot={"status": new_status},
        )

    db.refresh(order)
    logger.info("[ORDERS] Order id=%s moved %s -> %s by role=%s", order.id, previous, new_status, ctx.role)
    return order


def advance_order_status(
    db: Session,
    ctx: RestaurantContext,
    order_id: int,
    new_status: str,
    *,
    now: datetime | None = None,
    policy: str | None = None,
) -> Order:
    """Move an order forward; cancellation is delegated to the guarded cancel."""
    if new_status not in ORDER_STATUSES:
        raise ValidationError("status", f"must be one of: {', '.join(ORDER_STATUSES)}")
    if new_status == "cancelled":
        return cancel_order(db, ctx, order_id, now=now)
    ensure_role(ctx, STAFF_ROLES)
    return _transition(db, ctx, order_id, new_status, now=now, policy=policy)


def cancel_order(db: Session, ctx: RestaurantContext, order_id: int, *, now: datetime | None = None) -> Order:
    """Cancel a pending or preparing order; completed orders are immutable."""
    ensure_role(ctx, OWNER_ROLES)
    return _transition(db, ctx, order_id, "cancelled", now=now, policy=None)


def get_order(db: Session, ctx: RestaurantContext, order_id: int) -> Order:
    """Return one order of the caller's restaurant."""
    return _get_scoped_order(db, ctx, order_id)


def get_public_order(db: Session, *, table_id: int, order_id: int) -> Order:
    """Return an order for the customer tracking view; the table must match."""
    order: Order | None = (
        db.query(Order)
        .filter(Order.id == order_id, Order.table_id == table_id)
        .first()
    )
    if order is None:
        raise OrderNotFoundError("Order not found")
    return order


def list_orders(
    db: Session,
    ctx: RestaurantContext,
    *,
    status: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Order], int]:
    """Return one newest-first page of orders and the total count."""
    if status is not None and status not in ORDER_STATUSES:
        raise ValidationError("status", f"must be one of: {', '.join(ORDER_STATUSES)}")
    if page < 1:
        raise ValidationError("page", "must be at least 1")
    if not 1 <= page_size <= 100:
        raise ValidationError("page_size", "must be between 1 and 100")

    query = db.query(Order).filter(Order.restaurant_id == ctx.restaurant_id)
    if status is not None:
        query = query.filter(Order.status == status)
    total: int = query.with_entities(func.count(Order.id)).scalar() or 0
    orders = (
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return orders, total


def list_kitchen_orders(db: Session, ctx: RestaurantContext, *, now: datetime | None = None) -> list[KitchenOrderResponse]:
    """Return the kitchen board: open and recently completed orders, newest first."""
    ensure_role(ctx, STAFF_ROLES)
    now = now or utcnow()
    rows = (
        db.query(Order, RestaurantTable.table_number)
        .join(RestaurantTable, RestaurantTable.id == Order.table_id)
        .filter(Order.restaurant_id == ctx.restaurant_id, Order.status.in_(KITCHEN_STATUSES))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(KITCHEN_BOARD_LIMIT)
        .all()
    )

    board: list[KitchenOrderResponse] = []
    for order, table_number in rows:
        created_at = as_utc(order.created_at)
        minutes_ago = max(0, int((now - created_at).total_seconds() // 60))
        board.append(
            KitchenOrderResponse(
                id=order.id,
                table=str(table_number),
                status=order.status,
                created_at=created_at,
                minutes_ago=minutes_ago,
                notes=order.notes,
                items=[KitchenOrderItem(name=item.name, qty=item.qty) for item in order.items if item.qty > 0],
            )
        )
    return board

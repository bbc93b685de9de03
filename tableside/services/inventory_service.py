"""Inventory ledger: ingredient stock, recipes and the append-only transaction log.

Every change to ``Ingredient.current_quantity`` is paired with exactly one
``InventoryTransaction`` row in the same database transaction, so the stored
quantity always equals the sum of its transaction deltas.

Quantity changes are single conditional UPDATE statements
(``SET q = q + delta WHERE q + delta >= 0``), which the database applies
atomically per row. Two concurrent adjustments therefore serialize instead of
both reading the same "before" value. Guard and written value are rounded to
the column scale in SQL because SQLite keeps ``Numeric`` values as floats.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from tableside.auth import OWNER_ROLES, RestaurantContext, ensure_role
from tableside.db.session import atomic
from tableside.models.inventory import Ingredient, InventoryTransaction, MenuItemIngredient
from tableside.models.menu import MenuItem
from tableside.schemas.inventory import RecipeRowPayload
from tableside.services.errors import (
    ConcurrentUpdateError,
    IngredientNotFoundError,
    IngredientRestaurantMismatchError,
    InsufficientStockError,
    MenuItemNotFoundError,
    NegativeQuantityError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MANUAL_REASONS: frozenset[str] = frozenset({"restock", "adjustment"})
ORDER_CONSUMPTION = "order-consumption"
ZERO = Decimal("0")
QUANTITY_STEP = Decimal("0.001")


def _clean_text(field: str, value: str | None, max_length: int) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(field, "must not be empty")
    if len(cleaned) > max_length:
        raise ValidationError(field, f"must be at most {max_length} characters")
    return cleaned


def _non_negative(field: str, value: Any) -> Decimal:
    try:
        parsed = Decimal(str(value))
    except ArithmeticError as exc:
        raise ValidationError(field, "must be a number") from exc
    if not parsed.is_finite() or parsed < 0:
        raise ValidationError(field, "must be a non-negative number")
    return parsed.quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)


def _rounded(expression: Any) -> Any:
    """Round a quantity expression to the column scale inside the database."""
    return func.round(expression, 3)


def get_ingredient(db: Session, ctx: RestaurantContext, ingredient_id: int) -> Ingredient:
    """Return one ingredient of the caller's restaurant."""
    ingredient: Ingredient | None = (
        db.query(Ingredient)
        .filter(Ingredient.id == ingredient_id, Ingredient.restaurant_id == ctx.restaurant_id)
        .first()
    )
    if ingredient is None:
        raise IngredientNotFoundError("Ingredient not found")
    return ingredient


def list_ingredients(db: Session, ctx: RestaurantContext) -> list[Ingredient]:
    """Return all ingredients of the caller's restaurant ordered by name."""
    return (
        db.query(Ingredient)
        .filter(Ingredient.restaurant_id == ctx.restaurant_id)
        .order_by(Ingredient.name.asc(), Ingredient.id.asc())
        .all()
    )


def list_low_stock(db: Session, ctx: RestaurantContext) -> list[Ingredient]:
    """Return ingredients at or below their minimum threshold."""
    return (
        db.query(Ingredient)
        .filter(
            Ingredient.restaurant_id == ctx.restaurant_id,
            Ingredient.current_quantity <= Ingredient.min_threshold,
        )
        .order_by(Ingredient.name.asc(), Ingredient.id.asc())
        .all()
    )


def list_transactions(
    db: Session,
    ctx: RestaurantContext,
    *,
    ingredient_id: int | None = None,
    limit: int = 100,
) -> list[InventoryTransaction]:
    """Return newest-first stock transactions, optionally for one ingredient."""
    query = db.query(InventoryTransaction).filter(InventoryTransaction.restaurant_id == ctx.restaurant_id)
    if ingredient_id is not None:
        query = query.filter(InventoryTransaction.ingredient_id == ingredient_id)
    return query.order_by(InventoryTransaction.id.desc()).limit(limit).all()


def folded_quantity(db: Session, ingredient_id: int) -> Decimal:
    """Rebuild an ingredient's quantity by summing its transaction log."""
    total = db.scalar(
        select(func.coalesce(func.sum(InventoryTransaction.delta), 0)).where(
            InventoryTransaction.ingredient_id == ingredient_id
        )
    )
    return Decimal(str(total)).quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)


def create_ingredient(
    db: Session,
    ctx: RestaurantContext,
    *,
    name: str,
    unit: str,
    current_quantity: Decimal = ZERO,
    min_threshold: Decimal = ZERO,
    cost_per_unit: Decimal | None = None,
) -> Ingredient:
    """Create an ingredient; a non-zero opening quantity is logged as an adjustment."""
    ensure_role(ctx, OWNER_ROLES)
    ingredient = Ingredient(
        restaurant_id=ctx.restaurant_id,
        name=_clean_text("name", name, 120),
        unit=_clean_text("unit", unit, 20),
        current_quantity=_non_negative("current_quantity", current_quantity),
        min_threshold=_non_negative("min_threshold", min_threshold),
        cost_per_unit=_non_negative("cost_per_unit", cost_per_unit) if cost_per_unit is not None else None,
    )
    with atomic(db, "create ingredient"):
        db.add(ingredient)
        db.flush()
        if ingredient.current_quantity > 0:
            db.add(
                InventoryTransaction(
                    restaurant_id=ctx.restaurant_id,
                    ingredient_id=ingredient.id,
                    delta=ingredient.current_quantity,
                    reason="adjustment",
                    note="Opening stock",
                )
            )
    db.refresh(ingredient)
    logger.info("[INVENTORY] Created ingredient id=%s restaurant_id=%s", ingredient.id, ctx.restaurant_id)
    return ingredient


def update_ingredient(db: Session, ctx: RestaurantContext, ingredient_id: int, changes: dict[str, Any]) -> Ingredient:
    """Apply a partial update.

    A new ``current_quantity`` is written guarded on the observed quantity and
    the difference is logged as an adjustment.
    """
    ensure_role(ctx, OWNER_ROLES)
    ingredient = get_ingredient(db, ctx, ingredient_id)

    with atomic(db, "update ingredient"):
        if "name" in changes:
            ingredient.name = _clean_text("name", changes["name"], 120)
        if "unit" in changes:
            ingredient.unit = _clean_text("unit", changes["unit"], 20)
        if "min_threshold" in changes:
            ingredient.min_threshold = _non_negative("min_threshold", changes["min_threshold"])
        if "cost_per_unit" in changes:
            value = changes["cost_per_unit"]
            ingredient.cost_per_unit = _non_negative("cost_per_unit", value) if value is not None else None
        db.flush()

        if changes.get("current_quantity") is not None:
            target = _non_negative("current_quantity", changes["current_quantity"])
            observed = Decimal(ingredient.current_quantity)
            delta = target - observed
            if delta != 0:
                result = db.execute(
                    update(Ingredient)
                    .where(Ingredient.id == ingredient.id, _rounded(Ingredient.current_quantity) == observed)
                    .values(current_quantity=target)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise ConcurrentUpdateError("Ingredient stock changed concurrently, retry the update")
                db.add(
                    InventoryTransaction(
                        restaurant_id=ctx.restaurant_id,
                        ingredient_id=ingredient.id,
                        delta=delta,
                        reason="adjustment",
                        note="Quantity edited",
                    )
                )
    db.refresh(ingredient)
    return ingredient


def delete_ingredient(db: Session, ctx: RestaurantContext, ingredient_id: int) -> None:
    """Delete an ingredient and its recipe rows; its transaction history stays."""
    ensure_role(ctx, OWNER_ROLES)
    ingredient = get_ingredient(db, ctx, ingredient_id)
    with atomic(db, "delete ingredient"):
        db.query(MenuItemIngredient).filter(MenuItemIngredient.ingredient_id == ingredient.id).delete(
            synchronize_session=False
        )
        db.delete(ingredient)
    logger.info("[INVENTORY] Deleted ingredient id=%s restaurant_id=%s", ingredient_id, ctx.restaurant_id)


def _apply_delta(db: Session, *, restaurant_id: int, ingredient_id: int, delta: Decimal) -> bool:
    """Conditionally move stock by ``delta``; return False when the row is missing or would go negative."""
    result = db.execute(
        update(Ingredient)
        .where(
            Ingredient.id == ingredient_id,
            Ingredient.restaurant_id == restaurant_id,
            _rounded(Ingredient.current_quantity + delta) >= 0,
        )
        .values(current_quantity=_rounded(Ingredient.current_quantity + delta))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def adjust_stock(
    db: Session,
    ctx: RestaurantContext,
    *,
    ingredient_id: int,
    delta: Decimal,
    reason: str,
    note: str | None = None,
) -> Ingredient:
    """Atomically move stock and log exactly one transaction row."""
    ensure_role(ctx, OWNER_ROLES)
    if reason not in MANUAL_REASONS:
        raise ValidationError("reason", "must be one of: restock, adjustment")
    try:
        delta = Decimal(str(delta))
    except ArithmeticError as exc:
        raise ValidationError("delta", "must be a number") from exc
    if delta.is_finite():
        delta = delta.quantize(QUANTITY_STEP, rounding=ROUND_HALF_UP)
    if not delta.is_finite() or delta == 0:
        raise ValidationError("delta", "must be a non-zero number")
    if note is not None and len(note) > 200:
        raise ValidationError("note", "must be at most 200 characters")

    with atomic(db, "adjust stock"):
        if not _apply_delta(db, restaurant_id=ctx.restaurant_id, ingredient_id=ingredient_id, delta=delta):
            # Classify the rejected write; nothing has been changed.
            get_ingredient(db, ctx, ingredient_id)
            logger.info("[INVENTORY] Rejected adjustment ingredient_id=%s delta=%s", ingredient_id, delta)
            raise NegativeQuantityError("Quantity cannot go below 0")
        db.add(
            InventoryTransaction(
                restaurant_id=ctx.restaurant_id,
                ingredient_id=ingredient_id,
                delta=delta,
                reason=reason,
                note=note,
            )
        )

    ingredient = get_ingredient(db, ctx, ingredient_id)
    db.refresh(ingredient)
    return ingredient


def get_recipe(db: Session, ctx: RestaurantContext, menu_item_id: int) -> list[MenuItemIngredient]:
    """Return the recipe rows of one menu item."""
    _get_menu_item(db, ctx, menu_item_id)
    return (
        db.query(MenuItemIngredient)
        .filter(
            MenuItemIngredient.menu_item_id == menu_item_id,
            MenuItemIngredient.restaurant_id == ctx.restaurant_id,
        )
        .order_by(MenuItemIngredient.id.asc())
        .all()
    )


def _get_menu_item(db: Session, ctx: RestaurantContext, menu_item_id: int) -> MenuItem:
    menu_item: MenuItem | None = (
        db.query(MenuItem)
        .filter(MenuItem.id == menu_item_id, MenuItem.restaurant_id == ctx.restaurant_id)
        .first()
    )
    if menu_item is None:
        raise MenuItemNotFoundError("Menu item not found")
    return menu_item


def upsert_recipe(
    db: Session,
    ctx: RestaurantContext,
    *,
    menu_item_id: int,
    rows: Sequence[RecipeRowPayload],
) -> list[MenuItemIngredient]:
    """Replace a menu item's full recipe in one transaction.

    All references are checked before the old rows are touched, and the delete
    and insert commit together, so a failure leaves the previous recipe intact.
    """
    ensure_role(ctx, OWNER_ROLES)
    seen: set[int] = set()
    for index, row in enumerate(rows):
        if Decimal(row.quantity_per_item) <= 0:
            raise ValidationError(f"rows[{index}].quantity_per_item", "must be greater than 0")
        if row.ingredient_id in seen:
            raise ValidationError(f"rows[{index}].ingredient_id", "duplicate ingredient in recipe")
        seen.add(row.ingredient_id)

    _get_menu_item(db, ctx, menu_item_id)

    if seen:
        found: dict[int, Ingredient] = {
            ingredient.id: ingredient
            for ingredient in db.query(Ingredient).filter(Ingredient.id.in_(seen)).all()
        }
        for ingredient_id in sorted(seen):
            ingredient = found.get(ingredient_id)
            if ingredient is None:
                raise IngredientNotFoundError(f"Ingredient {ingredient_id} not found")
            if ingredient.restaurant_id != ctx.restaurant_id:
                raise IngredientRestaurantMismatchError(
                    f"Ingredient {ingredient_id} does not belong to your restaurant"
                )

    with atomic(db, "save recipe"):
        db.query(MenuItemIngredient).filter(
            MenuItemIngredient.menu_item_id == menu_item_id,
            MenuItemIngredient.restaurant_id == ctx.restaurant_id,
        ).delete(synchronize_session=False)
        for row in rows:
            db.add(
                MenuItemIngredient(
                    restaurant_id=ctx.restaurant_id,
                    menu_item_id=menu_item_id,
                    ingredient_id=row.ingredient_id,
                    quantity_per_item=Decimal(row.quantity_per_item),
                )
            )

    return get_recipe(db, ctx, menu_item_id)


def required_ingredients(
    db: Session,
    *,
    restaurant_id: int,
    lines: Iterable[tuple[int | None, int]],
) -> dict[int, Decimal]:
    """Aggregate ingredient needs for ``(menu_item_id, qty)`` lines."""
    qty_by_item: dict[int, int] = {}
    for menu_item_id, qty in lines:
        if menu_item_id is None:
            continue
        qty_by_item[menu_item_id] = qty_by_item.get(menu_item_id, 0) + qty
    if not qty_by_item:
        return {}

    recipe_rows: list[MenuItemIngredient] = (
        db.query(MenuItemIngredient)
        .filter(
            MenuItemIngredient.restaurant_id == restaurant_id,
            MenuItemIngredient.menu_item_id.in_(qty_by_item.keys()),
        )
        .all()
    )
    needs: dict[int, Decimal] = {}
    for row in recipe_rows:
        amount = Decimal(row.quantity_per_item) * qty_by_item[row.menu_item_id]
        needs[row.ingredient_id] = needs.get(row.ingredient_id, ZERO) + amount
    return needs


def consume_for_order(
    db: Session,
    *,
    restaurant_id: int,
    order_id: int,
    lines: Iterable[tuple[int | None, int]],
) -> dict[int, Decimal]:
    """Deduct recipe ingredients for an order inside the caller's transaction.

    Does not commit. Any shortfall raises InsufficientStockError and the caller
    must roll back, which also undoes the deductions already applied here.
    Ingredients are decremented in id order so concurrent orders lock rows in
    the same sequence.
    """
    needs = required_ingredients(db, restaurant_id=restaurant_id, lines=lines)
    for ingredient_id in sorted(needs):
        needed = needs[ingredient_id]
        if not _apply_delta(db, restaurant_id=restaurant_id, ingredient_id=ingredient_id, delta=-needed):
            ingredient: Ingredient | None = db.get(Ingredient, ingredient_id, populate_existing=True)
            if ingredient is None:
                raise IngredientNotFoundError(f"Ingredient {ingredient_id} not found")
            logger.info(
                "[INVENTORY] Insufficient stock order_id=%s ingredient_id=%s needed=%s available=%s",
                order_id,
                ingredient_id,
                needed,
                ingredient.current_quantity,
            )
            raise InsufficientStockError(
                ingredient.name,
                ingredient.id,
                Decimal(ingredient.current_quantity),
                needed,
                ingredient.unit,
            )
        db.add(
            InventoryTransaction(
                restaurant_id=restaurant_id,
                ingredient_id=ingredient_id,
                delta=-needed,
                reason=ORDER_CONSUMPTION,
                order_id=order_id,
            )
        )
    return needs

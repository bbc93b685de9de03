"""Inventory ledger ORM models: ingredients, recipes and stock transactions."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tableside.db.base import Base


class Ingredient(Base):
    """Stocked ingredient; current_quantity is a cache of the summed transaction deltas."""

    __tablename__ = "ingredients"
    __table_args__ = (
        CheckConstraint("current_quantity >= 0", name="ck_ingredients_quantity_non_negative"),
        CheckConstraint("min_threshold >= 0", name="ck_ingredients_threshold_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    current_quantity: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False, default=Decimal("0"))
    min_threshold: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False, default=Decimal("0"))
    cost_per_unit: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class MenuItemIngredient(Base):
    """One recipe row: how much of an ingredient a single menu item consumes."""

    __tablename__ = "menu_item_ingredients"
    __table_args__ = (
        UniqueConstraint("menu_item_id", "ingredient_id", name="uq_recipe_menu_item_ingredient"),
        CheckConstraint("quantity_per_item > 0", name="ck_recipe_quantity_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id"), nullable=False, index=True)
    menu_item_id: Mapped[int] = mapped_column(ForeignKey("menu_items.id"), nullable=False, index=True)
    ingredient_id: Mapped[int] = mapped_column(ForeignKey("ingredients.id"), nullable=False)
    quantity_per_item: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)


class InventoryTransaction(Base):
    """Append-only stock movement.

    ingredient_id is a plain column so deleting an ingredient leaves history untouched.
    """

    __tablename__ = "inventory_transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id"), nullable=False, index=True)
    ingredient_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    delta: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    reason: Mapped[str] = mapped_column(String(32), nullable=False)
    order_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    note: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

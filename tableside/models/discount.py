"""Discount rule ORM model."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from tableside.db.base import Base

DISCOUNT_TYPES = ("percentage", "fixed", "category", "item", "time")
DISCOUNT_SCOPES = ("all", "category", "item")


class Discount(Base):
    """Restaurant discount rule; only "fixed" is an amount, every other type is a percentage."""

    __tablename__ = "discounts"
    __table_args__ = (
        CheckConstraint("discount_value > 0", name="ck_discounts_value_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(ForeignKey("restaurants.id"), nullable=False, index=True)
    discount_type: Mapped[str] = mapped_column(String(16), nullable=False)
    discount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    apply_to: Mapped[str] = mapped_column(String(16), nullable=False, default="all")
    category_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    item_id: Mapped[int | None] = mapped_column(ForeignKey("menu_items.id"), nullable=True)
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

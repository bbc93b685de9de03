"""Discount API schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DiscountType = Literal["percentage", "fixed", "category", "item", "time"]
DiscountScope = Literal["all", "category", "item"]


class DiscountCreate(BaseModel):
    """Payload for creating a discount rule."""

    discount_type: DiscountType
    discount_value: Decimal = Field(gt=0)
    apply_to: DiscountScope = "all"
    category_id: str | None = Field(default=None, max_length=64)
    item_id: int | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    is_active: bool = True


class DiscountUpdate(BaseModel):
    """Partial discount edit."""

    discount_value: Decimal | None = Field(default=None, gt=0)
    start_time: datetime | None = None
    end_time: datetime | None = None
    is_active: bool | None = None


class DiscountResponse(BaseModel):
    """Serialized discount rule."""

    id: int
    discount_type: str
    discount_value: Decimal
    apply_to: str
    category_id: str | None
    item_id: int | None
    start_time: datetime | None
    end_time: datetime | None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)

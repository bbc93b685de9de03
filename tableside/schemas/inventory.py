"""Inventory API schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class IngredientCreate(BaseModel):
    """Payload for creating an ingredient."""

    name: str = Field(min_length=1, max_length=120)
    unit: str = Field(min_length=1, max_length=20)
    current_quantity: Decimal = Field(default=Decimal("0"), ge=0)
    min_threshold: Decimal = Field(default=Decimal("0"), ge=0)
    cost_per_unit: Decimal | None = Field(default=None, ge=0)


class IngredientUpdate(BaseModel):
    """Partial ingredient update; only fields that are sent are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=120)
    unit: str | None = Field(default=None, min_length=1, max_length=20)
    current_quantity: Decimal | None = Field(default=None, ge=0)
    min_threshold: Decimal | None = Field(default=None, ge=0)
    cost_per_unit: Decimal | None = Field(default=None, ge=0)


class IngredientResponse(BaseModel):
    """Serialized ingredient."""

    id: int
    name: str
    unit: str
    current_quantity: Decimal
    min_threshold: Decimal
    cost_per_unit: Decimal | None

    model_config = ConfigDict(from_attributes=True)


class StockAdjustmentRequest(BaseModel):
    """Manual stock movement."""

    delta: Decimal
    reason: Literal["restock", "adjustment"]
    note: str | None = Field(default=None, max_length=200)


class RecipeRowPayload(BaseModel):
    """One ingredient line of a menu item recipe."""

    ingredient_id: int
    quantity_per_item: Decimal = Field(gt=0)


class RecipeUpsertRequest(BaseModel):
    """Full replacement recipe for a menu item."""

    rows: list[RecipeRowPayload]


class RecipeRowResponse(BaseModel):
    ingredient_id: int
    quantity_per_item: Decimal

    model_config = ConfigDict(from_attributes=True)


class InventoryTransactionResponse(BaseModel):
    """Serialized stock transaction."""

    id: int
    ingredient_id: int
    delta: Decimal
    reason: str
    order_id: int | None
    note: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

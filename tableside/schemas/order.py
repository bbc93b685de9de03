"""Order and pricing API schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class CartItemPayload(BaseModel):
    """Single cart line; the price always comes from the menu, never the client."""

    menu_item_id: int
    qty: int = Field(default=1, ge=1)


class PricingPreviewRequest(BaseModel):
    """Cart to price for a table."""

    table_id: int
    items: list[CartItemPayload] = Field(min_length=1)


class PricingPreviewResponse(BaseModel):
    """Customer-facing price preview."""

    subtotal: Decimal
    discount: Decimal
    total: Decimal


class OrderCreate(BaseModel):
    """Customer order placement payload."""

    table_id: int
    items: list[CartItemPayload] = Field(min_length=1)
    customer_name: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=500)


class OrderCreatedResponse(BaseModel):
    order_id: int
    status: str
    total: Decimal


class OrderStatusUpdate(BaseModel):
    """Owner or kitchen status change."""

    status: Literal["preparing", "completed", "cancelled"]


class OrderItemResponse(BaseModel):
    """Serialized order line snapshot."""

    menu_item_id: int | None
    name: str
    unit_price: Decimal
    qty: int
    line_total: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Serialized order with its stored pricing."""

    id: int
    restaurant_id: int
    table_id: int
    customer_name: str | None
    notes: str | None
    status: str
    subtotal_amount: Decimal
    discount_amount: Decimal
    discount_id: int | None
    vat_amount: Decimal
    tip_amount: Decimal
    total_amount: Decimal
    commission_rate: Decimal
    commission_amount: Decimal
    created_at: datetime
    status_updated_at: datetime | None
    items: list[OrderItemResponse]

    model_config = ConfigDict(from_attributes=True)


class PublicOrderStatusResponse(BaseModel):
    """What a customer at the table may see about their order."""

    id: int
    status: str
    total_amount: Decimal
    created_at: datetime
    items: list[OrderItemResponse]

    model_config = ConfigDict(from_attributes=True)


class KitchenOrderItem(BaseModel):
    name: str
    qty: int


class KitchenOrderResponse(BaseModel):
    """Kitchen board card."""

    id: int
    table: str
    status: str
    created_at: datetime
    minutes_ago: int
    notes: str | None
    items: list[KitchenOrderItem]

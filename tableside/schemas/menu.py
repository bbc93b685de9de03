"""Menu API schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class MenuItemCreate(BaseModel):
    """Payload for creating a menu item."""

    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    price: Decimal = Field(gt=0)
    category: str | None = Field(default=None, max_length=64)
    is_available: bool = True


class MenuItemUpdate(BaseModel):
    """Partial menu item edit."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    price: Decimal | None = Field(default=None, gt=0)
    category: str | None = Field(default=None, max_length=64)
    is_available: bool | None = None


class MenuItemResponse(BaseModel):
    """Serialized menu item."""

    id: int
    name: str
    description: str | None
    price: Decimal
    category: str | None
    is_available: bool

    model_config = ConfigDict(from_attributes=True)

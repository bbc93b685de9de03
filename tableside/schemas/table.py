"""Dining table API schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TableStatus = Literal["available", "occupied"]


class TableCreate(BaseModel):
    """Payload for adding a dining table."""

    table_number: str = Field(min_length=1, max_length=32)
    capacity: int = Field(default=4, gt=0)
    location: str | None = Field(default=None, max_length=64)


class TableUpdate(BaseModel):
    """Seating status or active flag change."""

    status: TableStatus | None = None
    is_active: bool | None = None


class TableResponse(BaseModel):
    id: int
    table_number: str
    capacity: int
    location: str | None
    status: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)

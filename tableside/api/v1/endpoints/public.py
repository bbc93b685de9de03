"""Customer-facing endpoints reached from a table QR code; no login required."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tableside.db.session import get_db
from tableside.schemas.menu import MenuItemResponse
from tableside.schemas.order import (
    OrderCreate,
    OrderCreatedResponse,
    PricingPreviewRequest,
    PricingPreviewResponse,
    PublicOrderStatusResponse,
)
from tableside.services.menu_service import list_menu_for_table
from tableside.services.order_pricing import preview_order_pricing
from tableside.services.order_service import get_public_order, place_order

router: APIRouter = APIRouter()


@router.get("/tables/{table_id}/menu", response_model=list[MenuItemResponse])
def table_menu(table_id: int, db: Session = Depends(get_db)) -> list[MenuItemResponse]:
    return [MenuItemResponse.model_validate(item) for item in list_menu_for_table(db, table_id)]


@router.post("/pricing/preview", response_model=PricingPreviewResponse)
def pricing_preview(payload: PricingPreviewRequest, db: Session = Depends(get_db)) -> PricingPreviewResponse:
    """Price a cart without placing it."""
    return preview_order_pricing(db, table_id=payload.table_id, items=payload.items)


@router.post("/orders", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreate, db: Session = Depends(get_db)) -> OrderCreatedResponse:
    order = place_order(
        db,
        table_id=payload.table_id,
        items=payload.items,
        customer_name=payload.customer_name,
        notes=payload.notes,
    )
    return OrderCreatedResponse(order_id=order.id, status=order.status, total=order.total_amount)


@router.get("/orders/{order_id}", response_model=PublicOrderStatusResponse)
def order_status(
    order_id: int,
    table_id: int = Query(...),
    db: Session = Depends(get_db),
) -> PublicOrderStatusResponse:
    order = get_public_order(db, table_id=table_id, order_id=order_id)
    return PublicOrderStatusResponse.model_validate(order)

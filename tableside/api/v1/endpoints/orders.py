"""Staff order endpoints: listing, status changes, cancellation and the kitchen board."""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from tableside.auth import RestaurantContext
from tableside.core.security import get_restaurant_context
from tableside.db.session import get_db
from tableside.schemas.order import KitchenOrderResponse, OrderResponse, OrderStatusUpdate
from tableside.services import order_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[OrderResponse])
def read_orders(
    response: Response,
    status: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_restaurant_context),
) -> list[OrderResponse]:
    orders, total = order_service.list_orders(db, ctx, status=status, page=page, page_size=page_size)
    response.headers["X-Total-Count"] = str(total)
    return [OrderResponse.model_validate(order) for order in orders]


@router.get("/kitchen", response_model=list[KitchenOrderResponse])
def kitchen_board(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_restaurant_context),
) -> list[KitchenOrderResponse]:
    return order_service.list_kitchen_orders(db, ctx)


@router.get("/{order_id}", response_model=OrderResponse)
def read_order(
    order_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_restaurant_context),
) -> OrderResponse:
    return OrderResponse.model_validate(order_service.get_order(db, ctx, order_id))


@router.post("/{order_id}/status", response_model=OrderResponse)
def change_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_restaurant_context),
) -> OrderResponse:
    order = order_service.advance_order_status(db, ctx, order_id, payload.status)
    return OrderResponse.model_validate(order)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_restaurant_context),
) -> OrderResponse:
    return OrderResponse.model_validate(order_service.cancel_order(db, ctx, order_id))

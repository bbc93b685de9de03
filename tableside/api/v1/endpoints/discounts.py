"""Discount management endpoints."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from tableside.auth import RestaurantContext
from tableside.core.security import get_owner_context
from tableside.db.session import get_db
from tableside.schemas.discount import DiscountCreate, DiscountResponse, DiscountUpdate
from tableside.services import discount_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[DiscountResponse])
def read_discounts(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> list[DiscountResponse]:
    return [DiscountResponse.model_validate(row) for row in discount_service.list_discounts(db, ctx)]


@router.post("", response_model=DiscountResponse, status_code=status.HTTP_201_CREATED)
def add_discount(
    payload: DiscountCreate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> DiscountResponse:
    discount = discount_service.create_discount(db, ctx, **payload.model_dump())
    return DiscountResponse.model_validate(discount)


@router.patch("/{discount_id}", response_model=DiscountResponse)
def edit_discount(
    discount_id: int,
    payload: DiscountUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> DiscountResponse:
    discount = discount_service.update_discount(db, ctx, discount_id, payload.model_dump(exclude_unset=True))
    return DiscountResponse.model_validate(discount)


@router.delete("/{discount_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_discount(
    discount_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> Response:
    discount_service.delete_discount(db, ctx, discount_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

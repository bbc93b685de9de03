"""Menu management endpoints for restaurant staff."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from tableside.auth import RestaurantContext
from tableside.core.security import get_owner_context
from tableside.db.session import get_db
from tableside.schemas.menu import MenuItemCreate, MenuItemResponse, MenuItemUpdate
from tableside.services.menu_service import create_menu_item, delete_menu_item, list_menu_items, update_menu_item

router: APIRouter = APIRouter()


@router.get("/items", response_model=list[MenuItemResponse])
def read_menu_items(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> list[MenuItemResponse]:
    return [MenuItemResponse.model_validate(item) for item in list_menu_items(db, ctx)]


@router.post("/items", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
def add_menu_item(
    payload: MenuItemCreate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> MenuItemResponse:
    item = create_menu_item(db, ctx, **payload.model_dump())
    return MenuItemResponse.model_validate(item)


@router.patch("/items/{menu_item_id}", response_model=MenuItemResponse)
def edit_menu_item(
    menu_item_id: int,
    payload: MenuItemUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> MenuItemResponse:
    item = update_menu_item(db, ctx, menu_item_id, payload.model_dump(exclude_unset=True))
    return MenuItemResponse.model_validate(item)


@router.delete("/items/{menu_item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_menu_item(
    menu_item_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> Response:
    delete_menu_item(db, ctx, menu_item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

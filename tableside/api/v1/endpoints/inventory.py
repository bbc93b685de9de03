"""Inventory ledger endpoints: ingredients, stock movements and recipes."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from tableside.auth import RestaurantContext
from tableside.core.security import get_owner_context
from tableside.db.session import get_db
from tableside.schemas.inventory import (
    IngredientCreate,
    IngredientResponse,
    IngredientUpdate,
    InventoryTransactionResponse,
    RecipeRowResponse,
    RecipeUpsertRequest,
    StockAdjustmentRequest,
)
from tableside.services import inventory_service

router: APIRouter = APIRouter()


@router.get("/ingredients", response_model=list[IngredientResponse])
def read_ingredients(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> list[IngredientResponse]:
    return [IngredientResponse.model_validate(row) for row in inventory_service.list_ingredients(db, ctx)]


@router.post("/ingredients", response_model=IngredientResponse, status_code=status.HTTP_201_CREATED)
def add_ingredient(
    payload: IngredientCreate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> IngredientResponse:
    ingredient = inventory_service.create_ingredient(db, ctx, **payload.model_dump())
    return IngredientResponse.model_validate(ingredient)


@router.get("/ingredients/{ingredient_id}", response_model=IngredientResponse)
def read_ingredient(
    ingredient_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> IngredientResponse:
    return IngredientResponse.model_validate(inventory_service.get_ingredient(db, ctx, ingredient_id))


@router.patch("/ingredients/{ingredient_id}", response_model=IngredientResponse)
def edit_ingredient(
    ingredient_id: int,
    payload: IngredientUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> IngredientResponse:
    ingredient = inventory_service.update_ingredient(db, ctx, ingredient_id, payload.model_dump(exclude_unset=True))
    return IngredientResponse.model_validate(ingredient)


@router.delete("/ingredients/{ingredient_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_ingredient(
    ingredient_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> Response:
    inventory_service.delete_ingredient(db, ctx, ingredient_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/ingredients/{ingredient_id}/adjust", response_model=IngredientResponse)
def adjust_ingredient_stock(
    ingredient_id: int,
    payload: StockAdjustmentRequest,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> IngredientResponse:
    ingredient = inventory_service.adjust_stock(
        db,
        ctx,
        ingredient_id=ingredient_id,
        delta=payload.delta,
        reason=payload.reason,
        note=payload.note,
    )
    return IngredientResponse.model_validate(ingredient)


@router.get("/low-stock", response_model=list[IngredientResponse])
def read_low_stock(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> list[IngredientResponse]:
    return [IngredientResponse.model_validate(row) for row in inventory_service.list_low_stock(db, ctx)]


@router.get("/transactions", response_model=list[InventoryTransactionResponse])
def read_transactions(
    ingredient_id: int | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> list[InventoryTransactionResponse]:
    rows = inventory_service.list_transactions(db, ctx, ingredient_id=ingredient_id, limit=limit)
    return [InventoryTransactionResponse.model_validate(row) for row in rows]


@router.get("/recipes/{menu_item_id}", response_model=list[RecipeRowResponse])
def read_recipe(
    menu_item_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> list[RecipeRowResponse]:
    return [RecipeRowResponse.model_validate(row) for row in inventory_service.get_recipe(db, ctx, menu_item_id)]


@router.put("/recipes/{menu_item_id}", response_model=list[RecipeRowResponse])
def replace_recipe(
    menu_item_id: int,
    payload: RecipeUpsertRequest,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> list[RecipeRowResponse]:
    rows = inventory_service.upsert_recipe(db, ctx, menu_item_id=menu_item_id, rows=payload.rows)
    return [RecipeRowResponse.model_validate(row) for row in rows]

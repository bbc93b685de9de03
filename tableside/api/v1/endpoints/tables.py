"""Dining table management endpoints."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from tableside.auth import RestaurantContext
from tableside.core.security import get_owner_context
from tableside.db.session import get_db
from tableside.schemas.table import TableCreate, TableResponse, TableUpdate
from tableside.services import table_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[TableResponse])
def read_tables(
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> list[TableResponse]:
    return [TableResponse.model_validate(table) for table in table_service.list_tables(db, ctx)]


@router.post("", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
def add_table(
    payload: TableCreate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> TableResponse:
    table = table_service.create_table(db, ctx, **payload.model_dump())
    return TableResponse.model_validate(table)


@router.patch("/{table_id}", response_model=TableResponse)
def edit_table(
    table_id: int,
    payload: TableUpdate,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> TableResponse:
    table = table_service.update_table(db, ctx, table_id, payload.model_dump(exclude_unset=True))
    return TableResponse.model_validate(table)


@router.delete("/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_table(
    table_id: int,
    db: Session = Depends(get_db),
    ctx: RestaurantContext = Depends(get_owner_context),
) -> Response:
    table_service.delete_table(db, ctx, table_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tableside.api.v1.api import api_router
from tableside.core.config import settings
from tableside.db import session as db_session
from tableside.db.base import Base
from tableside.services.errors import (
    CannotCancelCompletedError,
    ConcurrentUpdateError,
    IngredientRestaurantMismatchError,
    InsufficientStockError,
    InvalidStatusTransitionError,
    ItemUnavailableError,
    NegativeQuantityError,
    NotFoundError,
    SettlementError,
    StoreError,
    TableHasOrdersError,
    UnauthorizedError,
    ValidationError,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: tuple[tuple[type[SettlementError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ItemUnavailableError, status.HTTP_400_BAD_REQUEST),
    (IngredientRestaurantMismatchError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (NegativeQuantityError, status.HTTP_409_CONFLICT),
    (InsufficientStockError, status.HTTP_409_CONFLICT),
    (CannotCancelCompletedError, status.HTTP_409_CONFLICT),
    (InvalidStatusTransitionError, status.HTTP_409_CONFLICT),
    (ConcurrentUpdateError, status.HTTP_409_CONFLICT),
    (TableHasOrdersError, status.HTTP_409_CONFLICT),
    (StoreError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)

app = FastAPI(title=settings.app_name)
app.include_router(api_router, prefix="/api/v1")


def status_code_for(exc: SettlementError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(SettlementError)
async def settlement_error_handler(request: Request, exc: SettlementError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        detail = "Internal error, please retry"
    else:
        detail = exc.message
        logger.info("[API] %s %s rejected: %s", request.method, request.url.path, exc.code)
    payload: dict[str, object] = {"detail": detail, "code": exc.code}
    if isinstance(exc, ValidationError):
        payload["field"] = exc.field
    if isinstance(exc, InsufficientStockError):
        payload["ingredient"] = exc.ingredient_name
    return JSONResponse(status_code=status_code, content=payload)


@app.on_event("startup")
def startup() -> None:
    Base.metadata.create_all(bind=db_session.engine)
    logger.info("[BOOTSTRAP] %s started (env=%s)", settings.app_name, settings.app_env)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}

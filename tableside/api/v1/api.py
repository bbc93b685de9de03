"""API v1 router composition."""

from fastapi import APIRouter

from tableside.api.v1.endpoints import auth, discounts, inventory, menu, orders, public, tables

api_router: APIRouter = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(public.router, prefix="/public", tags=["public"])
api_router.include_router(menu.router, prefix="/menu", tags=["menu"])
api_router.include_router(tables.router, prefix="/tables", tags=["tables"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(discounts.router, prefix="/discounts", tags=["discounts"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])

"""Schema exports."""

from tableside.schemas.auth import AuthUserResponse, LoginRequest, TokenResponse
from tableside.schemas.discount import DiscountCreate, DiscountResponse, DiscountUpdate
from tableside.schemas.inventory import (
    IngredientCreate,
    IngredientResponse,
    IngredientUpdate,
    InventoryTransactionResponse,
    RecipeRowPayload,
    RecipeRowResponse,
    RecipeUpsertRequest,
    StockAdjustmentRequest,
)
from tableside.schemas.menu import MenuItemCreate, MenuItemResponse, MenuItemUpdate
from tableside.schemas.order import (
    CartItemPayload,
    KitchenOrderResponse,
    OrderCreate,
    OrderCreatedResponse,
    OrderItemResponse,
    OrderResponse,
    OrderStatusUpdate,
    PricingPreviewRequest,
    PricingPreviewResponse,
    PublicOrderStatusResponse,
)
from tableside.schemas.table import TableCreate, TableResponse, TableUpdate

__all__ = [
    "AuthUserResponse",
    "LoginRequest",
    "TokenResponse",
    "DiscountCreate",
    "DiscountResponse",
    "DiscountUpdate",
    "IngredientCreate",
    "IngredientResponse",
    "IngredientUpdate",
    "InventoryTransactionResponse",
    "RecipeRowPayload",
    "RecipeRowResponse",
    "RecipeUpsertRequest",
    "StockAdjustmentRequest",
    "MenuItemCreate",
    "MenuItemResponse",
    "MenuItemUpdate",
    "CartItemPayload",
    "KitchenOrderResponse",
    "OrderCreate",
    "OrderCreatedResponse",
    "OrderItemResponse",
    "OrderResponse",
    "OrderStatusUpdate",
    "PricingPreviewRequest",
    "PricingPreviewResponse",
    "PublicOrderStatusResponse",
    "TableCreate",
    "TableResponse",
    "TableUpdate",
]

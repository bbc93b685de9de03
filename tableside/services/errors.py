"""Domain error taxonomy shared by the settlement services.

Every error carries a stable ``code`` so the HTTP layer (and any other caller)
can render a precise message without parsing text.
"""

from __future__ import annotations

from decimal import Decimal


class SettlementError(Exception):
    """Base class for failures surfaced to callers of the engine."""

    code: str = "SETTLEMENT_ERROR"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class ValidationError(SettlementError):
    """Malformed input rejected before any side effect."""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class NotFoundError(SettlementError):
    code = "NOT_FOUND"


class TableNotFoundError(NotFoundError):
    code = "TABLE_NOT_FOUND_OR_INACTIVE"


class MenuItemNotFoundError(NotFoundError):
    code = "MENU_ITEM_NOT_FOUND"


class IngredientNotFoundError(NotFoundError):
    code = "INGREDIENT_NOT_FOUND"


class OrderNotFoundError(NotFoundError):
    code = "ORDER_NOT_FOUND"


class DiscountNotFoundError(NotFoundError):
    code = "DISCOUNT_NOT_FOUND"


class IngredientRestaurantMismatchError(SettlementError):
    """Raised when a recipe references an ingredient owned by another restaurant."""

    code = "INGREDIENT_NOT_IN_RESTAURANT"


class ItemUnavailableError(SettlementError):
    code = "ITEM_UNAVAILABLE"


class NegativeQuantityError(SettlementError):
    """Raised when a stock adjustment would take an ingredient below zero."""

    code = "QUANTITY_WOULD_GO_NEGATIVE"


class InsufficientStockError(SettlementError):
    """Raised when an order needs more of an ingredient than is on hand."""

    code = "INSUFFICIENT_STOCK"

    def __init__(self, ingredient_name: str, ingredient_id: int, available: Decimal, needed: Decimal, unit: str) -> None:
        super().__init__(
            f"Insufficient stock for '{ingredient_name}': need {needed} {unit}, have {available} {unit}"
        )
        self.ingredient_name = ingredient_name
        self.ingredient_id = ingredient_id
        self.available = available
        self.needed = needed
        self.unit = unit


class CannotCancelCompletedError(SettlementError):
    code = "CANNOT_CANCEL_COMPLETED"


class TableHasOrdersError(SettlementError):
    """Raised when deleting a table that orders still point at; deactivate it instead."""

    code = "TABLE_HAS_ORDERS"


class InvalidStatusTransitionError(SettlementError):
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move order from {current} to {target}")
        self.current = current
        self.target = target


class ConcurrentUpdateError(SettlementError):
    """Raised when a row changed between read and conditional write; safe to retry."""

    code = "CONCURRENT_UPDATE"


class UnauthorizedError(SettlementError):
    """Raised when an actor touches rows outside their restaurant."""

    code = "UNAUTHORIZED"


class StoreError(SettlementError):
    """Unexpected persistence failure; details stay in the server log."""

    code = "STORE_ERROR"

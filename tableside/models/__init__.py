"""Application models package."""

from tableside.models.audit_log import AuditLog
from tableside.models.discount import Discount
from tableside.models.inventory import Ingredient, InventoryTransaction, MenuItemIngredient
from tableside.models.menu import MenuItem
from tableside.models.order import Order, OrderItem
from tableside.models.restaurant import Restaurant, RestaurantTable
from tableside.models.user import User

__all__ = [
    "AuditLog", "Discount", "Ingredient", "InventoryTransaction", "MenuItemIngredient", "MenuItem",
    "Order", "OrderItem", "Restaurant", "RestaurantTable", "User",
]

"""Explicit restaurant context passed into every engine operation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from tableside.services.errors import UnauthorizedError

OWNER_ROLES: frozenset[str] = frozenset({"RESTAURANT", "ADMIN"})
STAFF_ROLES: frozenset[str] = frozenset({"RESTAURANT", "ADMIN", "KITCHEN"})


class RestaurantContext(BaseModel):
    """Who is acting and on which restaurant's rows.

    Built once per request by the HTTP layer from the authenticated user and
    handed to services explicitly; services never look up a "current" user.
    """

    model_config = ConfigDict(frozen=True)

    restaurant_id: int
    user_id: int | None = None
    role: str = "RESTAURANT"

    def ensure_owns(self, restaurant_id: int) -> None:
        """Reject access to rows of another restaurant."""
        if restaurant_id != self.restaurant_id:
            raise UnauthorizedError("Order belongs to another restaurant")


def ensure_role(ctx: RestaurantContext, allowed_roles: frozenset[str] | set[str]) -> None:
    """Ensure the acting role is one of allowed roles."""
    if ctx.role not in allowed_roles:
        raise UnauthorizedError("Role not allowed for this action")

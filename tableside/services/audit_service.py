"""Audit log helpers."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from tableside.auth import RestaurantContext
from tableside.models import AuditLog


def log_action(
    db: Session,
    *,
    restaurant_id: int,
    actor: RestaurantContext | None,
    action_type: str,
    order_id: int | None = None,
    before_snapshot: dict[str, Any] | None = None,
    after_snapshot: dict[str, Any] | None = None,
) -> None:
    """Queue an audit row in the caller's unit of work; it commits or rolls back with it."""
    actor_role = "CUSTOMER"
    actor_id = None
    if actor is not None:
        actor_id = actor.user_id
        actor_role = actor.role

    db.add(
        AuditLog(
            restaurant_id=restaurant_id,
            actor_user_id=actor_id,
            actor_role=actor_role,
            action_type=action_type,
            order_id=order_id,
            before_snapshot=before_snapshot,
            after_snapshot=after_snapshot,
        )
    )

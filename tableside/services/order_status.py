"""Order status transition helpers."""

from __future__ import annotations

from datetime import datetime

from tableside.core.config import CONSUMPTION_POLICIES, settings

ORDER_STATUSES: list[str] = ["pending", "preparing", "completed", "cancelled"]

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"preparing", "completed", "cancelled"},
    "preparing": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

# Status at which each consumption policy deducts ingredients; every later
# non-cancelled status also triggers it when the trigger status was skipped.
CONSUMPTION_TRIGGERS: dict[str, set[str]] = {
    "on_place": {"pending", "preparing", "completed"},
    "on_preparing": {"preparing", "completed"},
    "on_completed": {"completed"},
}

STATUS_TIMESTAMP_FIELDS: dict[str, str] = {
    "preparing": "preparing_at",
    "completed": "completed_at",
    "cancelled": "cancelled_at",
}


def can_transition(current: str, new: str) -> bool:
    """Return whether order can move from current to new status."""
    return new in ALLOWED_TRANSITIONS.get(current, set())


def source_statuses(new: str) -> tuple[str, ...]:
    """Return every status an order may move to ``new`` from."""
    return tuple(status for status in ORDER_STATUSES if new in ALLOWED_TRANSITIONS[status])


def consumes_inventory_at(status: str, policy: str | None = None) -> bool:
    """Return whether reaching ``status`` should deduct ingredients under ``policy``."""
    policy = policy or settings.inventory_consumption_policy
    if policy not in CONSUMPTION_POLICIES:
        raise ValueError(f"Unknown inventory consumption policy: {policy}")
    return status in CONSUMPTION_TRIGGERS[policy]


def status_values(new_status: str, now: datetime) -> dict[str, object]:
    """Return column values for moving an order into ``new_status``."""
    values: dict[str, object] = {"status": new_status, "status_updated_at": now}
    timestamp_field = STATUS_TIMESTAMP_FIELDS.get(new_status)
    if timestamp_field is not None:
        values[timestamp_field] = now
    return values

"""Order status transition helper tests."""

from datetime import datetime, timezone

import pytest

from tableside.services.order_status import can_transition, consumes_inventory_at, source_statuses, status_values


def test_allowed_transitions() -> None:
    assert can_transition("pending", "preparing") is True
    assert can_transition("pending", "completed") is True
    assert can_transition("preparing", "cancelled") is True
    assert can_transition("preparing", "pending") is False
    assert can_transition("completed", "cancelled") is False
    assert can_transition("cancelled", "completed") is False


def test_consumption_policies() -> None:
    assert consumes_inventory_at("pending", "on_place") is True
    assert consumes_inventory_at("pending", "on_preparing") is False
    assert consumes_inventory_at("completed", "on_preparing") is True
    assert consumes_inventory_at("preparing", "on_completed") is False
    assert consumes_inventory_at("cancelled", "on_place") is False
    with pytest.raises(ValueError):
        consumes_inventory_at("pending", "on_payment")


def test_status_values_stamp_the_target_timestamp() -> None:
    now = datetime(2026, 5, 1, 20, 30, tzinfo=timezone.utc)

    assert status_values("completed", now) == {"status": "completed", "status_updated_at": now, "completed_at": now}
    assert status_values("pending", now) == {"status": "pending", "status_updated_at": now}


def test_source_statuses_list_every_allowed_origin() -> None:
    assert source_statuses("cancelled") == ("pending", "preparing")
    assert source_statuses("completed") == ("pending", "preparing")
    assert source_statuses("preparing") == ("pending",)
    assert source_statuses("pending") == ()

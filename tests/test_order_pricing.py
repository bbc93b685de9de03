"""Server-side cart pricing tests for the customer preview."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from tableside.db.base import Base
from tableside.models import Discount, MenuItem, Restaurant, RestaurantTable
from tableside.schemas.order import CartItemPayload
from tableside.services.errors import (
    ItemUnavailableError,
    MenuItemNotFoundError,
    TableNotFoundError,
    ValidationError,
)
from tableside.services.order_pricing import build_order_quote, merge_cart, preview_order_pricing


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _seed(tmp_path: Path) -> tuple[sessionmaker, dict[str, int]]:
    engine = _build_test_engine(tmp_path / "order_pricing.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    with testing_session_local() as db:
        restaurant = Restaurant(name="Trattoria", is_active=True)
        other = Restaurant(name="Bistro", is_active=True)
        db.add_all([restaurant, other])
        db.flush()
        table = RestaurantTable(restaurant_id=restaurant.id, table_number="1", is_active=True)
        closed_table = RestaurantTable(restaurant_id=restaurant.id, table_number="2", is_active=False)
        steak = MenuItem(restaurant_id=restaurant.id, name="Steak", price=Decimal("500"), category="mains")
        wine = MenuItem(restaurant_id=restaurant.id, name="Wine", price=Decimal("200"), category="drinks")
        soup = MenuItem(restaurant_id=restaurant.id, name="Soup", price=Decimal("80"), category="starters", is_available=False)
        foreign = MenuItem(restaurant_id=other.id, name="Burger", price=Decimal("90"), category="mains")
        db.add_all([table, closed_table, steak, wine, soup, foreign])
        db.commit()
        ids = {
            "restaurant": restaurant.id,
            "table": table.id,
            "closed_table": closed_table.id,
            "steak": steak.id,
            "wine": wine.id,
            "soup": soup.id,
            "foreign": foreign.id,
        }
    return testing_session_local, ids


def _cart(ids: dict[str, int]) -> list[CartItemPayload]:
    return [
        CartItemPayload(menu_item_id=ids["steak"], qty=2),
        CartItemPayload(menu_item_id=ids["wine"], qty=1),
    ]


def test_preview_applies_best_category_discount(tmp_path: Path) -> None:
    session_local, ids = _seed(tmp_path)
    with session_local() as db:
        db.add(
            Discount(
                restaurant_id=ids["restaurant"],
                discount_type="category",
                discount_value=Decimal("20"),
                apply_to="category",
                category_id="mains",
                is_active=True,
            )
        )
        db.commit()

        preview = preview_order_pricing(db, table_id=ids["table"], items=_cart(ids))

    assert preview.subtotal == Decimal("1200")
    assert preview.discount == Decimal("200")
    assert preview.total == Decimal("1130")


def test_quote_uses_menu_prices_and_item_discount(tmp_path: Path) -> None:
    session_local, ids = _seed(tmp_path)
    with session_local() as db:
        db.add(
            Discount(
                restaurant_id=ids["restaurant"],
                discount_type="fixed",
                discount_value=Decimal("50"),
                apply_to="item",
                item_id=ids["wine"],
                is_active=True,
            )
        )
        db.commit()

        quote = build_order_quote(db, table_id=ids["table"], items=_cart(ids))

    assert [line.name for line in quote.lines] == ["Steak", "Wine"]
    assert quote.subtotal == Decimal("1200")
    assert quote.discount.discount_amount == Decimal("50")
    assert quote.pricing.subtotal == Decimal("1150")
    assert quote.pricing.vat_amount == Decimal("115")
    assert quote.pricing.tip_amount == Decimal("35")
    assert quote.pricing.total == Decimal("1300")


def test_expired_discount_is_ignored(tmp_path: Path) -> None:
    session_local, ids = _seed(tmp_path)
    now = datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc)
    with session_local() as db:
        db.add(
            Discount(
                restaurant_id=ids["restaurant"],
                discount_type="time",
                discount_value=Decimal("50"),
                apply_to="all",
                start_time=now - timedelta(hours=3),
                end_time=now - timedelta(hours=1),
                is_active=True,
            )
        )
        db.commit()

        preview = preview_order_pricing(db, table_id=ids["table"], items=_cart(ids), now=now)

    assert preview.discount == Decimal("0")
    assert preview.total == Decimal("1356")


def test_repeated_cart_lines_are_merged(tmp_path: Path) -> None:
    session_local, ids = _seed(tmp_path)
    with session_local() as db:
        quote = build_order_quote(
            db,
            table_id=ids["table"],
            items=[
                CartItemPayload(menu_item_id=ids["wine"], qty=1),
                CartItemPayload(menu_item_id=ids["wine"], qty=2),
            ],
        )

    assert len(quote.lines) == 1
    assert quote.lines[0].qty == 3
    assert quote.subtotal == Decimal("600")


def test_inactive_table_is_rejected(tmp_path: Path) -> None:
    session_local, ids = _seed(tmp_path)
    with session_local() as db:
        with pytest.raises(TableNotFoundError) as exc_info:
            preview_order_pricing(db, table_id=ids["closed_table"], items=_cart(ids))
        with pytest.raises(TableNotFoundError):
            preview_order_pricing(db, table_id=9999, items=_cart(ids))

    assert exc_info.value.code == "TABLE_NOT_FOUND_OR_INACTIVE"


def test_unavailable_and_foreign_items_are_rejected(tmp_path: Path) -> None:
    session_local, ids = _seed(tmp_path)
    with session_local() as db:
        with pytest.raises(ItemUnavailableError):
            preview_order_pricing(db, table_id=ids["table"], items=[CartItemPayload(menu_item_id=ids["soup"], qty=1)])
        with pytest.raises(MenuItemNotFoundError):
            preview_order_pricing(db, table_id=ids["table"], items=[CartItemPayload(menu_item_id=ids["foreign"], qty=1)])


def test_merge_cart_validates_lines() -> None:
    with pytest.raises(ValidationError):
        merge_cart([])
    with pytest.raises(ValidationError):
        merge_cart([CartItemPayload.model_construct(menu_item_id=1, qty=0)])

    assert merge_cart(
        [
            CartItemPayload(menu_item_id=4, qty=1),
            CartItemPayload(menu_item_id=2, qty=1),
            CartItemPayload(menu_item_id=4, qty=2),
        ]
    ) == {4: 3, 2: 1}

"""HTTP tests for the customer and staff API."""

from decimal import Decimal
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from tableside.core.security import get_password_hash
from tableside.db import session as db_session
from tableside.db.base import Base
from tableside.main import app
from tableside.models import Ingredient, MenuItem, MenuItemIngredient, Restaurant, RestaurantTable, User


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _prepare_db(tmp_path: Path, monkeypatch) -> tuple[sessionmaker, dict[str, int]]:
    engine = _build_test_engine(tmp_path / "api.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)

    with testing_session_local() as db:
        restaurant = Restaurant(name="Trattoria", is_active=True)
        other = Restaurant(name="Bistro", is_active=True)
        db.add_all([restaurant, other])
        db.flush()
        table = RestaurantTable(restaurant_id=restaurant.id, table_number="12", is_active=True)
        steak = MenuItem(restaurant_id=restaurant.id, name="Steak", price=Decimal("500"), category="mains")
        wine = MenuItem(restaurant_id=restaurant.id, name="Wine", price=Decimal("200"), category="drinks")
        beef = Ingredient(restaurant_id=restaurant.id, name="Beef", unit="kg", current_quantity=Decimal("0"))
        db.add_all([table, steak, wine, beef])
        db.flush()
        db.add(
            MenuItemIngredient(
                restaurant_id=restaurant.id,
                menu_item_id=steak.id,
                ingredient_id=beef.id,
                quantity_per_item=Decimal("0.25"),
            )
        )
        password_hash = get_password_hash("secret123")
        db.add_all(
            [
                User(username="owner", password_hash=password_hash, role="RESTAURANT", restaurant_id=restaurant.id),
                User(username="chef", password_hash=password_hash, role="KITCHEN", restaurant_id=restaurant.id),
                User(username="rival", password_hash=password_hash, role="RESTAURANT", restaurant_id=other.id),
                User(username="admin", password_hash=password_hash, role="ADMIN"),
            ]
        )
        db.commit()
        ids = {
            "restaurant": restaurant.id,
            "table": table.id,
            "steak": steak.id,
            "wine": wine.id,
            "beef": beef.id,
        }
    return testing_session_local, ids


def _auth(client: TestClient, username: str) -> dict[str, str]:
    response = client.post("/api/v1/auth/login", json={"username": username, "password": "secret123"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _cart(ids: dict[str, int]) -> list[dict[str, int]]:
    return [{"menu_item_id": ids["steak"], "qty": 2}, {"menu_item_id": ids["wine"], "qty": 1}]


def test_login_rejects_bad_password(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        response = client.post("/api/v1/auth/login", json={"username": "owner", "password": "nope"})
        me_response = client.get("/api/v1/auth/me", headers=_auth(client, "chef"))

    assert response.status_code == 401
    assert me_response.status_code == 200
    assert me_response.json()["role"] == "KITCHEN"


def test_customer_order_flow_with_stock(tmp_path: Path, monkeypatch) -> None:
    _, ids = _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        owner = _auth(client, "owner")

        discount_response = client.post(
            "/api/v1/discounts",
            json={"discount_type": "category", "discount_value": "20", "apply_to": "category", "category_id": "mains"},
            headers=owner,
        )
        assert discount_response.status_code == 201

        menu_response = client.get(f"/api/v1/public/tables/{ids['table']}/menu")
        assert [item["name"] for item in menu_response.json()] == ["Wine", "Steak"]

        preview = client.post("/api/v1/public/pricing/preview", json={"table_id": ids["table"], "items": _cart(ids)})
        assert preview.status_code == 200
        assert Decimal(preview.json()["subtotal"]) == Decimal("1200")
        assert Decimal(preview.json()["discount"]) == Decimal("200")
        assert Decimal(preview.json()["total"]) == Decimal("1130")

        short = client.post("/api/v1/public/orders", json={"table_id": ids["table"], "items": _cart(ids)})
        assert short.status_code == 409
        assert short.json()["code"] == "INSUFFICIENT_STOCK"
        assert short.json()["ingredient"] == "Beef"

        restock = client.post(
            f"/api/v1/inventory/ingredients/{ids['beef']}/adjust",
            json={"delta": "2", "reason": "restock"},
            headers=owner,
        )
        assert restock.status_code == 200

        placed = client.post(
            "/api/v1/public/orders",
            json={"table_id": ids["table"], "items": _cart(ids), "customer_name": "Ana"},
        )
        assert placed.status_code == 201
        order_id = placed.json()["order_id"]
        assert Decimal(placed.json()["total"]) == Decimal("1130")

        tracked = client.get(f"/api/v1/public/orders/{order_id}", params={"table_id": ids["table"]})
        assert tracked.status_code == 200
        assert tracked.json()["status"] == "pending"
        wrong_table = client.get(f"/api/v1/public/orders/{order_id}", params={"table_id": ids["table"] + 1})
        assert wrong_table.status_code == 404

        beef = client.get(f"/api/v1/inventory/ingredients/{ids['beef']}", headers=owner)
        assert Decimal(beef.json()["current_quantity"]) == Decimal("1.5")

        listed = client.get("/api/v1/orders", params={"status": "pending"}, headers=owner)
        assert listed.headers["X-Total-Count"] == "1"
        assert [order["id"] for order in listed.json()] == [order_id]
        assert Decimal(listed.json()[0]["discount_amount"]) == Decimal("200")


def test_status_changes_and_cancel_rules_over_http(tmp_path: Path, monkeypatch) -> None:
    _, ids = _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        owner = _auth(client, "owner")
        chef = _auth(client, "chef")
        rival = _auth(client, "rival")
        client.post(
            f"/api/v1/inventory/ingredients/{ids['beef']}/adjust",
            json={"delta": "5", "reason": "restock"},
            headers=owner,
        )
        first = client.post("/api/v1/public/orders", json={"table_id": ids["table"], "items": _cart(ids)}).json()["order_id"]
        second = client.post("/api/v1/public/orders", json={"table_id": ids["table"], "items": _cart(ids)}).json()["order_id"]

        board = client.get("/api/v1/orders/kitchen", headers=chef)
        assert {card["id"] for card in board.json()} == {first, second}

        chef_cancel = client.post(f"/api/v1/orders/{first}/cancel", headers=chef)
        assert chef_cancel.status_code == 403
        assert chef_cancel.json()["code"] == "UNAUTHORIZED"

        preparing = client.post(f"/api/v1/orders/{first}/status", json={"status": "preparing"}, headers=chef)
        assert preparing.status_code == 200
        assert preparing.json()["status"] == "preparing"

        completed = client.post(f"/api/v1/orders/{first}/status", json={"status": "completed"}, headers=chef)
        assert completed.json()["status"] == "completed"

        late_cancel = client.post(f"/api/v1/orders/{first}/cancel", headers=owner)
        assert late_cancel.status_code == 409
        assert late_cancel.json()["code"] == "CANNOT_CANCEL_COMPLETED"

        rival_cancel = client.post(f"/api/v1/orders/{second}/cancel", headers=rival)
        assert rival_cancel.status_code == 403

        cancelled = client.post(f"/api/v1/orders/{second}/cancel", headers=owner)
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"

        missing = client.post("/api/v1/orders/9999/cancel", headers=owner)
        assert missing.status_code == 404
        assert missing.json()["code"] == "ORDER_NOT_FOUND"

        bad_status = client.post(f"/api/v1/orders/{second}/status", json={"status": "served"}, headers=owner)
        assert bad_status.status_code == 422


def test_inventory_endpoints_enforce_stock_floor_and_roles(tmp_path: Path, monkeypatch) -> None:
    _, ids = _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        owner = _auth(client, "owner")
        chef = _auth(client, "chef")

        created = client.post(
            "/api/v1/inventory/ingredients",
            json={"name": "Flour", "unit": "kg", "current_quantity": "3", "min_threshold": "5"},
            headers=owner,
        )
        assert created.status_code == 201
        flour_id = created.json()["id"]

        below_zero = client.post(
            f"/api/v1/inventory/ingredients/{flour_id}/adjust",
            json={"delta": "-4", "reason": "adjustment"},
            headers=owner,
        )
        assert below_zero.status_code == 409
        assert below_zero.json()["code"] == "QUANTITY_WOULD_GO_NEGATIVE"

        low_stock = client.get("/api/v1/inventory/low-stock", headers=owner)
        assert flour_id in {row["id"] for row in low_stock.json()}

        recipe = client.put(
            f"/api/v1/inventory/recipes/{ids['wine']}",
            json={"rows": [{"ingredient_id": flour_id, "quantity_per_item": "0.1"}, {"ingredient_id": 999, "quantity_per_item": "1"}]},
            headers=owner,
        )
        assert recipe.status_code == 404
        assert client.get(f"/api/v1/inventory/recipes/{ids['wine']}", headers=owner).json() == []

        transactions = client.get("/api/v1/inventory/transactions", params={"ingredient_id": flour_id}, headers=owner)
        assert [Decimal(row["delta"]) for row in transactions.json()] == [Decimal("3")]

        forbidden = client.get("/api/v1/inventory/ingredients", headers=chef)
        assert forbidden.status_code == 403


def test_admin_must_choose_restaurant(tmp_path: Path, monkeypatch) -> None:
    _, ids = _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        admin = _auth(client, "admin")
        without_header = client.get("/api/v1/menu/items", headers=admin)
        with_header = client.get(
            "/api/v1/menu/items",
            headers={**admin, "X-Restaurant-Id": str(ids["restaurant"])},
        )
        created = client.post(
            "/api/v1/menu/items",
            json={"name": "Tiramisu", "price": "28", "category": "desserts"},
            headers={**admin, "X-Restaurant-Id": str(ids["restaurant"])},
        )

    assert without_header.status_code == 400
    assert with_header.status_code == 200
    assert {item["name"] for item in with_header.json()} == {"Steak", "Wine"}
    assert created.status_code == 201
    assert Decimal(created.json()["price"]) == Decimal("28")


def test_owner_manages_tables_and_menu_over_http(tmp_path: Path, monkeypatch) -> None:
    _, ids = _prepare_db(tmp_path, monkeypatch)

    with TestClient(app) as client:
        owner = _auth(client, "owner")
        chef = _auth(client, "chef")

        created = client.post("/api/v1/tables", json={"table_number": "14", "capacity": 2, "location": "Bar"}, headers=owner)
        assert created.status_code == 201
        table_id = created.json()["id"]
        duplicate = client.post("/api/v1/tables", json={"table_number": "14"}, headers=owner)
        assert duplicate.status_code == 400
        assert client.get("/api/v1/tables", headers=chef).status_code == 403

        closed = client.patch(f"/api/v1/tables/{table_id}", json={"is_active": False}, headers=owner)
        assert closed.json()["is_active"] is False
        assert client.get(f"/api/v1/public/tables/{table_id}/menu").status_code == 404
        assert client.delete(f"/api/v1/tables/{table_id}", headers=owner).status_code == 204

        client.post(f"/api/v1/inventory/ingredients/{ids['beef']}/adjust", json={"delta": "1", "reason": "restock"}, headers=owner)
        placed = client.post("/api/v1/public/orders", json={"table_id": ids["table"], "items": _cart(ids)})
        assert placed.status_code == 201
        busy_table = client.delete(f"/api/v1/tables/{ids['table']}", headers=owner)
        assert busy_table.status_code == 409
        assert busy_table.json()["code"] == "TABLE_HAS_ORDERS"

        assert client.delete(f"/api/v1/menu/items/{ids['wine']}", headers=owner).status_code == 204
        menu_names = [item["name"] for item in client.get("/api/v1/menu/items", headers=owner).json()]
        order = client.get(f"/api/v1/orders/{placed.json()['order_id']}", headers=owner)

    assert menu_names == ["Steak"]
    assert sorted(item["name"] for item in order.json()["items"]) == ["Steak", "Wine"]

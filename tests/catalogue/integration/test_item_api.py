"""Integration tests for Catalogue API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from catalogue.api import item_router
from shared.api.handlers import register_exception_handlers

ADMIN = {"X-Principal-Id": "admin-001", "X-Principal-Roles": "admin"}
CATALOGUE_MANAGER = {"X-Principal-Id": "merch-001", "X-Principal-Permissions": "manage_catalogue"}
CUSTOMER = {"X-Principal-Id": "cust-001", "X-Principal-Roles": "customer"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(item_router)
    register_exception_handlers(app)
    return TestClient(app)


def _create_product(client, headers=ADMIN, **overrides):
    body = {"name": "Vitamin C Serum", "price": "499.00", "initial_stock": 25, "item_id": "prod-serum"}
    body.update(overrides)
    return client.post("/items/products", json=body, headers=headers)


class TestRegisterItems:
    def test_create_product(self, client):
        response = _create_product(client)
        assert response.status_code == 201
        assert response.json() == {"item_id": "prod-serum"}

        detail = client.get("/items/prod-serum").json()
        assert detail["item_type"] == "product"
        assert detail["price"] == "499.00"
        assert detail["available_stock"] == 25

    def test_create_service(self, client):
        response = client.post(
            "/items/services",
            json={"name": "Hydrating Facial", "price": "1500.00", "duration_minutes": 60, "item_id": "svc-facial"},
            headers=ADMIN,
        )
        assert response.status_code == 201

        detail = client.get("/items/svc-facial").json()
        assert detail["item_type"] == "service"
        assert detail["available_stock"] is None

    def test_permission_grant_without_admin_role(self, client):
        assert _create_product(client, headers=CATALOGUE_MANAGER).status_code == 201

    def test_customer_forbidden(self, client):
        assert _create_product(client, headers=CUSTOMER).status_code == 403

    def test_anonymous_rejected(self, client):
        assert _create_product(client, headers={}).status_code == 401

    def test_duplicate_item_id(self, client):
        _create_product(client)
        response = _create_product(client)
        assert response.status_code == 400
        assert "item_id" in response.json()["messages"]

    def test_fractional_minor_unit_rejected(self, client):
        response = _create_product(client, price="10.005")
        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"


class TestItemLifecycle:
    def test_change_price(self, client):
        _create_product(client)
        response = client.put("/items/prod-serum/price", json={"price": "549.00"}, headers=ADMIN)
        assert response.status_code == 200
        assert client.get("/items/prod-serum").json()["price"] == "549.00"

    def test_deactivated_items_leave_listing(self, client):
        _create_product(client)
        _create_product(client, item_id="prod-toner", name="Rose Toner")

        client.put("/items/prod-toner/deactivate", headers=ADMIN)

        assert [item["item_id"] for item in client.get("/items").json()] == ["prod-serum"]
        assert client.get("/items/prod-toner").json()["active"] is False

    def test_reactivate(self, client):
        _create_product(client)
        client.put("/items/prod-serum/deactivate", headers=ADMIN)
        response = client.put("/items/prod-serum/activate", headers=ADMIN)
        assert response.status_code == 200
        assert client.get("/items/prod-serum").json()["active"] is True

    def test_unknown_item(self, client):
        assert client.get("/items/missing").status_code == 404
        assert client.put("/items/missing/deactivate", headers=ADMIN).status_code == 404

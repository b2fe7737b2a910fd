"""Integration tests for Order API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from inventory.stock.adjustment import stock_level, write_off
from ordering.api.routes import cart_router, order_router
from shared.api.handlers import register_exception_handlers

CUSTOMER = {"X-Principal-Id": "cust-api-001", "X-Principal-Roles": "customer"}
OTHER_CUSTOMER = {"X-Principal-Id": "cust-api-002", "X-Principal-Roles": "customer"}
ADMIN = {"X-Principal-Id": "admin-001", "X-Principal-Roles": "admin"}
SELLER = {"X-Principal-Id": "seller-001", "X-Principal-Roles": "seller"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(order_router)
    app.include_router(cart_router)
    register_exception_handlers(app)
    return TestClient(app)


def _checkout(client, shipping_info, headers=CUSTOMER, payment_method="cod"):
    return client.post(
        "/orders/checkout",
        json={"shipping": shipping_info, "payment_method": payment_method},
        headers=headers,
    )


def _place_order(client, shipping_info, quantity=1, headers=CUSTOMER):
    """Helper: add prod-1 to the cart, check out, and return the order id."""
    client.post("/cart/items", json={"item_id": "prod-1", "quantity": quantity}, headers=headers)
    response = _checkout(client, shipping_info, headers=headers)
    assert response.status_code == 201
    return response.json()["order_ids"][0]


@pytest.fixture()
def catalogue(make_product):
    make_product(item_id="prod-1", name="Vitamin C Serum", price="100.00", stock=5, seller_id="seller-001")


class TestCheckoutEndpoint:
    def test_checkout(self, client, catalogue, shipping_info):
        client.post("/cart/items", json={"item_id": "prod-1", "quantity": 3}, headers=CUSTOMER)
        response = _checkout(client, shipping_info)

        assert response.status_code == 201
        assert len(response.json()["order_ids"]) == 1
        assert stock_level("prod-1") == 2
        assert client.get("/cart", headers=CUSTOMER).json()["lines"] == []

    def test_empty_cart(self, client, shipping_info):
        response = _checkout(client, shipping_info)
        assert response.status_code == 400
        assert response.json() == {"error": "EmptyCart"}

    def test_shortfall(self, client, catalogue, shipping_info):
        client.post("/cart/items", json={"item_id": "prod-1", "quantity": 5}, headers=CUSTOMER)
        write_off("prod-1", 1)
        response = _checkout(client, shipping_info)

        assert response.status_code == 409
        assert response.json()["shortfalls"] == [
            {"item_id": "prod-1", "name": "Vitamin C Serum", "requested": 5, "available": 4}
        ]
        assert len(client.get("/cart", headers=CUSTOMER).json()["lines"]) == 1

    def test_missing_shipping_field(self, client, catalogue, shipping_info):
        client.post("/cart/items", json={"item_id": "prod-1"}, headers=CUSTOMER)
        shipping_info["phone"] = ""
        response = _checkout(client, shipping_info)
        assert response.status_code == 400
        assert response.json()["messages"] == {"phone": ["This field is required"]}

    def test_unknown_payment_method(self, client, catalogue, shipping_info):
        client.post("/cart/items", json={"item_id": "prod-1"}, headers=CUSTOMER)
        response = _checkout(client, shipping_info, payment_method="barter")
        assert response.status_code == 400
        assert "payment_method" in response.json()["messages"]


class TestOrderDetail:
    def test_owner_reads_order(self, client, catalogue, shipping_info):
        order_id = _place_order(client, shipping_info, quantity=2)
        response = client.get(f"/orders/{order_id}", headers=CUSTOMER)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "pending"
        assert data["subtotal"] == "200.00"
        assert data["tax"] == "36.00"
        assert data["total"] == "236.00"
        assert data["shipping"]["pincode"] == "560001"
        assert data["lines"][0]["name"] == "Vitamin C Serum"

    def test_other_customer_forbidden(self, client, catalogue, shipping_info):
        order_id = _place_order(client, shipping_info)
        response = client.get(f"/orders/{order_id}", headers=OTHER_CUSTOMER)
        assert response.status_code == 403

    def test_unknown_order(self, client):
        response = client.get("/orders/missing", headers=ADMIN)
        assert response.status_code == 404

    def test_history(self, client, catalogue, shipping_info):
        order_id = _place_order(client, shipping_info)
        client.put(f"/orders/{order_id}/status", json={"status": "processing"}, headers=ADMIN)

        response = client.get(f"/orders/{order_id}/history", headers=CUSTOMER)

        assert [(h["from_status"], h["to_status"]) for h in response.json()] == [
            (None, "pending"),
            ("pending", "processing"),
        ]


class TestStatusEndpoint:
    def test_admin_advances_order(self, client, catalogue, shipping_info):
        order_id = _place_order(client, shipping_info)
        response = client.put(f"/orders/{order_id}/status", json={"status": "processing"}, headers=ADMIN)
        assert response.status_code == 200
        assert response.json()["status"] == "processing"

    def test_seller_advances_order(self, client, catalogue, shipping_info):
        order_id = _place_order(client, shipping_info)
        response = client.put(f"/orders/{order_id}/status", json={"status": "processing"}, headers=SELLER)
        assert response.status_code == 200

    def test_invalid_transition(self, client, catalogue, shipping_info):
        order_id = _place_order(client, shipping_info)
        for status in ("processing", "shipped"):
            client.put(f"/orders/{order_id}/status", json={"status": status}, headers=ADMIN)

        response = client.put(f"/orders/{order_id}/status", json={"status": "cancelled"}, headers=ADMIN)

        assert response.status_code == 409
        assert response.json() == {"error": "InvalidTransition", "current": "shipped", "requested": "cancelled"}

    def test_customer_cannot_advance(self, client, catalogue, shipping_info):
        order_id = _place_order(client, shipping_info)
        response = client.put(f"/orders/{order_id}/status", json={"status": "processing"}, headers=CUSTOMER)
        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"

    def test_customer_cancels_pending_order(self, client, catalogue, shipping_info):
        order_id = _place_order(client, shipping_info, quantity=2)
        response = client.put(f"/orders/{order_id}/status", json={"status": "cancelled"}, headers=CUSTOMER)
        assert response.status_code == 200
        assert stock_level("prod-1") == 5


class TestOrderListings:
    def test_my_orders(self, client, catalogue, shipping_info):
        order_id = _place_order(client, shipping_info)
        _place_order(client, shipping_info, headers=OTHER_CUSTOMER)

        response = client.get("/orders/mine", headers=CUSTOMER)

        assert [order["order_id"] for order in response.json()] == [order_id]

    def test_admin_listing_with_pagination(self, client, catalogue, shipping_info):
        for _ in range(3):
            _place_order(client, shipping_info)

        response = client.get("/orders", params={"per_page": 2, "page": 1}, headers=ADMIN)

        data = response.json()
        assert (data["total"], data["per_page"], data["current_page"], data["last_page"]) == (3, 2, 1, 2)
        assert len(data["orders"]) == 2

    def test_listing_forbidden_for_customers(self, client):
        assert client.get("/orders", headers=CUSTOMER).status_code == 403

    def test_statistics(self, client, catalogue, shipping_info):
        _place_order(client, shipping_info)
        response = client.get("/orders/statistics", headers=ADMIN)
        assert response.status_code == 200
        data = response.json()
        assert data["total_orders"] == 1
        assert data["total_revenue"] == "118.00"
        assert data["by_status"]["pending"] == 1


class TestPlaceOrderEndpoint:
    def test_place_order_from_cart(self, client, catalogue, shipping_info):
        client.post("/cart/items", json={"item_id": "prod-1", "quantity": 2}, headers=CUSTOMER)

        response = client.post(
            "/orders",
            json={
                "items": [{"item_id": "prod-1", "quantity": 2}],
                "shipping": shipping_info,
                "payment_method": "card",
                "from_cart": True,
            },
            headers=CUSTOMER,
        )

        assert response.status_code == 201
        order_id = response.json()["order_ids"][0]
        assert client.get(f"/orders/{order_id}", headers=CUSTOMER).json()["payment_method"] == "card"
        assert client.get("/cart", headers=CUSTOMER).json()["lines"] == []
        assert stock_level("prod-1") == 3

    def test_place_order_shortfall(self, client, catalogue, shipping_info):
        response = client.post(
            "/orders",
            json={"items": [{"item_id": "prod-1", "quantity": 9}], "shipping": shipping_info, "payment_method": "cod"},
            headers=CUSTOMER,
        )
        assert response.status_code == 409
        assert response.json()["shortfalls"][0]["available"] == 5

    def test_place_order_needs_items(self, client, shipping_info):
        response = client.post(
            "/orders", json={"items": [], "shipping": shipping_info, "payment_method": "cod"}, headers=CUSTOMER
        )
        assert response.status_code == 400
        assert "items" in response.json()["messages"]

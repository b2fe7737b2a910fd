"""Smoke tests against the assembled application."""

from fastapi.testclient import TestClient

from app import app


def test_health():
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "env": "test", "currency": "INR"}


def test_browse_and_add_to_cart_through_app(make_product):
    make_product(item_id="prod-serum", price="100.00", stock=5)
    client = TestClient(app)

    assert [item["item_id"] for item in client.get("/items").json()] == ["prod-serum"]

    response = client.post("/cart/items", json={"item_id": "prod-serum", "quantity": 2}, headers={"X-Session-Id": "s-1"})
    assert response.status_code == 201
    assert response.json()["summary"]["total_items"] == 2

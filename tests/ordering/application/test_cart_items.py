"""Application tests for cart line commands and the priced cart view."""

from decimal import Decimal

import pytest
from catalogue.item.lifecycle import change_price, deactivate_item
from ordering.cart.items import add_to_cart, clear_cart, remove_from_cart, update_cart_quantity
from ordering.cart.view import get_cart
from ordering.pricing.shipping import FlatShippingFee, set_shipping_policy
from shared.exceptions import ObjectNotFoundError, Shortfall, StockShortfall, ValidationError


class TestAddToCart:
    def test_first_add_creates_cart(self, make_product):
        make_product(item_id="prod-1", price="100.00")
        assert add_to_cart("cust-001", "prod-1", 2) == 2

        cart = get_cart("cust-001")
        assert [(line.item_id, line.quantity) for line in cart.lines] == [("prod-1", 2)]

    def test_readd_accumulates(self, make_product):
        make_product(item_id="prod-1")
        add_to_cart("cust-001", "prod-1", 1)
        assert add_to_cart("cust-001", "prod-1", 2) == 3

    def test_add_up_to_available_stock(self, make_product):
        make_product(item_id="prod-1", stock=2)
        assert add_to_cart("cust-001", "prod-1", 2) == 2

    def test_add_beyond_stock_refused(self, make_product):
        make_product(item_id="prod-1", name="Vitamin C Serum", stock=2)
        with pytest.raises(StockShortfall) as exc:
            add_to_cart("cust-001", "prod-1", 50)

        assert exc.value.shortfalls == [Shortfall("prod-1", "Vitamin C Serum", 50, 2)]
        assert get_cart("cust-001").lines == []

    def test_accumulated_quantity_counts_against_stock(self, make_product):
        make_product(item_id="prod-1", name="Vitamin C Serum", stock=3)
        add_to_cart("cust-001", "prod-1", 2)

        with pytest.raises(StockShortfall) as exc:
            add_to_cart("cust-001", "prod-1", 2)

        assert exc.value.shortfalls == [Shortfall("prod-1", "Vitamin C Serum", 4, 3)]
        assert get_cart("cust-001").lines[0].quantity == 2

    def test_services_are_not_stock_limited(self, make_service):
        make_service(item_id="svc-1")
        assert add_to_cart("cust-001", "svc-1", 25) == 25

    def test_unknown_item(self):
        with pytest.raises(ObjectNotFoundError):
            add_to_cart("cust-001", "missing", 1)

    def test_inactive_item(self, make_product):
        make_product(item_id="prod-1")
        deactivate_item("prod-1")
        with pytest.raises(ValidationError) as exc:
            add_to_cart("cust-001", "prod-1", 1)
        assert "item_id" in exc.value.messages

    def test_invalid_quantity(self, make_product):
        make_product(item_id="prod-1")
        with pytest.raises(ValidationError):
            add_to_cart("cust-001", "prod-1", 0)
        assert get_cart("cust-001").lines == []

    def test_carts_are_per_principal(self, make_product):
        make_product(item_id="prod-1")
        add_to_cart("cust-001", "prod-1", 1)
        add_to_cart("session:guest-42", "prod-1", 3)
        assert get_cart("cust-001").item_count == 1
        assert get_cart("session:guest-42").item_count == 3


class TestUpdateAndRemove:
    def test_update_quantity(self, make_product):
        make_product(item_id="prod-1")
        add_to_cart("cust-001", "prod-1", 1)
        update_cart_quantity("cust-001", "prod-1", 4)
        assert get_cart("cust-001").lines[0].quantity == 4

    def test_update_to_zero_removes(self, make_product):
        make_product(item_id="prod-1")
        add_to_cart("cust-001", "prod-1", 1)
        update_cart_quantity("cust-001", "prod-1", 0)
        assert get_cart("cust-001").lines == []

    def test_update_without_cart(self):
        with pytest.raises(ObjectNotFoundError):
            update_cart_quantity("cust-001", "prod-1", 2)

    def test_remove(self, make_product, make_service):
        make_product(item_id="prod-1")
        make_service(item_id="svc-1")
        add_to_cart("cust-001", "prod-1", 1)
        add_to_cart("cust-001", "svc-1", 1)
        remove_from_cart("cust-001", "prod-1")
        assert [line.item_id for line in get_cart("cust-001").lines] == ["svc-1"]

    def test_remove_missing_line(self, make_product):
        make_product(item_id="prod-1")
        add_to_cart("cust-001", "prod-1", 1)
        with pytest.raises(ObjectNotFoundError):
            remove_from_cart("cust-001", "prod-2")

    def test_clear(self, make_product):
        make_product(item_id="prod-1")
        add_to_cart("cust-001", "prod-1", 2)
        clear_cart("cust-001")
        assert get_cart("cust-001").lines == []

    def test_clear_without_cart_is_harmless(self):
        clear_cart("cust-001")
        assert get_cart("cust-001").lines == []


class TestCartView:
    def test_summary_uses_current_prices(self, make_product, make_service):
        make_product(item_id="prod-1", price="100.00")
        make_service(item_id="svc-1", price="1500.00")
        add_to_cart("cust-001", "prod-1", 2)
        add_to_cart("cust-001", "svc-1", 1)
        change_price("prod-1", Decimal("150.00"))

        cart = get_cart("cust-001")
        assert cart.lines[0].unit_price == Decimal("150.00")
        assert cart.product_count == 2
        assert cart.service_count == 1
        assert cart.summary.subtotal == Decimal("1800.00")
        assert cart.summary.tax == Decimal("324.00")
        assert cart.summary.total == Decimal("2124.00")

    def test_inactive_lines_excluded_from_summary(self, make_product):
        make_product(item_id="prod-1", price="100.00")
        make_product(item_id="prod-2", price="40.00")
        add_to_cart("cust-001", "prod-1", 1)
        add_to_cart("cust-001", "prod-2", 1)
        deactivate_item("prod-2")

        cart = get_cart("cust-001")
        assert [line.available for line in cart.lines] == [True, False]
        assert cart.summary.subtotal == Decimal("100.00")

    def test_shipping_policy_applies(self, make_product):
        set_shipping_policy(FlatShippingFee("49.00"))
        make_product(item_id="prod-1", price="100.00")
        add_to_cart("cust-001", "prod-1", 1)
        assert get_cart("cust-001").summary.total == Decimal("167.00")

    def test_empty_cart_view(self):
        cart = get_cart("cust-404")
        assert cart.lines == []
        assert cart.summary.total == Decimal("0")

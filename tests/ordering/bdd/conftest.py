"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from inventory.stock.adjustment import stock_level, write_off
from ordering.cart.items import add_to_cart
from ordering.cart.view import get_cart
from ordering.checkout.orchestrator import checkout
from ordering.order.order import Order
from pytest_bdd import given, parsers, then
from shared.database import read_session
from shared.exceptions import GlowMartError
from sqlalchemy import func, select


@pytest.fixture()
def attempt():
    """Run an action, capturing its result or domain error for the Then steps."""

    def _attempt(action) -> dict:
        try:
            return {"result": action(), "error": None}
        except GlowMartError as exc:
            return {"result": None, "error": exc}

    return _attempt


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('"{item_id}" has {count:d} units in stock'))
def _(make_product, item_id, count):
    make_product(item_id=item_id, name=item_id, stock=count)


@given(parsers.cfparse('the service "{item_id}" is offered'))
def _(make_service, item_id):
    make_service(item_id=item_id)


@given(parsers.cfparse("the customer's cart holds {quantity:d} of \"{item_id}\""))
def _(customer, quantity, item_id):
    add_to_cart(customer.principal_id, item_id, quantity)


@given(parsers.cfparse('{quantity:d} unit of "{item_id}" is written off'))
def _(quantity, item_id):
    write_off(item_id, quantity, reason="damaged")


@given(parsers.cfparse('the customer has placed an order for {quantity:d} of "{item_id}"'), target_fixture="order_id")
def _(customer, shipping_info, quantity, item_id):
    add_to_cart(customer.principal_id, item_id, quantity)
    return checkout(customer, shipping_info, "cod").order_ids[0]


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{item_id}" has {count:d} units in stock'))
def _(item_id, count):
    assert stock_level(item_id) == count


@then("the customer's cart is empty")
def _(customer):
    assert get_cart(customer.principal_id).lines == []


@then(parsers.cfparse("the customer's cart holds {quantity:d} of \"{item_id}\""))
def _(customer, quantity, item_id):
    assert [(line.item_id, line.quantity) for line in get_cart(customer.principal_id).lines] == [
        (item_id, quantity)
    ]


@then("no order exists")
def _():
    with read_session() as session:
        assert session.scalar(select(func.count()).select_from(Order)) == 0

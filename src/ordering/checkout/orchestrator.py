"""Checkout Orchestrator: cart → orders in a single unit of work.

Either the cart still holds its lines and no order exists, or the cart is
empty and the new orders exist. Nothing in between is ever committed.
``place_order`` takes the same path for an explicit list of items.
"""

from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, fields

import structlog
from sqlalchemy.orm import Session

from catalogue.reader import CatalogueReader
from identity.principal import Principal
from inventory.stock.stock import require_quantity
from ordering.cart.cart import Cart
from ordering.cart.items import load_cart
from ordering.checkout.validator import StockRequest, StockValidator, StockVerdict
from ordering.order.creation import OrderFactory
from ordering.order.order import Order, PaymentMethod, ShippingAddress, parse_payment_method
from shared.database import read_session, unit_of_work
from shared.exceptions import EmptyCart, Forbidden, ObjectNotFoundError, StockShortfall, ValidationError

logger = structlog.get_logger(__name__)

_SHIPPING_FIELDS = tuple(f.name for f in fields(ShippingAddress))


@dataclass(frozen=True)
class CheckoutResult:
    orders: list[Order]

    @property
    def order_ids(self) -> list[str]:
        return [order.id for order in self.orders]


def shipping_address_from(shipping_info) -> ShippingAddress:
    """Build the shipping snapshot, rejecting blank or missing fields."""
    if isinstance(shipping_info, ShippingAddress):
        shipping_info = asdict(shipping_info)
    if not isinstance(shipping_info, Mapping):
        raise ValidationError({"shipping": ["Shipping details are required"]})

    values = {}
    errors = {}
    for name in _SHIPPING_FIELDS:
        value = shipping_info.get(name)
        value = str(value).strip() if value is not None else ""
        if not value:
            errors[name] = ["This field is required"]
        values[name] = value

    if values["email"] and "@" not in values["email"]:
        errors.setdefault("email", []).append("Enter a valid email address")
    if errors:
        raise ValidationError(errors)
    return ShippingAddress(**values)


def _requests_for(cart: Cart) -> list[StockRequest]:
    return [StockRequest(line.item_id, line.item_type, line.quantity) for line in cart.lines]


def _order_lines(
    session: Session,
    principal: Principal,
    requests: list[StockRequest],
    shipping_address: ShippingAddress,
    method: PaymentMethod,
    order_factory,
) -> list[Order]:
    """Pre-check stock, then hand the lines to the factory within ``session``."""
    verdict = StockValidator(session).check(requests)
    if not verdict.ok:
        logger.info(
            "Order stopped by stock pre-check",
            principal_id=principal.principal_id,
            shortfalls=[shortfall.to_dict() for shortfall in verdict.shortfalls],
        )
        raise StockShortfall(list(verdict.shortfalls))

    try:
        return order_factory(session).create_orders(principal.principal_id, requests, shipping_address, method)
    except StockShortfall:
        logger.warning("Order lost a stock race at commit", principal_id=principal.principal_id)
        raise


def checkout(principal: Principal, shipping_info, payment_method, order_factory=OrderFactory) -> CheckoutResult:
    """Convert the principal's cart into one or more orders."""
    shipping_address = shipping_address_from(shipping_info)
    method = parse_payment_method(payment_method)

    with unit_of_work() as session:
        cart = load_cart(session, principal.principal_id)
        if cart is None or cart.is_empty:
            raise EmptyCart(principal.principal_id)

        orders = _order_lines(session, principal, _requests_for(cart), shipping_address, method, order_factory)
        cart.clear()

    result = CheckoutResult(orders=orders)
    logger.info("Checkout completed", principal_id=principal.principal_id, order_ids=result.order_ids)
    return result


def requested_items_from(items) -> list[tuple[str, int]]:
    """Parse an explicit ``[{"item_id": ..., "quantity": ...}]`` payload."""
    if isinstance(items, (str, bytes)) or not isinstance(items, Sequence) or not items:
        raise ValidationError({"items": ["At least one item is required"]})

    parsed = []
    for index, entry in enumerate(items):
        if not isinstance(entry, Mapping):
            raise ValidationError({f"items[{index}]": ["Each item needs an item_id and a quantity"]})
        item_id = str(entry.get("item_id") or "").strip()
        if not item_id:
            raise ValidationError({f"items[{index}].item_id": ["This field is required"]})
        parsed.append((item_id, require_quantity(entry.get("quantity"), field=f"items[{index}].quantity")))
    return parsed


def place_order(
    principal: Principal,
    items,
    shipping_info,
    payment_method,
    from_cart: bool = False,
    order_factory=OrderFactory,
) -> CheckoutResult:
    """Order the given items directly, without going through the whole cart.

    With ``from_cart`` the ordered items' lines are removed from the cart in
    the same unit of work; any other lines stay.
    """
    if principal.anonymous:
        raise Forbidden("Sign in to place an order")

    requested = requested_items_from(items)
    shipping_address = shipping_address_from(shipping_info)
    method = parse_payment_method(payment_method)

    with unit_of_work() as session:
        catalogue = CatalogueReader(session).get_items(item_id for item_id, _ in requested)
        missing = [item_id for item_id, _ in requested if item_id not in catalogue]
        if missing:
            raise ObjectNotFoundError(f"Items {', '.join(missing)} do not exist")

        requests = [StockRequest(item_id, catalogue[item_id].item_type, quantity) for item_id, quantity in requested]
        orders = _order_lines(session, principal, requests, shipping_address, method, order_factory)

        if from_cart:
            cart = load_cart(session, principal.principal_id)
            if cart is not None:
                for item_id in dict.fromkeys(item_id for item_id, _ in requested):
                    if cart.find_line(item_id) is not None:
                        cart.remove_line(item_id)

    result = CheckoutResult(orders=orders)
    logger.info(
        "Order placed", principal_id=principal.principal_id, order_ids=result.order_ids, from_cart=from_cart
    )
    return result


def stock_check(principal: Principal) -> StockVerdict:
    """Advisory stock check over the principal's current cart."""
    with read_session() as session:
        cart = load_cart(session, principal.principal_id)
        if cart is None or cart.is_empty:
            return StockVerdict()
        return StockValidator(session).check(_requests_for(cart))

"""Adding, updating and removing cart lines.

Each call is its own unit of work. Adding a product refuses a line larger
than the stock currently on hand; the check is advisory, checkout takes the
stock and remains the authoritative gate.
"""

import structlog
from sqlalchemy.orm import Session

from catalogue.reader import CatalogueReader
from inventory.stock.stock import require_quantity
from ordering.cart.cart import Cart
from ordering.checkout.validator import StockRequest, shortfall_for
from shared.database import unit_of_work
from shared.exceptions import ObjectNotFoundError, StockShortfall, ValidationError

logger = structlog.get_logger(__name__)


def load_cart(session: Session, principal_id: str) -> Cart | None:
    return session.get(Cart, principal_id)


def _load_existing_cart(session: Session, principal_id: str, item_id: str) -> Cart:
    cart = load_cart(session, principal_id)
    if cart is None:
        raise ObjectNotFoundError(f"Item {item_id} is not in the cart")
    return cart


def add_to_cart(principal_id: str, item_id: str, quantity: int = 1) -> int:
    """Add ``quantity`` of an item. Returns the line's resulting quantity."""
    require_quantity(quantity)

    with unit_of_work() as session:
        item = CatalogueReader(session).get_item(item_id)
        if item is None:
            raise ObjectNotFoundError(f"Item {item_id} does not exist")
        if not item.active:
            raise ValidationError({"item_id": [f"{item.name} is not available for purchase"]})

        cart = load_cart(session, principal_id)
        if cart is None:
            cart = Cart.create(principal_id)
            session.add(cart)

        existing = cart.find_line(item.item_id)
        requested = quantity + (existing.quantity if existing is not None else 0)
        shortfall = shortfall_for(StockRequest(item.item_id, item.item_type, requested), item)
        if shortfall is not None:
            logger.info("Add to cart refused for lack of stock", principal_id=principal_id, **shortfall.to_dict())
            raise StockShortfall([shortfall])

        line = cart.add_line(item.item_id, item.item_type, item.current_price, quantity)
        line_quantity = line.quantity

    logger.info("Item added to cart", principal_id=principal_id, item_id=item_id, quantity=quantity)
    return line_quantity


def update_cart_quantity(principal_id: str, item_id: str, quantity: int) -> None:
    """Set a line's quantity; zero or less removes the line."""
    with unit_of_work() as session:
        _load_existing_cart(session, principal_id, item_id).update_line_quantity(item_id, quantity)
    logger.info("Cart quantity updated", principal_id=principal_id, item_id=item_id, quantity=quantity)


def remove_from_cart(principal_id: str, item_id: str) -> None:
    with unit_of_work() as session:
        _load_existing_cart(session, principal_id, item_id).remove_line(item_id)
    logger.info("Item removed from cart", principal_id=principal_id, item_id=item_id)


def clear_cart(principal_id: str) -> None:
    with unit_of_work() as session:
        cart = load_cart(session, principal_id)
        if cart is not None:
            cart.clear()
    logger.info("Cart cleared", principal_id=principal_id)

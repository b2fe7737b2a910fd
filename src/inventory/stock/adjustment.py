"""Manual stock adjustments: receiving new units and writing units off."""

import structlog

from catalogue.item.item import SellableItem
from inventory.stock.stock import StockLedger
from shared.database import read_session, unit_of_work
from shared.exceptions import ObjectNotFoundError, Shortfall, StockShortfall

logger = structlog.get_logger(__name__)


def restock(product_id: str, quantity: int, reference: str | None = None) -> int:
    """Add ``quantity`` units. Returns the new available count."""
    with unit_of_work() as session:
        available = StockLedger(session).increment(product_id, quantity)
    logger.info("Stock received", product_id=product_id, quantity=quantity, available=available, reference=reference)
    return available


def write_off(product_id: str, quantity: int, reason: str | None = None) -> int:
    """Remove damaged or lost units, never driving the count below zero."""
    with unit_of_work() as session:
        ledger = StockLedger(session)
        if not ledger.try_decrement(product_id, quantity):
            available = ledger.available(product_id)
            if available is None:
                raise ObjectNotFoundError(f"No stock entry for product {product_id}")
            item = session.get(SellableItem, product_id)
            raise StockShortfall(
                [Shortfall(item_id=product_id, name=item.name, requested=quantity, available=available)]
            )
        available = ledger.available(product_id)
    logger.info("Stock written off", product_id=product_id, quantity=quantity, available=available, reason=reason)
    return available


def stock_level(product_id: str) -> int:
    with read_session() as session:
        available = StockLedger(session).available(product_id)
    if available is None:
        raise ObjectNotFoundError(f"No stock entry for product {product_id}")
    return available

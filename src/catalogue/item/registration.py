"""Registering products and services in the catalogue."""

import structlog
from sqlalchemy.orm import Session

from catalogue.item.item import Product, SellableItem, Service
from inventory.stock.stock import StockLedger, require_quantity
from shared.database import unit_of_work
from shared.exceptions import ValidationError

logger = structlog.get_logger(__name__)


def _ensure_unused(session: Session, item_id) -> None:
    if item_id is not None and session.get(SellableItem, str(item_id)) is not None:
        raise ValidationError({"item_id": [f"Item {item_id} already exists"]})


def register_product(name, price, initial_stock=0, seller_id=None, item_id=None, sku=None) -> str:
    """Add a stock-tracked product and open its ledger entry in one transaction."""
    require_quantity(initial_stock, field="initial_stock", allow_zero=True)
    product = Product.create(name=name, price=price, seller_id=seller_id, sku=sku, item_id=item_id)

    with unit_of_work() as session:
        _ensure_unused(session, item_id)
        session.add(product)
        session.flush()
        StockLedger(session).open_entry(product.id, initial_stock)

    logger.info("Product registered", item_id=product.id, price=str(product.price), initial_stock=initial_stock)
    return product.id


def register_service(name, price, duration_minutes=None, seller_id=None, item_id=None) -> str:
    """Add a bookable service. Services have no stock entry."""
    service = Service.create(
        name=name, price=price, duration_minutes=duration_minutes, seller_id=seller_id, item_id=item_id
    )

    with unit_of_work() as session:
        _ensure_unused(session, item_id)
        session.add(service)

    logger.info("Service registered", item_id=service.id, price=str(service.price))
    return service.id

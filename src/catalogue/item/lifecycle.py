"""Price changes and activation of catalogue items."""

import structlog
from sqlalchemy.orm import Session

from catalogue.item.item import SellableItem
from shared.database import unit_of_work
from shared.exceptions import ObjectNotFoundError

logger = structlog.get_logger(__name__)


def _load(session: Session, item_id: str) -> SellableItem:
    item = session.get(SellableItem, item_id)
    if item is None:
        raise ObjectNotFoundError(f"Item {item_id} does not exist")
    return item


def change_price(item_id: str, new_price) -> None:
    with unit_of_work() as session:
        item = _load(session, item_id)
        previous = item.change_price(new_price)
    logger.info("Item price changed", item_id=item_id, previous=str(previous), current=str(item.price))


def deactivate_item(item_id: str) -> None:
    with unit_of_work() as session:
        _load(session, item_id).deactivate()
    logger.info("Item deactivated", item_id=item_id)


def activate_item(item_id: str) -> None:
    with unit_of_work() as session:
        _load(session, item_id).activate()
    logger.info("Item activated", item_id=item_id)

"""Read-only view of the catalogue used by ordering.

Each ``CatalogueItem`` carries the item's *current* price and, for
products, the available count from the stock ledger, read in the caller's
transaction.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from catalogue.item.item import ItemType, SellableItem
from inventory.stock.stock import StockEntry
from shared.database import read_session
from shared.exceptions import ObjectNotFoundError


@dataclass(frozen=True)
class CatalogueItem:
    item_id: str
    item_type: str
    name: str
    current_price: Decimal
    active: bool
    seller_id: str | None = None
    available_stock: int | None = None

    @property
    def is_product(self) -> bool:
        return self.item_type == ItemType.PRODUCT.value


class CatalogueReader:
    def __init__(self, session: Session):
        self._session = session

    def get_items(self, item_ids: Iterable[str]) -> dict[str, CatalogueItem]:
        ids = list(dict.fromkeys(item_ids))
        if not ids:
            return {}

        rows = self._session.execute(
            select(SellableItem, StockEntry.available)
            .outerjoin(StockEntry, StockEntry.product_id == SellableItem.id)
            .where(SellableItem.id.in_(ids))
        )
        return {
            item.id: CatalogueItem(
                item_id=item.id,
                item_type=item.item_type,
                name=item.name,
                current_price=item.price,
                active=item.active,
                seller_id=item.seller_id,
                available_stock=available if item.is_stock_tracked else None,
            )
            for item, available in rows
        }

    def get_item(self, item_id: str) -> CatalogueItem | None:
        return self.get_items([item_id]).get(item_id)

    def list_items(self, active_only: bool = True) -> list[CatalogueItem]:
        query = select(SellableItem.id).order_by(SellableItem.created_at, SellableItem.id)
        if active_only:
            query = query.where(SellableItem.active.is_(True))
        ids = list(self._session.scalars(query))
        items = self.get_items(ids)
        return [items[item_id] for item_id in ids]


def browse_items(active_only: bool = True) -> list[CatalogueItem]:
    with read_session() as session:
        return CatalogueReader(session).list_items(active_only=active_only)


def find_item(item_id: str) -> CatalogueItem:
    with read_session() as session:
        item = CatalogueReader(session).get_item(item_id)
    if item is None:
        raise ObjectNotFoundError(f"Item {item_id} does not exist")
    return item

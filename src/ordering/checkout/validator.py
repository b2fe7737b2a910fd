"""Stock pre-check for a set of requested lines.

The check is advisory: it reads the ledger without holding anything, so a
passing verdict can still lose a race at commit time. Quantities for the
same item are summed before comparing against what is available.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from catalogue.reader import CatalogueItem, CatalogueReader
from shared.exceptions import Shortfall


@dataclass(frozen=True)
class StockRequest:
    item_id: str
    item_type: str
    quantity: int


@dataclass(frozen=True)
class StockVerdict:
    shortfalls: tuple[Shortfall, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.shortfalls

    def to_dict(self) -> dict:
        if self.ok:
            return {"status": "ok"}
        return {"status": "failed", "shortfalls": [shortfall.to_dict() for shortfall in self.shortfalls]}


def aggregate_requests(requests: Iterable[StockRequest]) -> list[StockRequest]:
    """Merge requests for the same item, keeping first-seen order."""
    merged: dict[str, StockRequest] = {}
    for request in requests:
        existing = merged.get(request.item_id)
        if existing is None:
            merged[request.item_id] = request
        else:
            merged[request.item_id] = StockRequest(
                request.item_id, existing.item_type, existing.quantity + request.quantity
            )
    return list(merged.values())


def shortfall_for(request: StockRequest, item: CatalogueItem | None) -> Shortfall | None:
    """Why ``request`` cannot be met right now, or None if it can.

    Missing and deactivated items count as having nothing available.
    Services are never stock-limited.
    """
    if item is None or not item.active:
        name = item.name if item is not None else request.item_id
        return Shortfall(item_id=request.item_id, name=name, requested=request.quantity, available=0)

    if item.is_product:
        available = item.available_stock or 0
        if available < request.quantity:
            return Shortfall(item_id=item.item_id, name=item.name, requested=request.quantity, available=available)
    return None


class StockValidator:
    def __init__(self, session: Session):
        self._reader = CatalogueReader(session)

    def check(self, requests: Iterable[StockRequest]) -> StockVerdict:
        merged = aggregate_requests(requests)
        items = self._reader.get_items(request.item_id for request in merged)

        shortfalls = []
        for request in merged:
            shortfall = shortfall_for(request, items.get(request.item_id))
            if shortfall is not None:
                shortfalls.append(shortfall)
        return StockVerdict(shortfalls=tuple(shortfalls))

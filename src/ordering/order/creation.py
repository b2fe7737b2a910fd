"""Order Factory: turns requested lines into committed, priced orders.

Runs inside the caller's unit of work. Stock for every product line is
taken with the ledger's conditional decrement; if any line cannot be met,
``StockShortfall`` lists every failing line and the caller's transaction
rolls back whatever was decremented before the failure was found.
"""

from collections.abc import Sequence

import structlog
from sqlalchemy.orm import Session

from catalogue.reader import CatalogueReader
from inventory.stock.stock import StockLedger
from ordering.checkout.validator import StockRequest, aggregate_requests, shortfall_for
from ordering.order.grouping import CommittedLine, GroupingPolicy, get_grouping_policy
from ordering.order.order import Order, OrderLine, PaymentMethod, ShippingAddress
from ordering.pricing.engine import PriceLine, PricingEngine
from shared.config import get_settings
from shared.exceptions import Shortfall, StockShortfall

logger = structlog.get_logger(__name__)


class OrderFactory:
    def __init__(
        self,
        session: Session,
        pricing_engine: PricingEngine | None = None,
        grouping_policy: GroupingPolicy | None = None,
        currency: str | None = None,
    ):
        self._session = session
        self._pricing = pricing_engine or PricingEngine.from_settings()
        self._grouping = grouping_policy or get_grouping_policy()
        self._currency = currency or get_settings().currency

    def create_orders(
        self,
        principal_id: str,
        requests: Sequence[StockRequest],
        shipping_address: ShippingAddress,
        payment_method: PaymentMethod,
    ) -> list[Order]:
        committed = self._commit_lines(aggregate_requests(requests))

        orders = []
        for group in self._grouping.group(committed):
            pricing = self._pricing.price([PriceLine(line.item_id, line.unit_price, line.quantity) for line in group])
            order = Order.create(
                principal_id=principal_id,
                lines=[self._order_line(line) for line in group],
                pricing=pricing,
                payment_method=payment_method,
                shipping_address=shipping_address,
                currency=self._currency,
            )
            self._session.add(order)
            orders.append(order)

        self._session.flush()
        logger.info(
            "Orders created",
            principal_id=principal_id,
            order_ids=[order.id for order in orders],
            totals=[str(order.total) for order in orders],
        )
        return orders

    def _commit_lines(self, requests: list[StockRequest]) -> list[CommittedLine]:
        """Snapshot current prices and take stock. Raises StockShortfall listing every failure.

        Ledger rows are decremented in item id order so two checkouts over the
        same products always lock them in the same order. Committed lines and
        shortfalls keep the order of ``requests``.
        """
        items = CatalogueReader(self._session).get_items(request.item_id for request in requests)
        ledger = StockLedger(self._session)

        failed: dict[str, Shortfall] = {}
        for request in sorted(requests, key=lambda request: request.item_id):
            item = items.get(request.item_id)
            if item is None or not item.active:
                failed[request.item_id] = shortfall_for(request, item)
            elif item.is_product and not ledger.try_decrement(item.item_id, request.quantity):
                failed[request.item_id] = Shortfall(
                    item_id=item.item_id,
                    name=item.name,
                    requested=request.quantity,
                    available=ledger.available(item.item_id) or 0,
                )

        if failed:
            shortfalls = [failed[request.item_id] for request in requests if request.item_id in failed]
            logger.info(
                "Stock commit failed",
                shortfalls=[shortfall.to_dict() for shortfall in shortfalls],
            )
            raise StockShortfall(shortfalls)

        committed: list[CommittedLine] = []
        for request in requests:
            item = items[request.item_id]
            committed.append(
                CommittedLine(
                    item_id=item.item_id,
                    item_type=item.item_type,
                    name=item.name,
                    unit_price=item.current_price,
                    quantity=request.quantity,
                    seller_id=item.seller_id,
                )
            )
        return committed

    @staticmethod
    def _order_line(line: CommittedLine) -> OrderLine:
        return OrderLine(
            item_id=line.item_id,
            item_type=line.item_type,
            name=line.name,
            unit_price=line.unit_price,
            quantity=line.quantity,
            line_total=line.unit_price * line.quantity,
            seller_id=line.seller_id,
        )

"""Order Status Machine: authorized, audited status transitions.

Checks run in a fixed order so callers get the most useful error:
no standing on the order at all is ``Forbidden``; a target the table does
not allow is ``InvalidTransition``; a legal target the principal may not
drive is ``Forbidden`` again. Moving into ``cancelled`` returns every
product line's units to the stock ledger in the same transaction.
"""

from collections import Counter

import structlog
from sqlalchemy.orm import Session

from catalogue.item.item import ItemType
from identity.principal import Principal
from identity.provider.port import IdentityProvider
from inventory.stock.stock import StockLedger
from ordering.order.access import OrderAccess, access_for
from ordering.order.order import Order, OrderStatus, parse_status
from shared.database import unit_of_work
from shared.exceptions import Forbidden, ObjectNotFoundError

logger = structlog.get_logger(__name__)


def load_order(session: Session, order_id: str) -> Order:
    order = session.get(Order, order_id)
    if order is None:
        raise ObjectNotFoundError(f"Order {order_id} does not exist")
    return order


class OrderStatusMachine:
    def __init__(self, session: Session, provider: IdentityProvider | None = None):
        self._session = session
        self._provider = provider

    def transition(self, order: Order, target: OrderStatus, principal: Principal) -> Order:
        access = access_for(order, principal, self._provider)
        if not access.has_standing:
            raise Forbidden(f"{principal.principal_id} has no standing on order {order.id}")

        order.assert_can_transition(target)

        if not self._may_drive(access, order, target):
            raise Forbidden(f"{principal.principal_id} may not move order {order.id} to {target.value}")

        previous = order.status
        order.transition_to(target, changed_by=principal.principal_id)
        if target == OrderStatus.CANCELLED:
            self._restore_stock(order)

        logger.info(
            "Order status changed",
            order_id=order.id,
            from_status=previous,
            to_status=target.value,
            changed_by=principal.principal_id,
        )
        return order

    @staticmethod
    def _may_drive(access: OrderAccess, order: Order, target: OrderStatus) -> bool:
        if access.is_staff or access.is_seller:
            return True
        # Owners may only withdraw an order nobody has started on
        return access.is_owner and target == OrderStatus.CANCELLED and order.status == OrderStatus.PENDING.value

    def _restore_stock(self, order: Order) -> None:
        quantities = Counter()
        for line in order.lines:
            if line.item_type == ItemType.PRODUCT.value:
                quantities[line.item_id] += line.quantity

        ledger = StockLedger(self._session)
        for product_id, quantity in quantities.items():
            ledger.increment(product_id, quantity)
        if quantities:
            logger.info("Stock restored for cancelled order", order_id=order.id, restored=dict(quantities))


def change_order_status(
    order_id: str, requested_status, principal: Principal, provider: IdentityProvider | None = None
) -> Order:
    """Validate, authorize and apply a status change in one unit of work."""
    target = parse_status(requested_status)
    with unit_of_work() as session:
        order = load_order(session, order_id)
        OrderStatusMachine(session, provider).transition(order, target, principal)
    return order

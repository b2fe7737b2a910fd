"""Read-side order queries: single order, own orders, staff listing and statistics."""

import math
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import func, select

from identity.principal import Principal
from identity.provider.port import IdentityProvider
from ordering.order.access import access_for, can_view_all_orders
from ordering.order.order import Order, OrderStatus, OrderStatusChange, parse_status
from ordering.order.status import load_order
from shared.database import read_session
from shared.exceptions import Forbidden, ValidationError

MAX_PER_PAGE = 100


@dataclass(frozen=True)
class OrderPage:
    orders: list[Order]
    total: int
    per_page: int
    current_page: int
    last_page: int


@dataclass(frozen=True)
class OrderStatistics:
    total_orders: int
    total_revenue: Decimal
    total_customers: int
    by_status: dict[str, int] = field(default_factory=dict)


def get_order(order_id: str, principal: Principal, provider: IdentityProvider | None = None) -> Order:
    """The full order, for its owner, staff, or the seller of its lines."""
    with read_session() as session:
        order = load_order(session, order_id)
        if not access_for(order, principal, provider).can_view:
            raise Forbidden(f"{principal.principal_id} may not view order {order_id}")
        return order


def order_history(order_id: str, principal: Principal, provider: IdentityProvider | None = None) -> list[OrderStatusChange]:
    return list(get_order(order_id, principal, provider).status_changes)


def list_my_orders(principal: Principal) -> list[Order]:
    """The principal's own orders, newest first."""
    with read_session() as session:
        return list(
            session.scalars(
                select(Order)
                .where(Order.principal_id == principal.principal_id)
                .order_by(Order.created_at.desc(), Order.id)
            )
        )


def _require_staff_view(principal: Principal, provider: IdentityProvider | None) -> None:
    if not can_view_all_orders(principal, provider):
        raise Forbidden(f"{principal.principal_id} may not list all orders")


def list_orders(
    principal: Principal,
    status=None,
    owner_id: str | None = None,
    page: int = 1,
    per_page: int = 10,
    provider: IdentityProvider | None = None,
) -> OrderPage:
    """All orders, optionally filtered by status and owner, newest first."""
    errors = {}
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        errors["page"] = ["Page must be a whole number, at least 1"]
    if isinstance(per_page, bool) or not isinstance(per_page, int) or not 1 <= per_page <= MAX_PER_PAGE:
        errors["per_page"] = [f"Page size must be between 1 and {MAX_PER_PAGE}"]
    if errors:
        raise ValidationError(errors)
    target = parse_status(status) if status else None

    _require_staff_view(principal, provider)

    filters = []
    if target is not None:
        filters.append(Order.status == target.value)
    if owner_id:
        filters.append(Order.principal_id == owner_id)

    with read_session() as session:
        total = session.scalar(select(func.count()).select_from(Order).where(*filters))
        orders = list(
            session.scalars(
                select(Order)
                .where(*filters)
                .order_by(Order.created_at.desc(), Order.id)
                .limit(per_page)
                .offset((page - 1) * per_page)
            )
        )

    return OrderPage(
        orders=orders,
        total=total,
        per_page=per_page,
        current_page=page,
        last_page=max(1, math.ceil(total / per_page)),
    )


def order_statistics(principal: Principal, provider: IdentityProvider | None = None) -> OrderStatistics:
    """Counts per status, distinct customers and revenue from orders that were not cancelled."""
    _require_staff_view(principal, provider)

    with read_session() as session:
        by_status = {status.value: 0 for status in OrderStatus}
        for status, count in session.execute(select(Order.status, func.count()).group_by(Order.status)):
            by_status[status] = count

        revenue = session.scalar(
            select(func.sum(Order.total)).where(Order.status != OrderStatus.CANCELLED.value)
        )
        customers = session.scalar(select(func.count(func.distinct(Order.principal_id))))

    return OrderStatistics(
        total_orders=sum(by_status.values()),
        total_revenue=Decimal(str(revenue or 0)).quantize(Decimal("0.01")),
        total_customers=customers or 0,
        by_status=by_status,
    )

"""Order, OrderLine and OrderStatusChange.

An order is created fully priced and never recomputed: every line keeps
the name and unit price it had at commit time, and
``total == subtotal + tax + shipping_fee``. Status moves through a closed
transition table; every move (including the initial ``pending``) is
appended to ``status_changes``. The ``version`` column makes concurrent
status updates of the same order fail instead of overwriting each other.

State Machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED
    CANCELLED (from PENDING, PROCESSING)
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, composite, mapped_column, relationship

from shared.database import Base
from shared.exceptions import InvalidTransition, ValidationError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "cod"
    CARD = "card"
    UPI = "upi"
    NET_BANKING = "netbanking"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def parse_status(value) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).lower())
    except ValueError:
        allowed = ", ".join(status.value for status in OrderStatus)
        raise ValidationError({"status": [f"Unknown status {value!r}; expected one of {allowed}"]}) from None


def parse_payment_method(value) -> PaymentMethod:
    if isinstance(value, PaymentMethod):
        return value
    try:
        return PaymentMethod(str(value).lower())
    except ValueError:
        allowed = ", ".join(method.value for method in PaymentMethod)
        raise ValidationError({"payment_method": [f"Unknown payment method {value!r}; expected one of {allowed}"]}) from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@dataclass
class ShippingAddress:
    """Where the order goes, captured at checkout and never updated afterwards."""

    name: str
    phone: str
    address: str
    city: str
    pincode: str
    state: str | None = None
    email: str | None = None


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
class OrderLine(Base):
    __tablename__ = "order_lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(String(64), ForeignKey("orders.id"), nullable=False, index=True)
    item_id: Mapped[str] = mapped_column(String(64), nullable=False)
    item_type: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    line_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    seller_id: Mapped[str | None] = mapped_column(String(128), index=True)

    order: Mapped["Order"] = relationship(back_populates="lines")


class OrderStatusChange(Base):
    __tablename__ = "order_status_changes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(String(64), ForeignKey("orders.id"), nullable=False, index=True)
    from_status: Mapped[str | None] = mapped_column(String(20))
    to_status: Mapped[str] = mapped_column(String(20), nullable=False)
    changed_by: Mapped[str] = mapped_column(String(128), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    order: Mapped["Order"] = relationship(back_populates="status_changes")


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
class Order(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))
    principal_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    shipping_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False)
    shipping_address: Mapped[ShippingAddress] = composite(
        mapped_column("ship_name", String(255)),
        mapped_column("ship_phone", String(20)),
        mapped_column("ship_address", String(500)),
        mapped_column("ship_city", String(100)),
        mapped_column("ship_pincode", String(20)),
        mapped_column("ship_state", String(100)),
        mapped_column("ship_email", String(255)),
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    lines: Mapped[list[OrderLine]] = relationship(
        back_populates="order", cascade="all, delete-orphan", order_by=OrderLine.id, lazy="selectin"
    )
    status_changes: Mapped[list[OrderStatusChange]] = relationship(
        back_populates="order", cascade="all, delete-orphan", order_by=OrderStatusChange.id, lazy="selectin"
    )

    __mapper_args__ = {"version_id_col": version}

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, principal_id, lines, pricing, payment_method, shipping_address, currency):
        """Create a pending order from already-priced lines.

        Args:
            principal_id: The principal placing the order.
            lines: OrderLine instances carrying name and price snapshots.
            pricing: PricingResult computed over exactly these lines.
            payment_method: PaymentMethod.
            shipping_address: ShippingAddress.
            currency: ISO currency code.
        """
        if not lines:
            raise ValidationError({"lines": ["An order needs at least one line"]})
        if pricing.total != pricing.subtotal + pricing.tax + pricing.shipping_fee:
            raise ValidationError({"total": ["Total must equal subtotal + tax + shipping fee"]})

        now = datetime.now(UTC)
        order = cls(
            id=str(uuid4()),
            principal_id=principal_id,
            status=OrderStatus.PENDING.value,
            subtotal=pricing.subtotal,
            tax=pricing.tax,
            shipping_fee=pricing.shipping_fee,
            total=pricing.total,
            currency=currency,
            payment_method=payment_method.value,
            shipping_address=shipping_address,
            created_at=now,
            updated_at=now,
            lines=list(lines),
            status_changes=[],
        )
        order.status_changes.append(
            OrderStatusChange(
                from_status=None,
                to_status=OrderStatus.PENDING.value,
                changed_by=principal_id,
                changed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[OrderStatus(self.status)]

    def can_transition_to(self, target_status: OrderStatus) -> bool:
        return target_status in _VALID_TRANSITIONS.get(OrderStatus(self.status), set())

    def assert_can_transition(self, target_status: OrderStatus):
        """Validate that the current state allows transition to target."""
        if not self.can_transition_to(target_status):
            raise InvalidTransition(self.status, target_status.value)

    def transition_to(self, target_status: OrderStatus, changed_by: str) -> OrderStatusChange:
        """Move to ``target_status`` and append the history row."""
        self.assert_can_transition(target_status)

        now = datetime.now(UTC)
        change = OrderStatusChange(
            from_status=self.status,
            to_status=target_status.value,
            changed_by=changed_by,
            changed_at=now,
        )
        self.status = target_status.value
        self.updated_at = now
        self.status_changes.append(change)
        return change

    @property
    def seller_ids(self) -> set[str | None]:
        return {line.seller_id for line in self.lines}

"""Cart and CartLine: a principal's pending selection of items.

A cart is keyed by its principal (a user id, or ``session:<id>`` for a
guest) and holds at most one line per item. The unit price on a line is a
snapshot taken when it was added; checkout always re-reads current prices.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory.stock.stock import require_quantity
from shared.database import Base
from shared.exceptions import ObjectNotFoundError, ValidationError


def _now() -> datetime:
    return datetime.now(UTC)


class CartLine(Base):
    __tablename__ = "cart_lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    cart_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("carts.principal_id", ondelete="CASCADE"), nullable=False, index=True
    )
    item_id: Mapped[str] = mapped_column(String(64), nullable=False)
    item_type: Mapped[str] = mapped_column(String(20), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    cart: Mapped["Cart"] = relationship(back_populates="lines")

    __table_args__ = (
        UniqueConstraint("cart_id", "item_id", name="uq_cart_lines_cart_item"),
        CheckConstraint("quantity >= 1", name="ck_cart_lines_quantity_positive"),
    )

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart(Base):
    __tablename__ = "carts"

    principal_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    lines: Mapped[list[CartLine]] = relationship(
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by=CartLine.id,
        lazy="selectin",
    )

    @classmethod
    def create(cls, principal_id: str):
        if not principal_id:
            raise ValidationError({"principal_id": ["A cart needs an owner"]})
        now = _now()
        return cls(principal_id=principal_id, created_at=now, updated_at=now, lines=[])

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def find_line(self, item_id: str) -> CartLine | None:
        return next((line for line in self.lines if line.item_id == item_id), None)

    def add_line(self, item_id: str, item_type: str, unit_price: Decimal, quantity: int = 1) -> CartLine:
        """Add an item, or increase the quantity of its existing line."""
        require_quantity(quantity)

        line = self.find_line(item_id)
        if line is not None:
            line.quantity += quantity
            line.unit_price = unit_price
        else:
            line = CartLine(item_id=item_id, item_type=item_type, unit_price=unit_price, quantity=quantity)
            self.lines.append(line)

        self.updated_at = _now()
        return line

    def update_line_quantity(self, item_id: str, quantity: int) -> CartLine | None:
        """Set a line's quantity. Zero or less removes the line (and returns None)."""
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError({"quantity": ["Quantity must be a whole number"]})

        line = self.find_line(item_id)
        if line is None:
            raise ObjectNotFoundError(f"Item {item_id} is not in the cart")

        if quantity <= 0:
            self.lines.remove(line)
            line = None
        else:
            line.quantity = quantity

        self.updated_at = _now()
        return line

    def remove_line(self, item_id: str) -> None:
        line = self.find_line(item_id)
        if line is None:
            raise ObjectNotFoundError(f"Item {item_id} is not in the cart")
        self.lines.remove(line)
        self.updated_at = _now()

    def clear(self) -> None:
        self.lines.clear()
        self.updated_at = _now()

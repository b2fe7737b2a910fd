"""Sellable items: the tagged union of products and services.

Both variants live in one table discriminated by ``item_type``. A Product
is stock-tracked (its count lives in the inventory ledger); a Service is
bookable and never stock-limited.
"""

from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from uuid import uuid4

from sqlalchemy import DateTime, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from shared.database import Base
from shared.exceptions import ValidationError

MINOR_UNIT = Decimal("0.01")


class ItemType(Enum):
    PRODUCT = "product"
    SERVICE = "service"


def to_price(value, field: str = "price") -> Decimal:
    """Coerce ``value`` to a positive Decimal with at most two decimal places."""
    if isinstance(value, bool):
        raise ValidationError({field: ["Price must be a number"]})
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError({field: ["Price must be a number"]}) from None

    if not price.is_finite() or price <= 0:
        raise ValidationError({field: ["Price must be greater than zero"]})
    if price != price.quantize(MINOR_UNIT):
        raise ValidationError({field: ["Price cannot have more than two decimal places"]})
    return price


def _now() -> datetime:
    return datetime.now(UTC)


class SellableItem(Base):
    __tablename__ = "sellable_items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))
    item_type: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    active: Mapped[bool] = mapped_column(default=True, nullable=False)
    seller_id: Mapped[str | None] = mapped_column(String(128), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    __mapper_args__ = {"polymorphic_on": "item_type"}

    @property
    def is_stock_tracked(self) -> bool:
        return self.item_type == ItemType.PRODUCT.value

    @staticmethod
    def _validate_name(name) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError({"name": ["Name is required"]})
        if len(name.strip()) > 255:
            raise ValidationError({"name": ["Name cannot exceed 255 characters"]})
        return name.strip()

    def change_price(self, new_price) -> Decimal:
        """Set a new current price. Returns the previous one."""
        previous = self.price
        self.price = to_price(new_price)
        self.updated_at = _now()
        return previous

    def deactivate(self) -> None:
        if not self.active:
            raise ValidationError({"active": ["Item is already inactive"]})
        self.active = False
        self.updated_at = _now()

    def activate(self) -> None:
        if self.active:
            raise ValidationError({"active": ["Item is already active"]})
        self.active = True
        self.updated_at = _now()


class Product(SellableItem):
    sku: Mapped[str | None] = mapped_column(String(50), nullable=True)

    __mapper_args__ = {"polymorphic_identity": ItemType.PRODUCT.value}

    @classmethod
    def create(cls, name, price, seller_id=None, sku=None, item_id=None):
        product = cls(
            name=cls._validate_name(name),
            price=to_price(price),
            seller_id=seller_id,
            sku=sku,
            active=True,
        )
        if item_id is not None:
            product.id = str(item_id)
        return product


class Service(SellableItem):
    duration_minutes: Mapped[int | None] = mapped_column(nullable=True)

    __mapper_args__ = {"polymorphic_identity": ItemType.SERVICE.value}

    @classmethod
    def create(cls, name, price, duration_minutes=None, seller_id=None, item_id=None):
        if duration_minutes is not None and (
            isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes < 1
        ):
            raise ValidationError({"duration_minutes": ["Duration must be a positive number of minutes"]})

        service = cls(
            name=cls._validate_name(name),
            price=to_price(price),
            duration_minutes=duration_minutes,
            seller_id=seller_id,
            active=True,
        )
        if item_id is not None:
            service.id = str(item_id)
        return service

"""Stock ledger: the authoritative available count per product.

Every decrement is a single conditional UPDATE
(``available = available - q WHERE available >= q``), so two transactions
racing for the last units cannot both succeed, and the check constraint
keeps ``available`` from ever going negative. Reads select the column
directly instead of loading ``StockEntry`` objects, so they always see the
row as it is inside the current transaction.
"""

from collections.abc import Iterable
from datetime import UTC, datetime

import structlog
from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, select, update
from sqlalchemy.orm import Mapped, Session, mapped_column

from shared.database import Base
from shared.exceptions import ObjectNotFoundError, ValidationError

logger = structlog.get_logger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


def require_quantity(quantity, field: str = "quantity", allow_zero: bool = False) -> int:
    """Reject anything that is not an integer count (``bool`` included)."""
    minimum = 0 if allow_zero else 1
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < minimum:
        qualifier = "zero or more" if allow_zero else "at least 1"
        raise ValidationError({field: [f"Quantity must be a whole number, {qualifier}"]})
    return quantity


class StockEntry(Base):
    __tablename__ = "stock_entries"

    product_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("sellable_items.id", ondelete="CASCADE"), primary_key=True
    )
    available: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    __table_args__ = (CheckConstraint("available >= 0", name="ck_stock_entries_available_non_negative"),)


class StockLedger:
    """Reads and writes stock counts within the caller's session/transaction."""

    def __init__(self, session: Session):
        self._session = session

    def open_entry(self, product_id: str, quantity: int = 0) -> None:
        require_quantity(quantity, allow_zero=True)
        self._session.add(StockEntry(product_id=product_id, available=quantity))
        self._session.flush()
        logger.info("Stock entry opened", product_id=product_id, available=quantity)

    def available(self, product_id: str) -> int | None:
        """Current count, or None when the product has no ledger entry."""
        return self._session.scalar(select(StockEntry.available).where(StockEntry.product_id == product_id))

    def levels(self, product_ids: Iterable[str]) -> dict[str, int]:
        ids = list(product_ids)
        if not ids:
            return {}
        rows = self._session.execute(
            select(StockEntry.product_id, StockEntry.available).where(StockEntry.product_id.in_(ids))
        )
        return {product_id: available for product_id, available in rows}

    def try_decrement(self, product_id: str, quantity: int) -> bool:
        """Atomically take ``quantity`` units. False when fewer are available."""
        require_quantity(quantity)
        result = self._session.execute(
            update(StockEntry)
            .where(StockEntry.product_id == product_id, StockEntry.available >= quantity)
            .values(available=StockEntry.available - quantity, updated_at=_now())
            .execution_options(synchronize_session=False)
        )
        succeeded = result.rowcount == 1
        if not succeeded:
            logger.info("Conditional stock decrement refused", product_id=product_id, quantity=quantity)
        return succeeded

    def increment(self, product_id: str, quantity: int) -> int:
        """Return ``quantity`` units to the ledger and give back the new count."""
        require_quantity(quantity)
        result = self._session.execute(
            update(StockEntry)
            .where(StockEntry.product_id == product_id)
            .values(available=StockEntry.available + quantity, updated_at=_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ObjectNotFoundError(f"No stock entry for product {product_id}")
        return self.available(product_id)

"""Error taxonomy shared by every GlowMart bounded context.

Business-level failures (shortfalls, empty carts, forbidden transitions) are
raised as subclasses of ``GlowMartError`` so the API layer can map them to
HTTP responses in one place. ``StorageFailure`` wraps any database error
raised inside a unit of work; by the time it reaches the caller the
transaction has already been rolled back.
"""

from dataclasses import asdict, dataclass


class GlowMartError(Exception):
    """Base class for all domain errors."""

    code = "GlowMartError"


class ValidationError(GlowMartError):
    """Malformed input, rejected before any state is read.

    ``messages`` maps a field name to a list of error strings, e.g.
    ``{"quantity": ["Quantity must be at least 1"]}``.
    """

    code = "ValidationError"

    def __init__(self, messages: dict[str, list[str]]):
        self.messages = messages
        super().__init__(messages)


class ObjectNotFoundError(GlowMartError):
    code = "ObjectNotFound"


@dataclass(frozen=True)
class Shortfall:
    """One cart line that cannot be satisfied from current stock."""

    item_id: str
    name: str
    requested: int
    available: int

    def to_dict(self) -> dict:
        return asdict(self)


class StockShortfall(GlowMartError):
    """One or more lines exceed available stock. Recoverable by editing the cart."""

    code = "StockShortfall"

    def __init__(self, shortfalls: list[Shortfall]):
        self.shortfalls = list(shortfalls)
        summary = ", ".join(f"{s.item_id} (requested {s.requested}, available {s.available})" for s in self.shortfalls)
        super().__init__(f"Insufficient stock: {summary}")


class EmptyCart(GlowMartError):
    code = "EmptyCart"

    def __init__(self, principal_id: str):
        self.principal_id = principal_id
        super().__init__(f"Cart for {principal_id} has no lines")


class Forbidden(GlowMartError):
    code = "Forbidden"


class InvalidTransition(GlowMartError):
    code = "InvalidTransition"

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot transition from {current} to {requested}")


class StorageFailure(GlowMartError):
    """The durable store failed. Nothing was committed; the whole call is safe to retry."""

    code = "StorageFailure"

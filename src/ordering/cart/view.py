"""The cart as shown to its owner: lines at current prices plus a priced summary."""

from dataclasses import dataclass, field
from decimal import Decimal

from catalogue.item.item import ItemType
from catalogue.reader import CatalogueReader
from ordering.cart.items import load_cart
from ordering.pricing.engine import PriceLine, PricingEngine, PricingResult
from shared.database import read_session


@dataclass(frozen=True)
class CartViewLine:
    item_id: str
    item_type: str
    name: str | None
    unit_price: Decimal
    quantity: int
    line_total: Decimal
    available: bool


@dataclass(frozen=True)
class CartView:
    principal_id: str
    lines: list[CartViewLine] = field(default_factory=list)
    summary: PricingResult | None = None

    @property
    def product_count(self) -> int:
        return sum(line.quantity for line in self.lines if line.item_type == ItemType.PRODUCT.value)

    @property
    def service_count(self) -> int:
        return sum(line.quantity for line in self.lines if line.item_type == ItemType.SERVICE.value)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


def get_cart(principal_id: str, pricing_engine: PricingEngine | None = None) -> CartView:
    """Read the cart priced at current catalogue prices.

    Lines whose item was removed or deactivated are listed as unavailable
    and left out of the summary.
    """
    engine = pricing_engine or PricingEngine.from_settings()

    with read_session() as session:
        cart = load_cart(session, principal_id)
        if cart is None:
            return CartView(principal_id=principal_id, summary=engine.price([]))

        items = CatalogueReader(session).get_items(line.item_id for line in cart.lines)
        view_lines = []
        for line in cart.lines:
            item = items.get(line.item_id)
            available = item is not None and item.active
            unit_price = item.current_price if item is not None else line.unit_price
            view_lines.append(
                CartViewLine(
                    item_id=line.item_id,
                    item_type=line.item_type,
                    name=item.name if item is not None else None,
                    unit_price=unit_price,
                    quantity=line.quantity,
                    line_total=unit_price * line.quantity,
                    available=available,
                )
            )

    summary = engine.price(
        [PriceLine(line.item_id, line.unit_price, line.quantity) for line in view_lines if line.available]
    )
    return CartView(principal_id=principal_id, lines=view_lines, summary=summary)

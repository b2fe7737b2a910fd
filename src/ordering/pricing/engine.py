"""Order pricing.

Totals are computed on exact decimals and rounded half-up to the currency's
minor unit exactly once, on the grand total. Tax is whatever remains after
subtracting subtotal and shipping from that rounded total, so
``total == subtotal + tax + shipping_fee`` holds to the paisa on every
order. Unit prices must already be whole minor units (as catalogue prices
are), which keeps the subtotal exact.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from catalogue.item.item import MINOR_UNIT
from ordering.pricing.shipping import ShippingPolicy, get_shipping_policy
from shared.config import get_settings
from shared.exceptions import ValidationError

_ZERO = Decimal("0")


@dataclass(frozen=True)
class PriceLine:
    item_id: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class PricingResult:
    subtotal: Decimal
    tax: Decimal
    shipping_fee: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "subtotal": str(self.subtotal),
            "tax": str(self.tax),
            "shipping_fee": str(self.shipping_fee),
            "total": str(self.total),
        }


def _validate(lines: Sequence[PriceLine]) -> None:
    errors: dict[str, list[str]] = {}
    for line in lines:
        if isinstance(line.quantity, bool) or not isinstance(line.quantity, int) or line.quantity < 1:
            errors.setdefault("quantity", []).append(f"Quantity for {line.item_id} must be at least 1")
        price = line.unit_price
        if not isinstance(price, Decimal) or not price.is_finite() or price <= 0:
            errors.setdefault("unit_price", []).append(f"Unit price for {line.item_id} must be a positive amount")
        elif price != price.quantize(MINOR_UNIT):
            errors.setdefault("unit_price", []).append(f"Unit price for {line.item_id} has sub-unit precision")
    if errors:
        raise ValidationError(errors)


class PricingEngine:
    def __init__(self, tax_rate: Decimal, shipping_policy: ShippingPolicy):
        if tax_rate < 0:
            raise ValueError(f"Tax rate cannot be negative: {tax_rate}")
        self.tax_rate = tax_rate
        self.shipping_policy = shipping_policy

    @classmethod
    def from_settings(cls) -> "PricingEngine":
        return cls(tax_rate=get_settings().tax_rate, shipping_policy=get_shipping_policy())

    def price(self, lines: Sequence[PriceLine]) -> PricingResult:
        """Price a set of lines. Pure: the same input always gives the same result."""
        _validate(lines)

        subtotal = sum((line.line_total for line in lines), _ZERO).quantize(MINOR_UNIT)
        shipping_fee = self.shipping_policy.fee_for(subtotal) if lines else _ZERO.quantize(MINOR_UNIT)
        exact_total = subtotal + subtotal * self.tax_rate + shipping_fee
        total = exact_total.quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)

        return PricingResult(
            subtotal=subtotal,
            tax=total - subtotal - shipping_fee,
            shipping_fee=shipping_fee,
            total=total,
        )

"""Concrete shipping policies."""

from decimal import Decimal

from ordering.pricing.shipping.port import ShippingPolicy

_ZERO = Decimal("0.00")
_MINOR_UNIT = Decimal("0.01")


def _fee(value) -> Decimal:
    fee = Decimal(str(value))
    if fee < 0:
        raise ValueError(f"Shipping fee cannot be negative: {value}")
    if fee != fee.quantize(_MINOR_UNIT):
        raise ValueError(f"Shipping fee must be in whole minor units: {value}")
    return fee.quantize(_MINOR_UNIT)


class FlatShippingFee(ShippingPolicy):
    """The same fee on every order. The default fee is zero (free shipping)."""

    def __init__(self, fee=_ZERO):
        self.fee = _fee(fee)

    def fee_for(self, subtotal: Decimal) -> Decimal:
        return self.fee


class FreeShippingOverThreshold(ShippingPolicy):
    """Charge ``fee`` unless the subtotal reaches ``threshold``."""

    def __init__(self, threshold, fee):
        self.threshold = Decimal(str(threshold))
        self.fee = _fee(fee)

    def fee_for(self, subtotal: Decimal) -> Decimal:
        if subtotal >= self.threshold:
            return _ZERO
        return self.fee

"""Shipping fee policy port.

A policy maps an order's merchandise subtotal to a shipping fee. The fee
is added before the single rounding step, so policies should return
amounts already expressed in whole minor units.
"""

from abc import ABC, abstractmethod
from decimal import Decimal


class ShippingPolicy(ABC):
    """Abstract shipping fee policy."""

    @abstractmethod
    def fee_for(self, subtotal: Decimal) -> Decimal:
        """Return the shipping fee charged on ``subtotal``."""

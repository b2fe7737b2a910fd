"""Shipping policy factory.

Provides get_shipping_policy() / set_shipping_policy() to swap policies:
- FlatShippingFee ("flat", default; fee from SHIPPING_FEE, zero unless set)
- FreeShippingOverThreshold ("threshold"; SHIPPING_FEE below FREE_SHIPPING_THRESHOLD)
"""

from ordering.pricing.shipping.policies import FlatShippingFee, FreeShippingOverThreshold
from ordering.pricing.shipping.port import ShippingPolicy
from shared.config import get_settings

_current_policy: ShippingPolicy | None = None


def _create_policy() -> ShippingPolicy:
    settings = get_settings()
    name = settings.shipping_policy.lower()
    if name == "flat":
        return FlatShippingFee(settings.shipping_fee)
    if name == "threshold":
        return FreeShippingOverThreshold(settings.free_shipping_threshold, settings.shipping_fee)
    raise ValueError(f"Unknown shipping policy: {settings.shipping_policy}")


def get_shipping_policy() -> ShippingPolicy:
    """Return the active shipping policy, created from settings on first use."""
    global _current_policy
    if _current_policy is None:
        _current_policy = _create_policy()
    return _current_policy


def set_shipping_policy(policy: ShippingPolicy) -> None:
    """Override the active shipping policy (useful for tests)."""
    global _current_policy
    _current_policy = policy


def reset_shipping_policy() -> None:
    """Reset to the policy configured in settings."""
    global _current_policy
    _current_policy = None


__all__ = [
    "FlatShippingFee",
    "FreeShippingOverThreshold",
    "ShippingPolicy",
    "get_shipping_policy",
    "reset_shipping_policy",
    "set_shipping_policy",
]

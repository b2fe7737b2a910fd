"""Who may see and drive an order."""

from dataclasses import dataclass

from identity.principal import Permission, Principal, Role
from identity.provider import get_identity_provider
from identity.provider.port import IdentityProvider
from ordering.order.order import Order


@dataclass(frozen=True)
class OrderAccess:
    is_owner: bool
    is_staff: bool
    is_seller: bool
    can_view_all: bool

    @property
    def has_standing(self) -> bool:
        """Any relationship to the order at all: owner, staff, or seller of every line."""
        return self.is_owner or self.is_staff or self.is_seller

    @property
    def can_view(self) -> bool:
        return self.has_standing or self.can_view_all


def is_staff(principal: Principal, provider: IdentityProvider | None = None) -> bool:
    provider = provider or get_identity_provider()
    return provider.has_role(principal, Role.ADMIN) or provider.has_permission(principal, Permission.MANAGE_ORDERS)


def can_view_all_orders(principal: Principal, provider: IdentityProvider | None = None) -> bool:
    provider = provider or get_identity_provider()
    return is_staff(principal, provider) or provider.has_permission(principal, Permission.VIEW_ALL_ORDERS)


def access_for(order: Order, principal: Principal, provider: IdentityProvider | None = None) -> OrderAccess:
    provider = provider or get_identity_provider()
    sells_every_line = (
        not principal.anonymous
        and provider.has_role(principal, Role.SELLER)
        and order.seller_ids == {principal.principal_id}
    )
    return OrderAccess(
        is_owner=order.principal_id == principal.principal_id,
        is_staff=is_staff(principal, provider),
        is_seller=sells_every_line,
        can_view_all=can_view_all_orders(principal, provider),
    )

"""The acting principal as handed to the engine by the session layer.

Authentication and role storage live outside GlowMart; the engine only sees
an identifier plus the role and permission names the upstream layer resolved.
Anonymous shoppers are principals too, keyed by their session id.
"""

from dataclasses import dataclass, field
from enum import Enum


class Role(Enum):
    ADMIN = "admin"
    SELLER = "seller"
    CUSTOMER = "customer"


class Permission(Enum):
    MANAGE_ORDERS = "manage_orders"
    VIEW_ALL_ORDERS = "view_all_orders"
    MANAGE_CATALOGUE = "manage_catalogue"
    MANAGE_INVENTORY = "manage_inventory"


@dataclass(frozen=True)
class Principal:
    principal_id: str
    roles: frozenset[str] = field(default_factory=frozenset)
    permissions: frozenset[str] = field(default_factory=frozenset)
    anonymous: bool = False

    @classmethod
    def for_session(cls, session_id: str) -> "Principal":
        return cls(principal_id=f"session:{session_id}", anonymous=True)

"""Identity provider port (abstract interface).

Role and permission lookups are owned by an external identity service. The
engine programs against this port so the lookup can be swapped without
touching ordering code.
"""

from abc import ABC, abstractmethod

from identity.principal import Permission, Principal, Role


class IdentityProvider(ABC):
    """Abstract role/permission lookup."""

    @abstractmethod
    def has_role(self, principal: Principal, role: Role) -> bool:
        """Return True if the principal holds the role."""
        ...

    @abstractmethod
    def has_permission(self, principal: Principal, permission: Permission) -> bool:
        """Return True if the principal holds the permission, directly or through a role."""
        ...

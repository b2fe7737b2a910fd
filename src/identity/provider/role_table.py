"""Identity provider backed by a static role → permission table."""

from identity.principal import Permission, Principal, Role
from identity.provider.port import IdentityProvider

DEFAULT_ROLE_GRANTS: dict[Role, frozenset[Permission]] = {
    Role.ADMIN: frozenset(Permission),
    Role.SELLER: frozenset(),
    Role.CUSTOMER: frozenset(),
}


class RoleTableProvider(IdentityProvider):
    def __init__(self, grants: dict[Role, frozenset[Permission]] | None = None):
        self._grants = grants if grants is not None else DEFAULT_ROLE_GRANTS

    def has_role(self, principal: Principal, role: Role) -> bool:
        return role.value in principal.roles

    def has_permission(self, principal: Principal, permission: Permission) -> bool:
        if permission.value in principal.permissions:
            return True

        for role_name in principal.roles:
            try:
                role = Role(role_name)
            except ValueError:
                continue
            if permission in self._grants.get(role, frozenset()):
                return True
        return False

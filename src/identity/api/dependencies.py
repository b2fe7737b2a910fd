"""Resolve the acting principal from the headers set by the session layer.

``X-Principal-Id`` identifies a signed-in user; a guest sends only
``X-Session-Id``. Roles and permissions arrive as comma-separated names.
"""

from typing import Annotated

from fastapi import Depends, Header, HTTPException

from identity.principal import Permission, Principal
from identity.provider import get_identity_provider
from shared.utils.logging import add_context


def _names(header: str) -> frozenset[str]:
    return frozenset(name.strip().lower() for name in header.split(",") if name.strip())


async def current_principal(
    x_principal_id: Annotated[str | None, Header()] = None,
    x_session_id: Annotated[str | None, Header()] = None,
    x_principal_roles: Annotated[str, Header()] = "",
    x_principal_permissions: Annotated[str, Header()] = "",
) -> Principal:
    if x_principal_id:
        principal = Principal(
            principal_id=x_principal_id,
            roles=_names(x_principal_roles),
            permissions=_names(x_principal_permissions),
        )
    elif x_session_id:
        principal = Principal.for_session(x_session_id)
    else:
        raise HTTPException(status_code=401, detail="No principal on request")

    add_context(principal_id=principal.principal_id)
    return principal


CurrentPrincipal = Annotated[Principal, Depends(current_principal)]


def require_permission(permission: Permission):
    """Dependency factory: the current principal must hold ``permission``."""

    def _check(principal: CurrentPrincipal) -> Principal:
        if not get_identity_provider().has_permission(principal, permission):
            raise HTTPException(status_code=403, detail=f"Missing permission {permission.value}")
        return principal

    return _check

"""Identity provider factory.

Provides get_identity_provider() / set_identity_provider() to swap the
role/permission lookup (the static role table by default).
"""

from identity.provider.port import IdentityProvider
from identity.provider.role_table import RoleTableProvider

_current_provider: IdentityProvider | None = None


def get_identity_provider() -> IdentityProvider:
    """Return the current identity provider. Defaults to RoleTableProvider."""
    global _current_provider
    if _current_provider is None:
        _current_provider = RoleTableProvider()
    return _current_provider


def set_identity_provider(provider: IdentityProvider) -> None:
    """Override the active identity provider (useful for tests)."""
    global _current_provider
    _current_provider = provider


def reset_identity_provider() -> None:
    """Reset to the default provider."""
    global _current_provider
    _current_provider = None

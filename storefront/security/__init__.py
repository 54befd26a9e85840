# Request dependencies and role gating

from .roles import (
    AuthContext,
    RoleGate,
    get_state,
    get_browsing_session,
    get_cart,
    optional_token,
    require_user,
    require_admin,
    require_superuser,
)

__all__ = [
    "AuthContext",
    "RoleGate",
    "get_state",
    "get_browsing_session",
    "get_cart",
    "optional_token",
    "require_user",
    "require_admin",
    "require_superuser",
]

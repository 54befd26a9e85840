"""
Request dependencies: application state, browsing session, and role gating.

Role gates only decide which screens a browser may reach. The bearer token
forwarded to the backend is what actually gets authorized there.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from fastapi import Depends, HTTPException, Request, Response

from ..cart import CartEngine
from ..core.session import AuthSession, BrowsingSession
from ..core.state import StorefrontState
from ..models.user import User, UserRole

logger = logging.getLogger(__name__)


def get_state(request: Request) -> StorefrontState:
    return request.app.state.storefront


def get_browsing_session(
    request: Request,
    response: Response,
    state: StorefrontState = Depends(get_state),
) -> BrowsingSession:
    """Resolve the browsing session from its cookie, issuing one if needed"""
    cookie_name = state.settings.session_cookie_name
    session = state.sessions.get_or_create_session(request.cookies.get(cookie_name))
    if request.cookies.get(cookie_name) != session.session_id:
        state.sessions.cleanup_old_sessions(state.settings.session_max_age_hours)
        response.set_cookie(
            cookie_name,
            session.session_id,
            max_age=state.settings.session_max_age_hours * 3600,
            httponly=True,
            samesite="lax",
        )
    return session


def get_cart(
    session: BrowsingSession = Depends(get_browsing_session),
    state: StorefrontState = Depends(get_state),
) -> CartEngine:
    return state.cart_for(session)


@dataclass
class AuthContext:
    """Signed-in caller resolved for a request"""
    session: BrowsingSession
    auth: AuthSession
    user: User
    token: str


class RoleGate:
    """
    FastAPI dependency that requires a signed-in user.

    Use with allowed_roles to restrict a route to staff roles.
    """

    def __init__(self, allowed_roles: Optional[Iterable[UserRole]] = None):
        """
        Args:
            allowed_roles: If given, reject users whose role is not listed
        """
        self.allowed_roles = frozenset(allowed_roles) if allowed_roles else None

    async def __call__(
        self,
        session: BrowsingSession = Depends(get_browsing_session),
        state: StorefrontState = Depends(get_state),
    ) -> AuthContext:
        token = await state.auth.ensure_fresh(session)
        if not token or not session.auth:
            raise HTTPException(status_code=401, detail="Please sign in to continue")

        user = session.auth.profile
        if user is None:
            user = await state.auth.refresh_profile(session)
        if user is None:
            raise HTTPException(status_code=401, detail="Account profile not found")

        if self.allowed_roles is not None and user.role not in self.allowed_roles:
            logger.warning(f"User {user.id} with role {user.role.value} denied staff route")
            raise HTTPException(status_code=403, detail="You do not have access to this page")

        return AuthContext(session=session, auth=session.auth, user=user, token=token)


async def optional_token(
    session: BrowsingSession = Depends(get_browsing_session),
    state: StorefrontState = Depends(get_state),
) -> Optional[str]:
    """Bearer for public reads; None falls back to the anon key"""
    return await state.auth.ensure_fresh(session)


# Dependency instances
require_user = RoleGate()
require_admin = RoleGate(allowed_roles=[UserRole.ADMIN, UserRole.SUPERUSER])
require_superuser = RoleGate(allowed_roles=[UserRole.SUPERUSER])

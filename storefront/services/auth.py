"""
Auth Service

Signs shoppers and staff in against the backend's auth endpoint, keeps their
bearer token fresh, and loads the users profile that carries the role.
Roles drive navigation gating only; the backend enforces authorization with
the token itself.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

import jwt

from ..core.session import AuthSession, BrowsingSession
from ..gateway import GatewayClient, Query
from ..models.user import User
from .errors import AuthError

logger = logging.getLogger(__name__)

AuthListener = Callable[[str, BrowsingSession], None]

SIGNED_IN = "signed_in"
SIGNED_OUT = "signed_out"
TOKEN_REFRESHED = "token_refreshed"


class AuthService:
    """Session store over the backend auth API"""

    def __init__(
        self,
        gateway: GatewayClient,
        jwt_secret: Optional[str] = None,
        refresh_margin_seconds: int = 300,
    ):
        self.gateway = gateway
        self.jwt_secret = jwt_secret
        self.refresh_margin = timedelta(seconds=refresh_margin_seconds)
        self._listeners: list[AuthListener] = []

    # ==================== Listeners ====================

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register a sign-in/sign-out listener; returns an unsubscribe callable"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, session: BrowsingSession) -> None:
        for listener in list(self._listeners):
            listener(event, session)

    # ==================== Tokens ====================

    def decode_token(self, token: str) -> dict:
        """Read the access token claims"""
        try:
            if self.jwt_secret:
                return jwt.decode(
                    token,
                    self.jwt_secret,
                    algorithms=["HS256"],
                    options={"verify_aud": False},
                )
            return jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError as e:
            raise AuthError(f"Invalid access token: {e}", code="invalid_token")

    def _auth_session_from(self, payload: dict) -> AuthSession:
        access_token = payload.get("access_token")
        if not access_token:
            raise AuthError("Authentication failed", code="no_token")

        claims = self.decode_token(access_token)
        user = payload.get("user") or {}

        if claims.get("exp"):
            expires_at = datetime.utcfromtimestamp(claims["exp"])
        elif payload.get("expires_in"):
            expires_at = datetime.utcnow() + timedelta(seconds=int(payload["expires_in"]))
        else:
            expires_at = None

        user_id = user.get("id") or claims.get("sub")
        if not user_id:
            raise AuthError("Authentication failed", code="no_subject")

        return AuthSession(
            access_token=access_token,
            refresh_token=payload.get("refresh_token"),
            expires_at=expires_at,
            user_id=user_id,
            email=user.get("email") or claims.get("email"),
        )

    def needs_refresh(self, auth: AuthSession, now: Optional[datetime] = None) -> bool:
        if auth.expires_at is None:
            return False
        now = now or datetime.utcnow()
        return now >= auth.expires_at - self.refresh_margin

    # ==================== Profile ====================

    async def fetch_profile(self, user_id: str, token: str) -> Optional[User]:
        result = await self.gateway.query("users", Query().eq("id", user_id).one(), token)
        if not result.ok:
            logger.error(f"Error fetching user profile {user_id}: {result.error.message}")
            return None
        return User.model_validate(result.data)

    async def refresh_profile(self, session: BrowsingSession) -> Optional[User]:
        if not session.auth:
            return None
        session.auth.profile = await self.fetch_profile(session.auth.user_id, session.auth.access_token)
        return session.auth.profile

    # ==================== Flows ====================

    async def sign_up(self, email: str, password: str, full_name: str) -> None:
        result = await self.gateway.auth_request(
            "POST",
            "signup",
            body={
                "email": email,
                "password": password,
                "data": {"full_name": full_name},
            },
        )
        if not result.ok:
            raise AuthError(result.error.message, code=result.error.code)
        logger.info(f"Registered account for {email}")

    async def sign_in(self, session: BrowsingSession, email: str, password: str) -> AuthSession:
        result = await self.gateway.auth_request(
            "POST",
            "token",
            body={"email": email, "password": password},
            params={"grant_type": "password"},
        )
        if not result.ok:
            raise AuthError(result.error.message, code=result.error.code)

        auth = self._auth_session_from(result.data or {})
        auth.profile = await self.fetch_profile(auth.user_id, auth.access_token)
        session.sign_in(auth)

        logger.info(f"Session {session.session_id} signed in as {auth.user_id}")
        self._notify(SIGNED_IN, session)
        return auth

    async def sign_out(self, session: BrowsingSession) -> None:
        if not session.auth:
            return

        result = await self.gateway.auth_request("POST", "logout", token=session.auth.access_token)
        if not result.ok:
            # Local sign-out still happens; the token simply expires server-side
            logger.warning(f"Remote sign-out failed for session {session.session_id}: {result.error.message}")

        user_id = session.auth.user_id
        session.sign_out()
        logger.info(f"Session {session.session_id} signed out ({user_id})")
        self._notify(SIGNED_OUT, session)

    async def refresh(self, session: BrowsingSession) -> Optional[AuthSession]:
        """Exchange the refresh token; a failed refresh signs the session out"""
        auth = session.auth
        if not auth:
            return None

        if not auth.refresh_token:
            logger.warning(f"Session {session.session_id} token expired without a refresh token")
            session.sign_out()
            self._notify(SIGNED_OUT, session)
            return None

        result = await self.gateway.auth_request(
            "POST",
            "token",
            body={"refresh_token": auth.refresh_token},
            params={"grant_type": "refresh_token"},
        )

        refreshed = None
        if result.ok:
            try:
                refreshed = self._auth_session_from(result.data or {})
            except AuthError as e:
                logger.warning(f"Refreshed token rejected for session {session.session_id}: {e.message}")
        else:
            logger.warning(f"Token refresh failed for session {session.session_id}: {result.error.message}")

        if refreshed is None:
            session.sign_out()
            self._notify(SIGNED_OUT, session)
            return None

        refreshed.profile = auth.profile
        session.sign_in(refreshed)
        logger.info(f"Refreshed access token for session {session.session_id}")
        self._notify(TOKEN_REFRESHED, session)
        return refreshed

    async def ensure_fresh(self, session: BrowsingSession) -> Optional[str]:
        """Return a usable access token, refreshing it when close to expiry"""
        if not session.auth:
            return None
        if self.needs_refresh(session.auth):
            if await self.refresh(session) is None:
                return None
        return session.access_token

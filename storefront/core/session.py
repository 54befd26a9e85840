"""Browsing session management"""

import uuid
import asyncio
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from dataclasses import dataclass, field

from ..models.user import User, UserRole

if TYPE_CHECKING:
    from ..cart import CartEngine


@dataclass
class AuthSession:
    """Signed-in identity and its bearer credentials"""
    access_token: str
    refresh_token: Optional[str]
    expires_at: Optional[datetime]
    user_id: str
    email: Optional[str] = None
    profile: Optional[User] = None

    @property
    def role(self) -> Optional[UserRole]:
        return self.profile.role if self.profile else None

    @property
    def is_customer(self) -> bool:
        return self.role == UserRole.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.SUPERUSER)

    @property
    def is_superuser(self) -> bool:
        return self.role == UserRole.SUPERUSER


@dataclass
class BrowsingSession:
    """One browser's session; scopes the cart and an optional sign-in"""
    session_id: str
    created_at: datetime
    updated_at: datetime
    auth: Optional[AuthSession] = None
    cart: Optional["CartEngine"] = None
    # Held for the whole of a checkout so one cart is ordered once
    checkout_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def is_authenticated(self) -> bool:
        return self.auth is not None

    @property
    def access_token(self) -> Optional[str]:
        return self.auth.access_token if self.auth else None

    @property
    def user(self) -> Optional[User]:
        return self.auth.profile if self.auth else None

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()

    def sign_in(self, auth: AuthSession) -> None:
        self.auth = auth
        self.touch()

    def sign_out(self) -> None:
        self.auth = None
        self.touch()


class SessionManager:
    """Manages browsing sessions"""

    def __init__(self):
        self.sessions: dict[str, BrowsingSession] = {}

    def create_session(self) -> BrowsingSession:
        """Create a new session"""
        now = datetime.utcnow()
        session = BrowsingSession(
            session_id=uuid.uuid4().hex,
            created_at=now,
            updated_at=now,
        )
        self.sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[BrowsingSession]:
        """Get session by ID"""
        return self.sessions.get(session_id)

    def get_or_create_session(self, session_id: Optional[str] = None) -> BrowsingSession:
        """Get existing session or create new one"""
        if session_id and session_id in self.sessions:
            session = self.sessions[session_id]
            session.touch()
            return session
        if session_id and _is_valid_session_id(session_id):
            # Known cookie from before a restart: keep the id so the stored cart is found
            now = datetime.utcnow()
            session = BrowsingSession(session_id=session_id, created_at=now, updated_at=now)
            self.sessions[session_id] = session
            return session
        return self.create_session()

    def delete_session(self, session_id: str) -> bool:
        """Delete a session"""
        if session_id in self.sessions:
            del self.sessions[session_id]
            return True
        return False

    def cleanup_old_sessions(self, max_age_hours: int = 24) -> int:
        """Remove sessions older than max_age_hours"""
        now = datetime.utcnow()
        old_sessions = [
            sid for sid, session in self.sessions.items()
            if (now - session.updated_at).total_seconds() > max_age_hours * 3600
        ]
        for sid in old_sessions:
            del self.sessions[sid]
        return len(old_sessions)


def _is_valid_session_id(session_id: str) -> bool:
    return len(session_id) == 32 and all(c in "0123456789abcdef" for c in session_id)

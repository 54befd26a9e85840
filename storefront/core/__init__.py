# Core configuration, sessions and application state

from .config import Settings, get_settings
from .session import AuthSession, BrowsingSession, SessionManager

__all__ = ["Settings", "get_settings", "AuthSession", "BrowsingSession", "SessionManager"]

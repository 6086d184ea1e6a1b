"""User management: accounts, sessions and authentication."""
from .auth_service import AuthService, LoginResult
from .context import RequestUserContext
from .session_manager import SessionManager
from .user_store import UserStore

__all__ = [
    "AuthService",
    "LoginResult",
    "RequestUserContext",
    "SessionManager",
    "UserStore",
]

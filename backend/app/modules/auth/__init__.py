"""
Auth Module - Accounts and sessions.

Features:
- Registration with field rules
- Login with bcrypt password verification
- Cookie-bound sessions (memory or Redis)
"""

from app.modules.auth.security import PasswordHasher, get_password_hasher
from app.modules.auth.service import AuthenticatedSession, AuthService
from app.modules.auth.sessions import (
    MemorySessionStore,
    RedisSessionStore,
    SessionStore,
    SessionUser,
    build_session_store,
)

__all__ = [
    "AuthService",
    "AuthenticatedSession",
    "MemorySessionStore",
    "PasswordHasher",
    "RedisSessionStore",
    "SessionStore",
    "SessionUser",
    "build_session_store",
    "get_password_hasher",
]

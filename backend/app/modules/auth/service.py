"""
Auth Service - Registration, login and session lifecycle.
"""

import re
from dataclasses import dataclass

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ErrorKind, Result, guard_store
from app.models.user import User
from app.modules.auth.security import PasswordHasher, get_password_hasher
from app.modules.auth.sessions import SessionStore, SessionUser, new_session_token

USERNAME_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 8
INVALID_CREDENTIALS = "Invalid username or password"

_USERNAME_PATTERN = re.compile(r"[A-Za-z0-9_]+")
_DIGIT = re.compile(r"[0-9]")


@dataclass(frozen=True)
class AuthenticatedSession:
    """Session issued by a successful register or login."""

    token: str
    user: SessionUser


def validate_registration(
    username: str,
    password: str,
    confirm_password: str,
    accepted_terms: bool,
) -> str | None:
    """
    Check registration fields in order.

    Args:
        username: Already trimmed username

    Returns:
        Message for the first failing rule, None if all pass
    """
    if not username:
        return "Username required"
    if len(username) < USERNAME_MIN_LENGTH:
        return f"Username must be at least {USERNAME_MIN_LENGTH} chars"
    if not _USERNAME_PATTERN.fullmatch(username):
        return "Username can use letters/numbers/_"

    if not password:
        return "Password required"
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} chars"
    if not _DIGIT.search(password):
        return "Password must contain a number"
    if "\x00" in password:
        return "Password cannot contain null characters"

    if password != confirm_password:
        return "Passwords do not match"
    if accepted_terms is not True:
        return "You must accept the terms"

    return None


class AuthService:
    """
    Service for user registration and session management.

    Usage:
        auth = AuthService(db_session, session_store)
        result = await auth.login("alice1", "abcd1234")
        session = result.unwrap()
    """

    def __init__(
        self,
        db: AsyncSession,
        sessions: SessionStore,
        hasher: PasswordHasher | None = None,
    ) -> None:
        """Initialize auth service with database session and session store."""
        self.db = db
        self.sessions = sessions
        self.hasher = hasher or get_password_hasher()

    async def _start_session(
        self,
        user: SessionUser,
        previous_token: str | None,
    ) -> AuthenticatedSession:
        if previous_token:
            await self.sessions.destroy(previous_token)

        token = new_session_token()
        await self.sessions.set(token, user)
        return AuthenticatedSession(token=token, user=user)

    @guard_store(ValueError)
    async def register(
        self,
        username: str | None,
        password: str | None,
        confirm_password: str | None,
        accepted_terms: bool,
        previous_token: str | None = None,
    ) -> Result[AuthenticatedSession]:
        """
        Register new user and open a session.

        Args:
            username: Requested username (trimmed before checks)
            password: Plain password
            confirm_password: Must equal password
            accepted_terms: Must be True
            previous_token: Session token the client already holds

        Returns:
            Session for the created user, or VALIDATION / CONFLICT failure
        """
        username = (username or "").strip()
        password = password or ""
        confirm_password = confirm_password or ""

        problem = validate_registration(username, password, confirm_password, accepted_terms)
        if problem:
            return Result.failure(ErrorKind.VALIDATION, problem)

        existing = await self.db.execute(
            select(User.id).where(User.username == username).limit(1)
        )
        if existing.scalar_one_or_none() is not None:
            return Result.failure(ErrorKind.CONFLICT, "Username already exists")

        user = User(
            username=username,
            password_hash=await self.hasher.hash(password),
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            await self.db.rollback()
            return Result.failure(ErrorKind.CONFLICT, "Username already exists")

        logger.info(f"Registered user {user.username} (id={user.id})")

        session = await self._start_session(
            SessionUser(id=user.id, username=user.username),
            previous_token,
        )
        return Result.success(session)

    @guard_store(ValueError)
    async def login(
        self,
        username: str | None,
        password: str | None,
        previous_token: str | None = None,
    ) -> Result[AuthenticatedSession]:
        """
        Verify credentials and open a session.

        Unknown usernames and wrong passwords fail with the same
        AUTH message.
        """
        username = (username or "").strip()
        password = password or ""

        if not username or not password:
            return Result.failure(ErrorKind.VALIDATION, "Username and password required")

        query = select(User).where(User.username == username).limit(1)
        result = await self.db.execute(query)
        user = result.scalar_one_or_none()

        if user is None:
            await self.hasher.dummy_verify()
            logger.warning(f"Failed login for {username}")
            return Result.failure(ErrorKind.AUTH, INVALID_CREDENTIALS)

        try:
            matches = await self.hasher.verify(password, user.password_hash)
        except ValueError:
            # bcrypt refuses some secrets (e.g. NUL bytes); they never match
            matches = False

        if not matches:
            logger.warning(f"Failed login for {username}")
            return Result.failure(ErrorKind.AUTH, INVALID_CREDENTIALS)

        logger.info(f"User {user.username} logged in")

        session = await self._start_session(
            SessionUser(id=user.id, username=user.username),
            previous_token,
        )
        return Result.success(session)

    async def logout(self, token: str | None) -> None:
        """Destroy session. Missing or unknown tokens are fine."""
        if not token:
            return
        await self.sessions.destroy(token)
        logger.info("Session closed")

    async def current_user(self, token: str | None) -> SessionUser | None:
        """Get the user for a session token, None if unauthenticated."""
        if not token:
            return None
        return await self.sessions.get(token)

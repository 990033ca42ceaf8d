"""
Shared API dependencies.

Session store lookup, cookie handling and current-user resolution.
"""

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.errors import APIError, ErrorKind, ServiceError
from app.modules.auth import AuthService, SessionStore, SessionUser
from app.modules.forum import ForumService
from app.modules.forum.service import NOT_LOGGED_IN


def get_session_store(request: Request) -> SessionStore:
    """Session store created by the application factory."""
    return request.app.state.session_store


def get_session_token(request: Request) -> str | None:
    """Session token from the request cookie."""
    return request.cookies.get(settings.session_cookie_name)


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
) -> AuthService:
    return AuthService(db, sessions)


def get_forum_service(db: AsyncSession = Depends(get_db)) -> ForumService:
    return ForumService(db)


async def get_current_user(
    token: str | None = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
) -> SessionUser | None:
    """Authenticated user for this request, None if anonymous."""
    return await auth.current_user(token)


async def require_user(
    user: SessionUser | None = Depends(get_current_user),
) -> SessionUser:
    """
    Authenticated user, or 401.

    Resolved before body fields are validated, so anonymous
    callers get 401 even when field types are wrong.
    """
    if user is None:
        raise APIError(ServiceError(ErrorKind.AUTH, NOT_LOGGED_IN))
    return user


def set_session_cookie(response: Response, token: str) -> None:
    """Attach HTTP-only, same-site session cookie."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )

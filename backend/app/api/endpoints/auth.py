"""
Auth API Endpoints.

Registration, login, logout and current session.
"""

from typing import Any

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.api.deps import (
    clear_session_cookie,
    get_auth_service,
    get_current_user,
    get_session_token,
    set_session_cookie,
)
from app.modules.auth import AuthService, SessionUser

router = APIRouter()


# ==================== Schemas ====================


class RegisterRequest(BaseModel):
    """Register new account."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    username: str | None = None
    password: str | None = None
    confirm_password: str | None = None
    accepted_terms: bool | None = None


class LoginRequest(BaseModel):
    """Log in with username and password."""

    username: str | None = None
    password: str | None = None


# ==================== Session ====================


@router.get("/me")
async def me(
    user: SessionUser | None = Depends(get_current_user),
) -> dict[str, Any]:
    """Get the logged-in user, or null."""
    return {"user": user.model_dump() if user else None}


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    response: Response,
    token: str | None = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
) -> dict[str, Any]:
    """Create account and log in."""
    result = await auth.register(
        username=request.username,
        password=request.password,
        confirm_password=request.confirm_password,
        accepted_terms=bool(request.accepted_terms),
        previous_token=token,
    )
    session = result.unwrap()

    set_session_cookie(response, session.token)
    return {"user": session.user.model_dump()}


@router.post("/login")
async def login(
    request: LoginRequest,
    response: Response,
    token: str | None = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
) -> dict[str, Any]:
    """Log in and start a session."""
    result = await auth.login(
        username=request.username,
        password=request.password,
        previous_token=token,
    )
    session = result.unwrap()

    set_session_cookie(response, session.token)
    return {"user": session.user.model_dump()}


@router.post("/logout")
async def logout(
    response: Response,
    token: str | None = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
) -> dict[str, Any]:
    """End the current session, if any."""
    await auth.logout(token)
    clear_session_cookie(response)
    return {"ok": True}

"""Authentication API endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Request

from src.api.dependencies import get_bearer_token, get_current_user, get_session_manager
from src.models.user import User
from src.schemas.auth import (
    AuthResponse,
    ErrorResponse,
    MessageResponse,
    UserEnvelope,
    UserLogin,
    UserRegister,
    UserResponse,
)
from src.services.session_manager import SessionManager

router = APIRouter(
    prefix="/api/v1/auth",
    tags=["auth"],
    responses={code: {"model": ErrorResponse} for code in (400, 401, 404)},
)


def client_metadata(request: Request) -> dict[str, str | None]:
    """Audit metadata stored alongside a session token."""
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


@router.post("/register", response_model=AuthResponse)
async def register(
    user_data: UserRegister,
    request: Request,
    manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    """Register a new user and start a session."""
    user, token = manager.register(
        **user_data.model_dump(),
        **client_metadata(request),
    )
    return AuthResponse(
        msg="User created successfully",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    request: Request,
    manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    """Login with email and password, replacing any existing session."""
    user, token = manager.login(
        credentials.email,
        credentials.password,
        **client_metadata(request),
    )
    return AuthResponse(
        msg="Login successful",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserEnvelope)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return UserEnvelope(msg="User found", user=UserResponse.model_validate(current_user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: Annotated[str | None, Depends(get_bearer_token)],
    manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    """Logout by deleting the session token."""
    manager.logout(token)
    return MessageResponse(msg="Logged out successfully")


@router.put("/profile", response_model=UserEnvelope)
async def update_profile(
    token: Annotated[str | None, Depends(get_bearer_token)],
    manager: Annotated[SessionManager, Depends(get_session_manager)],
    fields: Annotated[dict[str, Any] | None, Body()] = None,
):
    """Update whitelisted profile fields.

    The body is taken as a plain object; field types are checked by the
    session manager after the token, so a bad token wins over bad values.
    """
    user = manager.update_profile(token, fields or {})
    return UserEnvelope(msg="Profile updated successfully", user=UserResponse.model_validate(user))

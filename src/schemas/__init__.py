"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import (
    AuthResponse,
    ErrorResponse,
    MessageResponse,
    UserEnvelope,
    UserLogin,
    UserRegister,
    UserResponse,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "AuthResponse",
    "UserEnvelope",
    "MessageResponse",
    "ErrorResponse",
]

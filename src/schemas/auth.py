"""Authentication and profile schemas."""

from pydantic import BaseModel, ConfigDict, Field

# Field constraints live in src.services.validation so that every write
# path shares them; these schemas only describe the payload shape.


class UserRegister(BaseModel):
    """User registration request."""

    name: str
    email: str
    password: str
    phone: str
    country: str
    city: str
    preferences: list[str] | None = None
    favorite_artists: list[str] | None = None
    favorite_venues: list[str] | None = None


class UserLogin(BaseModel):
    """User login request."""

    email: str
    password: str


class UserResponse(BaseModel):
    """Public user projection. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    phone: str
    country: str
    city: str
    preferences: list[str]
    favorite_artists: list[str]
    favorite_venues: list[str]
    profile_complete: bool
    account_verified: bool


class AuthResponse(BaseModel):
    """Registration or login result with the session token."""

    msg: str
    token: str
    token_type: str = "bearer"  # noqa: S105
    user: UserResponse


class UserEnvelope(BaseModel):
    """Single user with a status message."""

    msg: str
    user: UserResponse


class MessageResponse(BaseModel):
    """Plain status message."""

    msg: str


class ErrorResponse(BaseModel):
    """Error body produced for every AccountServiceError."""

    msg: str
    error: str
    details: dict = Field(default_factory=dict)

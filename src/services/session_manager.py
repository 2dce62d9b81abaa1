"""Session lifecycle: register, login, validate, logout, update profile."""

import logging
from datetime import timedelta
from typing import Any

from sqlalchemy.orm import Session

from src.config import get_settings
from src.exceptions import (
    DuplicateError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from src.models.user import User
from src.services.credentials import CredentialService
from src.services.token_store import TokenStore
from src.services.user_store import UserStore
from src.services.validation import UPDATABLE_FIELDS, is_valid_email, validate_user

logger = logging.getLogger(__name__)


class SessionManager:
    """Ties the user store, token store and credential service together.

    Holds no state of its own; everything durable lives in the stores, so
    one instance per request is fine. A user has at most one live token:
    every login or registration replaces whatever token existed before.
    """

    def __init__(
        self,
        users: UserStore,
        tokens: TokenStore,
        credentials: CredentialService,
        token_ttl: timedelta | None = None,
    ):
        self.users = users
        self.tokens = tokens
        self.credentials = credentials
        if token_ttl is None:
            token_ttl = timedelta(minutes=get_settings().token_ttl_minutes)
        self.token_ttl = token_ttl

    @classmethod
    def from_session(cls, db: Session) -> "SessionManager":
        """Build a manager whose stores share one database session."""
        return cls(UserStore(db), TokenStore(db), CredentialService())

    def register(
        self,
        name: str,
        email: str,
        password: str,
        phone: str,
        country: str,
        city: str,
        preferences: list[str] | None = None,
        favorite_artists: list[str] | None = None,
        favorite_venues: list[str] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[User, str]:
        """Create an account and log it in."""
        if not is_valid_email(email):
            raise InvalidInputError("Invalid email format")
        if self.users.find_by_email(email):
            raise DuplicateError("email")

        fields = {
            "name": name,
            "email": email,
            "phone": phone,
            "country": country,
            "city": city,
            "preferences": preferences or [],
            "favorite_artists": favorite_artists or [],
            "favorite_venues": favorite_venues or [],
        }
        errors = validate_user(fields, password)
        if errors:
            raise ValidationError(errors)

        user = self.users.create(fields, self.credentials.hash(password))
        token = self._start_session(user.id, ip_address, user_agent)
        logger.info(f"Registered user {user.id}")
        return user, token

    def login(
        self,
        email: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[User, str]:
        """Check credentials and replace the user's session with a new one."""
        if not is_valid_email(email):
            raise InvalidInputError("Invalid email format")

        user = self.users.find_by_email(email)
        if user is None:
            raise NotFoundError("Email not found")
        if not self.credentials.verify(password or "", user.password_hash):
            logger.info(f"Failed login for user {user.id}")
            raise UnauthorizedError("Incorrect password")

        token = self._start_session(user.id, ip_address, user_agent)
        logger.info(f"Login: {user.id}")
        return user, token

    def validate_token(self, token: str | None) -> User:
        """Return the user owning a live token."""
        if not token:
            raise UnauthorizedError("No token provided")

        row = self.tokens.find(token)
        if row is None:
            raise UnauthorizedError("Invalid or expired token")

        user = self.users.find_by_id(row.user_id)
        if user is None:
            logger.warning(f"Session token references missing user {row.user_id}")
            raise NotFoundError("User not found")
        return user

    def logout(self, token: str | None) -> None:
        """Delete the token. A second logout with the same token fails."""
        if not token:
            raise UnauthorizedError("No token provided")

        self.tokens.decode(token)
        if not self.tokens.revoke_by_token(token):
            raise UnauthorizedError("Invalid token")
        logger.info("Logged out session")

    def update_profile(self, token: str | None, fields: dict[str, Any]) -> User:
        """Apply whitelisted profile fields for the token's owner.

        Unknown keys are ignored. With nothing to apply, the current user is
        returned without a write.
        """
        user = self.validate_token(token)

        updates = {field: value for field, value in fields.items() if field in UPDATABLE_FIELDS}
        if not updates:
            return user
        return self.users.update(user, updates)

    def _start_session(
        self,
        user_id: str,
        ip_address: str | None,
        user_agent: str | None,
    ) -> str:
        if self.users.find_by_id(user_id) is None:
            raise NotFoundError("User not found")
        return self.tokens.issue(user_id, self.token_ttl, ip_address, user_agent)

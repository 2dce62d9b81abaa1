"""FastAPI dependencies for authentication and database."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.database import get_db
from src.models.user import User
from src.services.session_manager import SessionManager

# Missing credentials are reported by the session manager, not FastAPI
security = HTTPBearer(auto_error=False)


def get_session_manager(
    db: Annotated[Session, Depends(get_db)],
) -> SessionManager:
    """Get a session manager bound to the request's database session."""
    return SessionManager.from_session(db)


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str | None:
    """Extract the bearer token, if any."""
    if credentials is None:
        return None
    return credentials.credentials


def get_current_user(
    token: Annotated[str | None, Depends(get_bearer_token)],
    manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> User:
    """Get the current authenticated user from the session token."""
    return manager.validate_token(token)

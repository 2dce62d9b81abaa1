"""User model."""

import uuid

from sqlalchemy import JSON, Boolean, Column, String

from src.database import Base
from src.models.mixins import TimestampMixin

# Fields that must all be non-empty for a profile to count as complete
REQUIRED_PROFILE_FIELDS = ("name", "phone", "country", "city")


def generate_user_id() -> str:
    """Generate an opaque, globally unique user id."""
    return f"usr_{uuid.uuid4().hex}"


class User(Base, TimestampMixin):
    """User account with profile and music preferences."""

    __tablename__ = "users"

    id = Column(String(40), primary_key=True, default=generate_user_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(50), nullable=False)
    phone = Column(String(16), unique=True, nullable=False, index=True)
    country = Column(String(50), nullable=False)
    city = Column(String(50), nullable=False)
    preferences = Column(JSON, nullable=False, default=list)
    favorite_artists = Column(JSON, nullable=False, default=list)
    favorite_venues = Column(JSON, nullable=False, default=list)
    profile_complete = Column(Boolean, nullable=False, default=False)
    # No flow sets this yet; reserved for email verification
    account_verified = Column(Boolean, nullable=False, default=False)

    def refresh_profile_complete(self) -> bool:
        """Recompute profile_complete from the required profile fields."""
        self.profile_complete = all(getattr(self, field) for field in REQUIRED_PROFILE_FIELDS)
        return self.profile_complete

    def __repr__(self) -> str:
        return f"<User {self.id}>"

"""Persistence for user accounts."""

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.exceptions import DuplicateError, ValidationError
from src.models.user import User
from src.services.validation import (
    clean_profile_fields,
    normalize_email,
    validate_profile_fields,
)

logger = logging.getLogger(__name__)

# Unique columns, in the order they are reported on a collision
UNIQUE_FIELDS = ("email", "phone", "id")


def duplicate_field(error: IntegrityError) -> str:
    """Work out which unique column an IntegrityError refers to."""
    message = str(error.orig).lower()
    for field in UNIQUE_FIELDS[:-1]:
        if field in message:
            return field
    return "id"


class UserStore:
    """Reads and writes User rows.

    Uniqueness is ultimately enforced by the database constraints; the
    lookups before a write only turn the common case into a clean error.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, user_id: str) -> User | None:
        """Get a user by id."""
        return self.db.query(User).filter(User.id == user_id).first()

    def find_by_email(self, email: str) -> User | None:
        """Get a user by email (case-insensitive)."""
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def find_by_phone(self, phone: str) -> User | None:
        """Get a user by phone number."""
        return self.db.query(User).filter(User.phone == phone).first()

    def create(self, fields: dict[str, Any], password_hash: str) -> User:
        """Persist a new user.

        ``fields`` must already have passed ``validate_user``.
        """
        fields = clean_profile_fields(fields)
        fields["email"] = normalize_email(fields["email"])

        if self.find_by_phone(fields["phone"]):
            raise DuplicateError("phone")

        user = User(
            email=fields["email"],
            password_hash=password_hash,
            name=fields["name"],
            phone=fields["phone"],
            country=fields["country"],
            city=fields["city"],
            preferences=list(fields.get("preferences") or []),
            favorite_artists=list(fields.get("favorite_artists") or []),
            favorite_venues=list(fields.get("favorite_venues") or []),
            account_verified=False,
        )
        user.refresh_profile_complete()
        self.db.add(user)
        self._commit()
        self.db.refresh(user)
        logger.info(f"Created user {user.id}")
        return user

    def update(self, user: User, fields: dict[str, Any]) -> User:
        """Apply ``fields`` to ``user`` and recompute profile_complete.

        Only the keys passed are touched. Validation runs before anything
        is written.
        """
        errors = validate_profile_fields(fields)
        if errors:
            raise ValidationError(errors)
        fields = clean_profile_fields(fields)

        phone = fields.get("phone")
        if phone and phone != user.phone:
            existing = self.find_by_phone(phone)
            if existing and existing.id != user.id:
                raise DuplicateError("phone")

        for field, value in fields.items():
            if field in ("preferences", "favorite_artists", "favorite_venues"):
                value = list(value)
            setattr(user, field, value)
        user.refresh_profile_complete()
        self._commit()
        self.db.refresh(user)
        logger.info(f"Updated user {user.id}: {', '.join(sorted(fields))}")
        return user

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            field = duplicate_field(e)
            logger.warning(f"Unique constraint violation on users.{field}")
            raise DuplicateError(field) from e

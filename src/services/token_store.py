"""Session token issuance, lookup and revocation."""

import logging
import uuid
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from src.config import get_settings
from src.exceptions import InvalidTokenError
from src.models.session_token import SessionToken

logger = logging.getLogger(__name__)

USER_AGENT_MAX_LENGTH = 500


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps read back from backends without time zones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class TokenStore:
    """Stores signed session tokens, one live token per user.

    Token values are HS256 JWTs carrying the user id, issue time, expiry
    and a random ``jti`` so that two tokens are never equal. The signature
    is checked before any lookup; expiry is decided by the stored row.
    """

    def __init__(
        self,
        db: Session,
        secret: str | None = None,
        algorithm: str | None = None,
    ):
        settings = get_settings()
        self.db = db
        self.secret = secret or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm

    def issue(
        self,
        user_id: str,
        ttl: timedelta,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> str:
        """Replace all of the user's tokens with a fresh one."""
        self.revoke_all_for_user(user_id)

        issued_at = utcnow()
        expires_at = issued_at + ttl
        token = jwt.encode(
            {
                "sub": user_id,
                "iat": issued_at,
                "exp": expires_at,
                "jti": uuid.uuid4().hex,
            },
            self.secret,
            algorithm=self.algorithm,
        )
        if user_agent:
            user_agent = user_agent[:USER_AGENT_MAX_LENGTH]

        self.db.add(
            SessionToken(
                user_id=user_id,
                token=token,
                issued_at=issued_at,
                expires_at=expires_at,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        )
        self.db.commit()
        logger.info(f"Issued session token for user {user_id}, expires {expires_at.isoformat()}")
        return token

    def decode(self, token: str) -> dict:
        """Check the token's signature and shape, without touching storage."""
        try:
            # Expiry is enforced against the stored row, not the claim
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e
        if not isinstance(payload.get("sub"), str):
            raise InvalidTokenError("Invalid token: missing subject")
        return payload

    def find(self, token: str) -> SessionToken | None:
        """Return the live row for ``token``.

        Raises InvalidTokenError for malformed values. An expired row is
        deleted on sight and reported as not found.
        """
        self.decode(token)
        row = self.db.query(SessionToken).filter(SessionToken.token == token).first()
        if row is None:
            return None
        if self.is_expired(row):
            user_id = row.user_id
            self.db.delete(row)
            self.db.commit()
            logger.info(f"Removed expired session token for user {user_id}")
            return None
        return row

    @staticmethod
    def is_expired(row: SessionToken, now: datetime | None = None) -> bool:
        return as_utc(row.expires_at) <= (now or utcnow())

    def revoke_by_token(self, token: str) -> bool:
        """Delete the row matching ``token``. Returns False if there was none."""
        deleted = self.db.query(SessionToken).filter(SessionToken.token == token).delete()
        self.db.commit()
        return deleted > 0

    def revoke_all_for_user(self, user_id: str) -> int:
        """Delete every token belonging to ``user_id``."""
        deleted = (
            self.db.query(SessionToken).filter(SessionToken.user_id == user_id).delete()
        )
        self.db.commit()
        if deleted:
            logger.info(f"Revoked {deleted} session token(s) for user {user_id}")
        return deleted

    def purge_expired(self) -> int:
        """Delete every expired token row."""
        deleted = (
            self.db.query(SessionToken)
            .filter(SessionToken.expires_at <= utcnow())
            .delete(synchronize_session=False)
        )
        self.db.commit()
        logger.info(f"Purged {deleted} expired session token(s)")
        return deleted

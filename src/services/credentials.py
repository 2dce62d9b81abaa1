"""Password hashing and verification."""

from passlib.context import CryptContext

from src.config import get_settings


class CredentialService:
    """Hashes and verifies passwords with bcrypt.

    The cost factor is fixed by configuration, never tuned at runtime.
    """

    def __init__(self, rounds: int | None = None):
        if rounds is None:
            rounds = get_settings().bcrypt_rounds
        self.pwd_context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )

    def hash(self, password: str) -> str:
        """Hash a password."""
        return self.pwd_context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against its hash (constant time in the hash backend)."""
        try:
            return self.pwd_context.verify(password, password_hash)
        except (ValueError, TypeError):
            # Unrecognized or corrupt digest
            return False

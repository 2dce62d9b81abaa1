"""
Exception hierarchy for the account service.

Every failure the session lifecycle can produce maps to exactly one of the
error kinds below, so callers can tell them apart by type or by ``code``.
The HTTP layer translates them to status codes in ``src.main``.
"""

from typing import Any


class AccountServiceError(Exception):
    """Base exception for all account service errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "msg": self.message,
            "error": self.code,
            "details": self.details,
        }


class InvalidInputError(AccountServiceError):
    """Malformed request data."""

    status_code = 400

    def __init__(self, message: str = "Invalid input", details: dict[str, Any] | None = None):
        super().__init__(message, code="INVALID_INPUT", details=details)


class ValidationError(InvalidInputError):
    """One or more fields failed validation.

    ``errors`` is a list of ``{"field": ..., "reason": ...}`` entries.
    """

    def __init__(self, errors: list[dict[str, str]]):
        fields = ", ".join(error["field"] for error in errors)
        super().__init__(f"Validation failed: {fields}", details={"errors": errors})
        self.errors = errors


class ConflictError(AccountServiceError):
    """Uniqueness violation."""

    # Conflicts are reported as bad requests on the public surface
    status_code = 400

    def __init__(self, message: str = "Conflict", details: dict[str, Any] | None = None):
        super().__init__(message, code="CONFLICT", details=details)


class DuplicateError(ConflictError):
    """A write collided with an existing record on a unique field."""

    def __init__(self, field: str):
        super().__init__(f"{field.capitalize()} already exists", details={"field": field})
        self.field = field


class UnauthorizedError(AccountServiceError):
    """Missing, invalid or expired credential or token."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized", code: str = "UNAUTHORIZED"):
        super().__init__(message, code=code)


class InvalidTokenError(UnauthorizedError):
    """Raised when a token is malformed or its signature does not verify."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, code="INVALID_TOKEN")


class NotFoundError(AccountServiceError):
    """Referenced entity is absent."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: dict[str, Any] | None = None):
        super().__init__(message, code="NOT_FOUND", details=details)


class InternalError(AccountServiceError):
    """Store or credential layer failure."""

    status_code = 500

    def __init__(self, message: str = "Internal error"):
        super().__init__(message, code="INTERNAL")

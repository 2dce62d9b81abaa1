"""Tests for the session manager."""

from datetime import UTC, datetime, timedelta

import pytest

from src.exceptions import (
    ConflictError,
    InvalidInputError,
    InvalidTokenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from src.models.session_token import SessionToken


def test_register_token_validates_to_same_user(manager, ann):
    """Test a freshly issued registration token resolves to the new user."""
    user, token = manager.register(**ann)

    assert manager.validate_token(token).id == user.id


def test_register_twice_is_conflict(manager, ann):
    """Test the second registration with an email fails regardless of other fields."""
    manager.register(**ann)

    with pytest.raises(ConflictError):
        manager.register(
            name="Someone Else",
            email="Ann@X.com",
            password="different",
            phone="+15559998888",
            country="CA",
            city="Toronto",
        )


def test_register_duplicate_phone_is_conflict(manager, ann):
    """Test phone numbers are unique across accounts."""
    manager.register(**ann)

    with pytest.raises(ConflictError) as exc_info:
        manager.register(**{**ann, "email": "other@x.com"})
    assert exc_info.value.details["field"] == "phone"


def test_register_malformed_email(manager, ann):
    """Test malformed emails fail before anything else."""
    with pytest.raises(InvalidInputError):
        manager.register(**{**ann, "email": "ann@"})


def test_register_validation_errors(manager, ann):
    """Test invalid fields are reported together."""
    with pytest.raises(ValidationError) as exc_info:
        manager.register(**{**ann, "name": "Ann 2", "city": "N", "password": ""})

    fields = {error["field"] for error in exc_info.value.errors}
    assert fields == {"name", "city", "password"}


def test_register_stores_hash_not_password(manager, ann):
    """Test the password is only persisted as a digest."""
    user, _ = manager.register(**ann)

    assert user.password_hash != ann["password"]
    assert manager.credentials.verify(ann["password"], user.password_hash)


def test_login_replaces_previous_token(manager, ann):
    """Test only the most recent token stays valid."""
    _, first = manager.register(**ann)
    _, second = manager.login(ann["email"], ann["password"])

    assert second != first
    with pytest.raises(UnauthorizedError):
        manager.validate_token(first)
    assert manager.validate_token(second).email == ann["email"]


def test_login_is_case_insensitive_on_email(manager, ann):
    """Test the email lookup ignores case and surrounding spaces."""
    user, _ = manager.register(**ann)

    logged_in, _ = manager.login("  ANN@X.COM ", ann["password"])
    assert logged_in.id == user.id


def test_login_errors(manager, ann):
    """Test each login failure has its own kind."""
    manager.register(**ann)

    with pytest.raises(InvalidInputError):
        manager.login("ann", ann["password"])
    with pytest.raises(NotFoundError):
        manager.login("nobody@x.com", ann["password"])
    with pytest.raises(UnauthorizedError):
        manager.login(ann["email"], "wrong")


def test_single_live_token_per_user(db, manager, ann):
    """Test repeated logins never leave more than one token row."""
    user, _ = manager.register(**ann)
    for _ in range(3):
        manager.login(ann["email"], ann["password"])

    assert db.query(SessionToken).filter(SessionToken.user_id == user.id).count() == 1


def test_validate_missing_token(manager):
    """Test an absent token is unauthorized."""
    with pytest.raises(UnauthorizedError):
        manager.validate_token(None)
    with pytest.raises(UnauthorizedError):
        manager.validate_token("")


def test_validate_malformed_token(manager):
    """Test malformed tokens fail as invalid tokens."""
    with pytest.raises(InvalidTokenError):
        manager.validate_token("garbage")


def test_validate_expired_token_revokes_it(db, manager, ann):
    """Test an expired but unswept token is rejected and deleted."""
    _, token = manager.register(**ann)
    row = db.query(SessionToken).filter(SessionToken.token == token).one()
    row.expires_at = datetime.now(UTC) - timedelta(seconds=1)
    db.commit()

    with pytest.raises(UnauthorizedError):
        manager.validate_token(token)
    assert db.query(SessionToken).count() == 0


def test_validate_orphaned_token(manager, ann, monkeypatch):
    """Test a token whose user vanished reports not found."""
    _, token = manager.register(**ann)
    monkeypatch.setattr(manager.users, "find_by_id", lambda user_id: None)

    with pytest.raises(NotFoundError):
        manager.validate_token(token)


def test_logout_then_validate(manager, ann):
    """Test a logged out token is no longer valid."""
    _, token = manager.register(**ann)
    manager.logout(token)

    with pytest.raises(UnauthorizedError):
        manager.validate_token(token)


def test_logout_twice_fails(manager, ann):
    """Test logout is not idempotent."""
    _, token = manager.register(**ann)
    manager.logout(token)

    with pytest.raises(UnauthorizedError):
        manager.logout(token)


def test_update_preferences_only(manager, ann):
    """Test updating a list field leaves the required fields alone."""
    user, token = manager.register(**ann)

    updated = manager.update_profile(token, {"preferences": ["jazz", "blues"]})

    assert updated.preferences == ["jazz", "blues"]
    assert updated.name == ann["name"]
    assert updated.phone == ann["phone"]
    assert updated.country == ann["country"]
    assert updated.city == ann["city"]
    assert updated.profile_complete is True


def test_update_non_required_fields_never_completes_profile(db, manager, ann):
    """Test profile_complete cannot flip to true through list fields."""
    user, token = manager.register(**ann)
    user.city = ""
    user.profile_complete = False
    db.commit()

    updated = manager.update_profile(token, {"favorite_venues": ["Blue Note"]})
    assert updated.profile_complete is False

    updated = manager.update_profile(token, {"city": "Chicago"})
    assert updated.profile_complete is True


def test_update_ignores_unknown_fields(manager, ann):
    """Test fields outside the whitelist are dropped silently."""
    user, token = manager.register(**ann)

    updated = manager.update_profile(
        token, {"email": "new@x.com", "account_verified": True, "id": "usr_mine"}
    )
    assert updated.id == user.id
    assert updated.email == ann["email"]
    assert updated.account_verified is False


def test_update_without_fields_skips_write(manager, ann, monkeypatch):
    """Test an empty update returns the user without touching the store."""
    user, token = manager.register(**ann)

    def fail_update(*args, **kwargs):
        raise AssertionError("update should not be called")

    monkeypatch.setattr(manager.users, "update", fail_update)
    assert manager.update_profile(token, {}).id == user.id


def test_update_requires_live_token(manager, ann):
    """Test profile updates go through token validation."""
    _, token = manager.register(**ann)
    manager.logout(token)

    with pytest.raises(UnauthorizedError):
        manager.update_profile(token, {"city": "Boston"})


def test_reference_scenario(manager, ann):
    """Register, fail a login, log in again and check which token is live."""
    user, t1 = manager.register(**ann)
    assert user.profile_complete is True

    with pytest.raises(UnauthorizedError):
        manager.login("ann@x.com", "wrong")

    _, t2 = manager.login("ann@x.com", "Secr3t!")
    assert t2 != t1

    with pytest.raises(UnauthorizedError):
        manager.validate_token(t1)
    assert manager.validate_token(t2).id == user.id


def test_register_rejects_nul_in_password(manager, ann):
    """Test a NUL byte in the password is a validation error, not a crash."""
    with pytest.raises(ValidationError) as exc_info:
        manager.register(**{**ann, "password": "ab\x00cd"})

    assert [error["field"] for error in exc_info.value.errors] == ["password"]


def test_register_accepts_missing_lists(manager, ann):
    """Test the optional list fields default to empty."""
    user, _ = manager.register(
        **ann, preferences=None, favorite_artists=None, favorite_venues=None
    )

    assert user.preferences == []
    assert user.favorite_artists == []
    assert user.favorite_venues == []

import pytest

from clinica.constants import Role
from clinica.errors import BadRequestError, NotFoundError
from clinica.security import hash_password
from clinica.services.account_guard import (
    ensure_account,
    is_active,
    is_verified,
    not_deleted,
    not_verified,
    password_matches,
)
from clinica.models.user import Validation
from clinica.store import UserRecord


def _user(**changes):
    base = UserRecord(
        id="u1",
        name="Dan",
        email="d@x.com",
        password=hash_password("pw1234"),
        role=Role.PATIENT,
        slug="dan-1",
        validation=Validation(isVerified=True),
    )
    return base.model_copy(update=changes)


def test_missing_user_is_not_found():
    with pytest.raises(NotFoundError, match="Invalid Email"):
        ensure_account(None, is_active)
    with pytest.raises(NotFoundError, match="User Not Found"):
        ensure_account(None, missing="User Not Found")


def test_first_failing_check_wins():
    user = _user(isActive=False, isDelete=True)
    with pytest.raises(BadRequestError, match="Blocked"):
        ensure_account(user, is_active, not_deleted)
    with pytest.raises(BadRequestError, match="Deleted"):
        ensure_account(user, not_deleted, is_active)


def test_password_checked_before_verification():
    user = _user(validation=Validation(isVerified=False))
    with pytest.raises(BadRequestError, match="Invalid Password"):
        ensure_account(user, password_matches("nope"), is_verified)
    with pytest.raises(BadRequestError, match="not verified"):
        ensure_account(user, password_matches("pw1234"), is_verified)


def test_not_verified_check():
    with pytest.raises(BadRequestError, match="already verified"):
        ensure_account(_user(), not_verified)


def test_passing_chain_returns_user():
    user = _user()
    assert ensure_account(user, is_active, not_deleted, is_verified) is user

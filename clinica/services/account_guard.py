"""Ordered account-state preconditions shared by every auth workflow.

The first failing check decides the error the caller sees, so each workflow
passes its checks in the order it needs.
"""
from typing import Callable

from clinica.errors import BadRequestError, NotFoundError
from clinica.security import verify_password
from clinica.store import UserRecord

AccountCheck = Callable[[UserRecord], None]


def is_active(user: UserRecord) -> None:
    if not user.isActive:
        raise BadRequestError("Account is Blocked")


def not_deleted(user: UserRecord) -> None:
    if user.isDelete:
        raise BadRequestError("Account is Deleted")


def is_verified(user: UserRecord) -> None:
    if not user.validation.isVerified:
        raise BadRequestError("Your Account is not verified")


def not_verified(user: UserRecord) -> None:
    if user.validation.isVerified:
        raise BadRequestError("Account is already verified")


def password_matches(plain: str, message: str = "Invalid Password") -> AccountCheck:
    def check(user: UserRecord) -> None:
        if not verify_password(plain, user.password):
            raise BadRequestError(message)

    return check


def ensure_account(
    user: UserRecord | None,
    *checks: AccountCheck,
    missing: str = "Invalid Email",
) -> UserRecord:
    if user is None:
        raise NotFoundError(missing)
    for check in checks:
        check(user)
    return user

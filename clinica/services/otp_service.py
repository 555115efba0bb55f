import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable

from clinica.constants import OTP_MAX, OTP_MIN
from clinica.errors import UnauthorizedError
from clinica.models.user import Validation
from clinica.store import CredentialStore, UserRecord
from clinica.utils.logger import get_logger

logger = get_logger("otp")


def generate_otp_code() -> int:
    # Uniform over [100000, 999999]
    return OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OtpService:
    """One active email challenge per user, stored in `User.validation`.

    A new challenge replaces the previous one wholesale, so only the latest
    code can validate. The expiry is recorded on every challenge but is only
    compared when `enforce_expiry` is on.
    """

    def __init__(
        self,
        store: CredentialStore,
        *,
        ttl_seconds: int = 180,
        enforce_expiry: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.ttl = timedelta(seconds=ttl_seconds)
        self.enforce_expiry = enforce_expiry
        self.clock = clock

    def new_challenge(self) -> Validation:
        return Validation(
            isVerified=False,
            otp=generate_otp_code(),
            expiry=self.clock() + self.ttl,
        )

    async def issue_challenge(self, user: UserRecord) -> Validation:
        challenge = self.new_challenge()
        await self.store.update_validation(user.email, challenge)
        logger.info(f"OTP challenge issued for {user.email}")
        return challenge

    def check(self, user: UserRecord, submitted: int) -> None:
        """Compare the submitted code with the stored one; the user must be read with secrets."""
        stored = user.validation
        if stored.otp is None or stored.otp != submitted:
            raise UnauthorizedError("Invalid Otp")
        if self.enforce_expiry and stored.expiry is not None:
            expiry = stored.expiry
            if expiry.tzinfo is None:
                expiry = expiry.replace(tzinfo=timezone.utc)
            if expiry < self.clock():
                raise UnauthorizedError("Otp has expired")

    async def validate(self, user: UserRecord, submitted: int) -> Validation:
        """Accept the code and consume it so it cannot be replayed."""
        self.check(user, submitted)
        consumed = consumed_validation()
        await self.store.update_validation(user.email, consumed)
        logger.info(f"OTP accepted for {user.email}")
        return consumed


def consumed_validation() -> Validation:
    return Validation(isVerified=True, otp=0, expiry=None)

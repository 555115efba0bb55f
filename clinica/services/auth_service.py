"""Authentication workflows: register, verify, resend OTP, sign-in, refresh,
change password, forget password and reset password.

Every workflow runs its account-state checks first and raises a categorized
AppError on the first one that fails. Emails are best-effort: a delivery
failure is logged and never undoes a committed write.
"""
from pydantic import BaseModel

from clinica.constants import Role
from clinica.errors import AppError, BadRequestError
from clinica.security import TokenClaims, TokenScope, TokenService, hash_password
from clinica.services.account_guard import (
    ensure_account,
    is_active,
    is_verified,
    not_deleted,
    not_verified,
    password_matches,
)
from clinica.services.mail_service import OTP_TEMPLATE, VERIFY_TEMPLATE, MailService
from clinica.services.otp_service import OtpService, consumed_validation
from clinica.store import CredentialStore, PatientDraft, UserDraft, UserRecord
from clinica.utils.logger import get_logger
from clinica.utils.slug import generate_slug

logger = get_logger("auth")


class RegisterResult(BaseModel):
    token: str
    email: str


class OtpResult(BaseModel):
    token: str
    email: str
    id: str


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    role: Role
    id: str


class AccessResult(BaseModel):
    access_token: str
    role: Role
    id: str


class AuthService:
    def __init__(
        self,
        store: CredentialStore,
        tokens: TokenService,
        otp: OtpService,
        mail: MailService,
    ):
        self.store = store
        self.tokens = tokens
        self.otp = otp
        self.mail = mail

    # ---------------- helpers ----------------

    @staticmethod
    def _claims(user: UserRecord) -> TokenClaims:
        return TokenClaims(email=user.email, role=user.role, id=user.id)

    def _token_pair(self, user: UserRecord) -> TokenPair:
        claims = self._claims(user)
        return TokenPair(
            access_token=self.tokens.issue_for(TokenScope.ACCESS, claims),
            refresh_token=self.tokens.issue_for(TokenScope.REFRESH, claims),
            role=user.role,
            id=user.id,
        )

    def _action_token(self, user: UserRecord) -> str:
        return self.tokens.issue_for(TokenScope.ACTION, self._claims(user))

    # ---------------- workflows ----------------

    async def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        phone: str | None = None,
        gender: str | None = None,
        age: int | None = None,
        city: str | None = None,
    ) -> RegisterResult:
        """Create User + Patient in one transaction with a fresh OTP challenge."""
        try:
            challenge = self.otp.new_challenge()
            user_draft = UserDraft(
                name=name,
                email=email,
                password=hash_password(password),
                role=Role.PATIENT,
                phone=phone,
                slug=generate_slug(name),
                validation=challenge,
            )
            profile_draft = PatientDraft(
                name=name, email=email, phone=phone, gender=gender, age=age, city=city
            )
            user, _ = await self.store.create_user_and_profile(user_draft, profile_draft)
            ensure_account(user, is_active)
            token = self._action_token(user)
        except AppError as e:
            logger.info(f"Registration rejected for {email}: {e.detail}")
            raise BadRequestError(e.detail) from e
        except Exception as e:
            logger.error(f"Registration failed for {email}: {e}", exc_info=True)
            raise BadRequestError(str(e)) from e

        logger.info(f"Patient registered: {email} (user {user.id})")
        await self.mail.send_otp(
            email=user.email,
            name=user.name,
            otp=challenge.otp,
            template=VERIFY_TEMPLATE,
            subject="Verify your Clinica account",
        )
        return RegisterResult(token=token, email=user.email)

    async def verify_account(self, token: str | None, otp: int) -> TokenPair:
        claims = self.tokens.verify_for(TokenScope.ACTION, token)
        user = await self.store.find_by_email(claims.email, include_secret_fields=True)
        ensure_account(user, is_active, not_deleted, not_verified)
        await self.otp.validate(user, otp)
        logger.info(f"Account verified: {user.email}")
        return self._token_pair(user)

    async def resend_otp(self, email: str) -> OtpResult:
        user = await self.store.find_by_email(email)
        ensure_account(user, is_active, not_deleted)
        challenge = await self.otp.issue_challenge(user)
        await self.mail.send_otp(email=user.email, name=user.name, otp=challenge.otp)
        return OtpResult(token=self._action_token(user), email=user.email, id=user.id)

    async def sign_in(
        self, *, email: str, password: str, fcm_token: str | None = None
    ) -> TokenPair:
        user = await self.store.find_by_email(email, include_secret_fields=True)
        ensure_account(user, is_active, not_deleted, password_matches(password), is_verified)

        if fcm_token:
            updated = await self.store.update_fcm_token(user.email, fcm_token)
            if not updated or not updated.fcmToken:
                raise BadRequestError("failed to update fcm token")

        logger.info(f"User signed in: {user.email}")
        return self._token_pair(user)

    async def refresh(self, refresh_token: str | None) -> AccessResult:
        claims = self.tokens.verify_for(TokenScope.REFRESH, refresh_token)
        user = await self.store.find_by_email(claims.email)
        ensure_account(user, is_active, not_deleted, is_verified, missing="User Not Found")
        # Role comes from the presented token, id from the stored user
        access = self.tokens.issue_for(
            TokenScope.ACCESS, TokenClaims(email=claims.email, role=claims.role, id=user.id)
        )
        return AccessResult(access_token=access, role=user.role, id=user.id)

    async def change_password(
        self, current: TokenClaims, *, old_password: str, new_password: str
    ) -> None:
        user = await self.store.find_by_email(current.email, include_secret_fields=True)
        ensure_account(
            user,
            is_active,
            not_deleted,
            is_verified,
            password_matches(old_password, "Invalid Old Password"),
            missing="User Not Found",
        )
        await self.store.update_password(user.email, hash_password(new_password))
        logger.info(f"Password changed: {user.email}")

    async def forget_password(self, email: str) -> str:
        """Start a reset: new OTP (account becomes unverified until it is confirmed)."""
        user = await self.store.find_by_email(email)
        ensure_account(user, is_active, not_deleted, is_verified)
        challenge = await self.otp.issue_challenge(user)
        token = self._action_token(user)
        await self.mail.send_otp(
            email=user.email,
            name=user.name,
            otp=challenge.otp,
            template=OTP_TEMPLATE,
            subject="Forget Password Otp From Clinica",
        )
        return token

    async def reset_password(self, token: str | None, password: str) -> TokenPair:
        claims = self.tokens.verify_for(TokenScope.ACTION, token)
        user = await self.store.find_by_email(claims.email)
        ensure_account(user, not_deleted, is_active, is_verified)
        await self.store.reset_password(
            user.email, hash_password(password), consumed_validation()
        )
        logger.info(f"Password reset: {user.email}")
        return self._token_pair(user)

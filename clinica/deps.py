from fastapi import Depends, Request

from clinica.config import get_settings
from clinica.security import TokenService, get_current_claims, get_token_service
from clinica.services.auth_service import AuthService
from clinica.services.mail_service import MailService
from clinica.services.notification_service import NotificationService
from clinica.services.otp_service import OtpService
from clinica.store import CredentialStore

# Common dependencies used across routers
CurrentClaims = Depends(get_current_claims)


def get_store(request: Request) -> CredentialStore:
    return request.app.state.store


def get_mail_service(request: Request) -> MailService:
    return request.app.state.mail


def get_otp_service(store: CredentialStore = Depends(get_store)) -> OtpService:
    settings = get_settings()
    return OtpService(
        store,
        ttl_seconds=settings.OTP_TTL_SECONDS,
        enforce_expiry=settings.OTP_ENFORCE_EXPIRY,
    )


def get_auth_service(
    store: CredentialStore = Depends(get_store),
    tokens: TokenService = Depends(get_token_service),
    otp: OtpService = Depends(get_otp_service),
    mail: MailService = Depends(get_mail_service),
) -> AuthService:
    return AuthService(store, tokens, otp, mail)


def get_notification_service(
    request: Request, store: CredentialStore = Depends(get_store)
) -> NotificationService:
    return NotificationService(
        store,
        request.app.state.push,
        timeout=get_settings().DISPATCH_TIMEOUT_SECONDS,
    )

from fastapi import APIRouter, Cookie, Depends, Header, Response

from clinica.config import get_settings
from clinica.constants import REFRESH_COOKIE_MAX_AGE, REFRESH_COOKIE_NAME
from clinica.deps import CurrentClaims, get_auth_service
from clinica.schemas import (
    AuthTokenOut,
    ChangePasswordIn,
    EmailIn,
    ForgetPasswordOut,
    MessageOut,
    RegisterIn,
    RegisterOut,
    ResendOtpOut,
    ResetPasswordIn,
    SignInIn,
    VerifyAccountIn,
)
from clinica.security import TokenClaims
from clinica.services.auth_service import AuthService, TokenPair

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=REFRESH_COOKIE_MAX_AGE,
        secure=get_settings().is_production,
        httponly=True,
        samesite="none",
    )


def _token_response(response: Response, pair: TokenPair) -> AuthTokenOut:
    _set_refresh_cookie(response, pair.refresh_token)
    return AuthTokenOut(access_token=pair.access_token, role=pair.role, id=pair.id)


@router.post("/register", response_model=RegisterOut)
async def route_register(payload: RegisterIn, auth: AuthService = Depends(get_auth_service)):
    """Patient sign-up. Returns the action token needed by /auth/verify-account."""
    result = await auth.register(**payload.model_dump())
    return RegisterOut(token=result.token, email=result.email)


@router.post("/verify-account", response_model=AuthTokenOut)
async def route_verify_account(
    payload: VerifyAccountIn,
    response: Response,
    token: str | None = Header(None),
    auth: AuthService = Depends(get_auth_service),
):
    pair = await auth.verify_account(token, payload.otp)
    return _token_response(response, pair)


@router.post("/resend-otp", response_model=ResendOtpOut)
async def route_resend_otp(payload: EmailIn, auth: AuthService = Depends(get_auth_service)):
    result = await auth.resend_otp(payload.email)
    return ResendOtpOut(token=result.token, email=result.email, id=result.id)


@router.post("/sign-in", response_model=AuthTokenOut)
async def route_sign_in(
    payload: SignInIn,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
):
    pair = await auth.sign_in(
        email=payload.email, password=payload.password, fcm_token=payload.fcm_token
    )
    return _token_response(response, pair)


@router.post("/refresh-token", response_model=AuthTokenOut)
async def route_refresh_token(
    refresh_token: str | None = Cookie(None, alias=REFRESH_COOKIE_NAME),
    auth: AuthService = Depends(get_auth_service),
):
    result = await auth.refresh(refresh_token)
    return AuthTokenOut(access_token=result.access_token, role=result.role, id=result.id)


@router.post("/change-password", response_model=MessageOut)
async def route_change_password(
    payload: ChangePasswordIn,
    current: TokenClaims = CurrentClaims,
    auth: AuthService = Depends(get_auth_service),
):
    await auth.change_password(
        current, old_password=payload.old_password, new_password=payload.new_password
    )
    return MessageOut(message="Password changed successfully")


@router.post("/forget-password", response_model=ForgetPasswordOut)
async def route_forget_password(payload: EmailIn, auth: AuthService = Depends(get_auth_service)):
    """Sends an OTP; confirm it via /auth/verify-account, then call /auth/reset-password."""
    token = await auth.forget_password(payload.email)
    return ForgetPasswordOut(token=token)


@router.post("/reset-password", response_model=AuthTokenOut)
async def route_reset_password(
    payload: ResetPasswordIn,
    response: Response,
    token: str | None = Header(None),
    auth: AuthService = Depends(get_auth_service),
):
    pair = await auth.reset_password(token, payload.password)
    return _token_response(response, pair)

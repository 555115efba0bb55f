from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List

from clinica.constants import MAX_MULTICAST_TOKENS, OTP_MAX, OTP_MIN, NotificationType, Role

# -------------------- Auth Schemas --------------------


class RegisterIn(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    phone: Optional[str] = None
    gender: Optional[str] = Field(None, description="male|female")
    age: Optional[int] = Field(None, ge=0)
    city: Optional[str] = None


class RegisterOut(BaseModel):
    token: str
    email: str


class VerifyAccountIn(BaseModel):
    otp: int = Field(..., ge=OTP_MIN, le=OTP_MAX)


class EmailIn(BaseModel):
    email: EmailStr


class ResendOtpOut(BaseModel):
    token: str
    email: str
    id: str


class SignInIn(BaseModel):
    email: EmailStr
    password: str
    fcm_token: Optional[str] = None


class AuthTokenOut(BaseModel):
    """Access token in the body; the refresh token travels in a cookie."""
    access_token: str
    token_type: str = "bearer"
    role: Role
    id: str


class ChangePasswordIn(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=1)


class ForgetPasswordOut(BaseModel):
    token: str


class ResetPasswordIn(BaseModel):
    password: str = Field(..., min_length=1)


class MessageOut(BaseModel):
    message: str


# -------------------- Notification Schemas --------------------


class PushIn(BaseModel):
    tokens: List[str] = Field(..., min_length=1, max_length=MAX_MULTICAST_TOKENS)
    title: str
    body: str
    type: NotificationType = NotificationType.MESSAGE
    link: Optional[str] = None
    user_id: Optional[str] = None


class PushOut(BaseModel):
    sent: bool
    success_count: int = 0
    failure_count: int = 0

"""Plain value objects exchanged with a CredentialStore.

Stores hand out copies; mutating a record never writes through.
"""
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from clinica.constants import NotificationType, Role
from clinica.models.user import Validation


class UserDraft(BaseModel):
    name: str
    email: str
    password: str  # already hashed
    role: Role = Role.PATIENT
    phone: str | None = None
    slug: str
    validation: Validation = Field(default_factory=Validation)


class PatientDraft(BaseModel):
    name: str
    email: str
    phone: str | None = None
    gender: str | None = None
    age: int | None = None
    city: str | None = None


class UserRecord(BaseModel):
    id: str
    name: str
    email: str
    password: str | None = None
    role: Role
    phone: str | None = None
    slug: str
    isActive: bool = True
    isDelete: bool = False
    validation: Validation = Field(default_factory=Validation)
    fcmToken: str | None = None
    created_at: datetime | None = None

    def without_secrets(self) -> "UserRecord":
        """Copy with the password hash and OTP projected out."""
        validation = self.validation.model_copy(update={"otp": None})
        return self.model_copy(update={"password": None, "validation": validation})


class PatientRecord(PatientDraft):
    id: str
    user: str
    slug: str
    created_at: datetime | None = None


class NotificationRecord(BaseModel):
    id: str | None = None
    fcmToken: str
    user: str | None = None
    type: NotificationType | None = None
    title: str | None = None
    message: str
    isRead: bool = False
    link: str | None = None
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

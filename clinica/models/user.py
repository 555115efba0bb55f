from beanie import Document, Indexed
from pydantic import BaseModel, Field
from datetime import datetime, timezone
from clinica.constants import Role


class Validation(BaseModel):
    """Email verification state; replaced wholesale, never patched field by field."""

    isVerified: bool = False
    otp: int | None = None
    expiry: datetime | None = None


class User(Document):
    """Identity record, one per email.

    - `password` and `validation.otp` are stripped from normal reads.
    - `isDelete` is a tombstone; users are never hard-deleted.
    """

    name: str
    email: Indexed(str, unique=True)
    password: str
    role: Role = Role.PATIENT
    phone: str | None = None
    slug: Indexed(str)
    isActive: bool = True
    isDelete: bool = False
    validation: Validation = Field(default_factory=Validation)
    fcmToken: str | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "users"

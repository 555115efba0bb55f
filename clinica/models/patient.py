from beanie import Document, Indexed
from beanie import PydanticObjectId as OID
from datetime import datetime, timezone
from pydantic import Field


class Patient(Document):
    """Patient profile, 1:1 with a User (linked by id, slug duplicated)."""
    user: Indexed(OID, unique=True)
    slug: Indexed(str)
    name: str
    email: str
    phone: str | None = None
    gender: str | None = None  # "male" | "female"
    age: int | None = None
    city: str | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "patients"

from beanie import Document, Indexed
from beanie import PydanticObjectId as OID
from pydantic import Field
from datetime import datetime, timezone

from clinica.constants import NotificationType


class Notification(Document):
    """Push notification log entry, append-only."""
    fcmToken: Indexed(str)
    user: OID | None = None
    type: NotificationType | None = None
    title: str | None = None
    message: str
    isRead: bool = False
    link: str | None = None
    date: Indexed(datetime) = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "notifications"

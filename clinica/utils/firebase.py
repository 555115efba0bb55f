import asyncio
from typing import List

import firebase_admin
from firebase_admin import credentials, messaging

from clinica.config import Settings
from clinica.utils.logger import get_logger

logger = get_logger("firebase")


class PushClient:
    """Holds the process-wide Firebase app. Built once at startup and passed around.

    Without credentials it stays in no-op mode (`ready` is False).
    """

    def __init__(self, app: firebase_admin.App | None = None):
        self.app = app

    @classmethod
    def from_settings(cls, settings: Settings) -> "PushClient":
        if not settings.FIREBASE_CREDENTIALS_FILE:
            logger.warning("FIREBASE_CREDENTIALS_FILE not set; push notifications disabled")
            return cls(None)
        cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_FILE)
        app = firebase_admin.initialize_app(cred, name=settings.FIREBASE_APP_NAME)
        logger.info(f"Firebase app '{settings.FIREBASE_APP_NAME}' initialized")
        return cls(app)

    @property
    def ready(self) -> bool:
        return self.app is not None

    async def send_multicast(self, tokens: List[str], title: str, body: str) -> messaging.BatchResponse:
        message = messaging.MulticastMessage(
            tokens=tokens,
            notification=messaging.Notification(title=title, body=body),
            apns=messaging.APNSConfig(
                headers={"apns-push-type": "alert"},
                payload=messaging.APNSPayload(aps=messaging.Aps(badge=1, sound="default")),
            ),
        )
        # The Admin SDK is blocking
        return await asyncio.to_thread(messaging.send_each_for_multicast, message, app=self.app)

    def close(self) -> None:
        if self.app is not None:
            firebase_admin.delete_app(self.app)
            self.app = None

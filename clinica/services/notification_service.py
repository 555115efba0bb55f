import asyncio
from typing import List, Optional, Protocol

from firebase_admin import messaging
from firebase_admin.exceptions import FirebaseError
from pydantic import BaseModel

from clinica.constants import NotificationType
from clinica.errors import DeliveryFailedError
from clinica.store import CredentialStore, NotificationRecord
from clinica.utils.logger import get_logger

logger = get_logger("notifications")


class PushSender(Protocol):
    ready: bool

    async def send_multicast(self, tokens: List[str], title: str, body: str):
        ...


class PushPayload(BaseModel):
    title: str
    body: str
    type: NotificationType
    user_id: Optional[str] = None
    link: Optional[str] = None


class PushResult(BaseModel):
    success_count: int
    failure_count: int
    delivered: List[str]


class NotificationService:
    def __init__(self, store: CredentialStore, push: PushSender, timeout: float = 10.0):
        self.store = store
        self.push = push
        self.timeout = timeout

    async def send_push(self, tokens: List[str], payload: PushPayload) -> PushResult | None:
        """Multicast one message and log a Notification per delivered token.

        Returns None when push is not configured, there are no tokens, or
        the provider rejects its third-party (APNs/web push) credentials.
        """
        if not tokens or not self.push.ready:
            logger.info(f"[FCM:SKIP] title={payload.title} tokens={len(tokens)}")
            return None
        try:
            response = await asyncio.wait_for(
                self.push.send_multicast(tokens, payload.title, payload.body),
                timeout=self.timeout,
            )
        except messaging.ThirdPartyAuthError as e:
            logger.warning(f"FCM third-party auth error, skipping: {e}")
            return None
        except asyncio.TimeoutError:
            logger.error(f"FCM multicast timed out after {self.timeout}s")
            raise DeliveryFailedError("Failed to send notification")
        except FirebaseError as e:
            logger.error(f"FCM multicast failed: {e}")
            raise DeliveryFailedError(str(e) or "Failed to send notification")
        except Exception as e:
            logger.error(f"Push delivery failed: {e}", exc_info=True)
            raise DeliveryFailedError(str(e) or "Failed to send notification")

        delivered = [
            token for token, resp in zip(tokens, response.responses) if resp.success
        ]
        for token in delivered:
            try:
                await self.store.add_notification(
                    NotificationRecord(
                        fcmToken=token,
                        user=payload.user_id,
                        type=payload.type,
                        title=payload.title,
                        message=payload.body,
                        link=payload.link,
                    )
                )
            except Exception as e:
                # Delivery already happened; one failed log entry must not hide the rest
                logger.error(f"Failed to record notification for token: {e}", exc_info=True)
        logger.info(
            f"[FCM] Sent: success={response.success_count} failure={response.failure_count}"
        )
        return PushResult(
            success_count=response.success_count,
            failure_count=response.failure_count,
            delivered=delivered,
        )

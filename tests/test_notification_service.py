import asyncio
from types import SimpleNamespace

import pytest
from firebase_admin import exceptions as fb_exceptions
from firebase_admin import messaging

from clinica.constants import NotificationType
from clinica.errors import DeliveryFailedError
from clinica.services.notification_service import NotificationService, PushPayload

PAYLOAD = PushPayload(
    title="Reminder",
    body="Time to log your glucose",
    type=NotificationType.GLUCOSE,
    user_id="65f0c0ffee0000000000abcd",
    link="/glucose",
)


class FakePush:
    def __init__(self, outcomes=None, error=None, delay=0.0, ready=True):
        self.outcomes = outcomes or []
        self.error = error
        self.delay = delay
        self.ready = ready
        self.calls = []

    async def send_multicast(self, tokens, title, body):
        self.calls.append((tokens, title, body))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        responses = [SimpleNamespace(success=ok) for ok in self.outcomes]
        return SimpleNamespace(
            responses=responses,
            success_count=sum(self.outcomes),
            failure_count=len(self.outcomes) - sum(self.outcomes),
        )


async def test_records_one_notification_per_delivered_token(store):
    service = NotificationService(store, FakePush(outcomes=[True, False, True]))
    result = await service.send_push(["t1", "t2", "t3"], PAYLOAD)
    assert result.success_count == 2
    assert result.failure_count == 1
    assert result.delivered == ["t1", "t3"]
    assert [n.fcmToken for n in store.notifications] == ["t1", "t3"]
    first = store.notifications[0]
    assert first.title == "Reminder"
    assert first.message == "Time to log your glucose"
    assert first.type == NotificationType.GLUCOSE
    assert first.isRead is False
    assert first.link == "/glucose"


async def test_no_records_when_nothing_delivered(store):
    service = NotificationService(store, FakePush(outcomes=[False]))
    result = await service.send_push(["t1"], PAYLOAD)
    assert result.success_count == 0
    assert store.notifications == []


async def test_third_party_auth_error_is_soft(store):
    push = FakePush(error=messaging.ThirdPartyAuthError("apns credentials rejected"))
    service = NotificationService(store, push)
    assert await service.send_push(["t1"], PAYLOAD) is None
    assert store.notifications == []


async def test_other_provider_errors_raise_delivery_failed(store):
    push = FakePush(error=fb_exceptions.InternalError("backend unavailable"))
    service = NotificationService(store, push)
    with pytest.raises(DeliveryFailedError) as exc:
        await service.send_push(["t1"], PAYLOAD)
    assert exc.value.status_code == 501


async def test_delivery_timeout_raises_delivery_failed(store):
    service = NotificationService(store, FakePush(outcomes=[True], delay=1.0), timeout=0.01)
    with pytest.raises(DeliveryFailedError):
        await service.send_push(["t1"], PAYLOAD)
    assert store.notifications == []


async def test_skips_when_not_configured_or_no_tokens(store):
    push = FakePush(outcomes=[True], ready=False)
    assert await NotificationService(store, push).send_push(["t1"], PAYLOAD) is None
    ready = FakePush(outcomes=[])
    assert await NotificationService(store, ready).send_push([], PAYLOAD) is None
    assert push.calls == [] and ready.calls == []


async def test_unexpected_sender_errors_raise_delivery_failed(store):
    push = FakePush(error=ValueError("tokens must be non-empty strings"))
    service = NotificationService(store, push)
    with pytest.raises(DeliveryFailedError, match="non-empty strings") as exc:
        await service.send_push([""], PAYLOAD)
    assert exc.value.status_code == 501
    assert store.notifications == []

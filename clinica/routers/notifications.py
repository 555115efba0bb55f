from fastapi import APIRouter, Depends

from clinica.constants import Role
from clinica.deps import get_notification_service
from clinica.schemas import PushIn, PushOut
from clinica.security import require_roles
from clinica.services.notification_service import NotificationService, PushPayload

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/send", response_model=PushOut)
async def route_send_push(
    payload: PushIn,
    _admin=Depends(require_roles([Role.ADMIN])),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Admin: multicast a push notification to the given FCM tokens."""
    result = await notifications.send_push(
        payload.tokens,
        PushPayload(
            title=payload.title,
            body=payload.body,
            type=payload.type,
            link=payload.link,
            user_id=payload.user_id,
        ),
    )
    if result is None:
        return PushOut(sent=False)
    return PushOut(
        sent=True,
        success_count=result.success_count,
        failure_count=result.failure_count,
    )

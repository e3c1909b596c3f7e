# quack_companion/api/notifications.py
from fastapi import APIRouter, Depends

from ..dependencies import get_notification_center
from ..schemas.diagnostics import Notification
from ..services.notifications import NotificationCenter

router = APIRouter(prefix="/notifications")


@router.get("")
async def get_notifications(
        clear: bool = False,
        notifier: NotificationCenter = Depends(get_notification_center)
) -> list[Notification]:
    return notifier.get_messages(clear=clear)

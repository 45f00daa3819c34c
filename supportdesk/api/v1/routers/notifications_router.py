"""
Notifications роутер (только для куратора).
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from ..errors import to_http_exception
from ..schemas.notification_schemas import NotificationResponse
from ....core.dependencies import get_current_session, get_notification_fanout
from ....core.errors import SupportDeskError
from ....models.records import UserSession
from ....services import NotificationFanout

logger = logging.getLogger("supportdesk.api.notifications")

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    session: UserSession = Depends(get_current_session),
    fanout: NotificationFanout = Depends(get_notification_fanout)
) -> List[NotificationResponse]:
    """Все уведомления, новые первыми."""
    try:
        notifications = await fanout.list_notifications(session)
    except SupportDeskError as e:
        raise to_http_exception(e)
    return [NotificationResponse.from_notification(n) for n in notifications]


@router.put("/seen", response_model=List[NotificationResponse])
async def mark_all_seen(
    session: UserSession = Depends(get_current_session),
    fanout: NotificationFanout = Depends(get_notification_fanout)
) -> List[NotificationResponse]:
    """Отметить все уведомления просмотренными."""
    try:
        notifications = await fanout.mark_all_seen(session)
    except SupportDeskError as e:
        logger.warning(f"Mark seen rejected for {session.id}: {e.message}")
        raise to_http_exception(e)
    return [NotificationResponse.from_notification(n) for n in notifications]

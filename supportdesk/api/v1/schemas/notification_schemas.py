from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel

from ....models.records import Notification


class NotificationResponse(BaseModel):
    id: str
    record_id: str
    actor_id: str
    payload: Dict[str, Any]
    created_at: datetime
    seen: bool

    @classmethod
    def from_notification(cls, notification: Notification) -> "NotificationResponse":
        return cls(**notification.model_dump())

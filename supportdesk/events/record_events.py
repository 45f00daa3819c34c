"""
Record events published to the curator channel.
"""

from typing import Optional

from ..models.records import Notification, Record
from .base_event import BaseEvent
from .event_types import EventType, EventCategory


class RecordCreatedEvent(BaseEvent):
    """Event published when a record and its notification are persisted."""
    
    def __init__(
        self,
        record: Record,
        notification: Notification,
        actor_id: Optional[str] = None
    ):
        super().__init__(
            event_type=EventType.RECORD_CREATED,
            event_category=EventCategory.RECORD,
            actor_id=actor_id or record.owner_id,
            data={
                "record": record.to_dict(),
                "notification": notification.to_dict()
            },
            source="write_coordinator"
        )


class RecordUpdatedEvent(BaseEvent):
    """Event published when a record is updated."""
    
    def __init__(self, record: Record, actor_id: Optional[str] = None):
        super().__init__(
            event_type=EventType.RECORD_UPDATED,
            event_category=EventCategory.RECORD,
            actor_id=actor_id or record.owner_id,
            data={
                "record": record.to_dict()
            },
            source="write_coordinator"
        )


class RecordDeletedEvent(BaseEvent):
    """Event published when a record is deleted. Carries only the id."""
    
    def __init__(self, record_id: str, actor_id: Optional[str] = None):
        super().__init__(
            event_type=EventType.RECORD_DELETED,
            event_category=EventCategory.RECORD,
            actor_id=actor_id,
            data={
                "id": record_id
            },
            source="write_coordinator"
        )


class NotificationsSeenEvent(BaseEvent):
    """Event published when a curator marks all notifications as seen."""
    
    def __init__(self, count: int, actor_id: Optional[str] = None):
        super().__init__(
            event_type=EventType.NOTIFICATIONS_SEEN,
            event_category=EventCategory.NOTIFICATION,
            actor_id=actor_id,
            data={
                "count": count
            },
            source="notification_fanout"
        )

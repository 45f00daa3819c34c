"""
Document change events used for cross-session sync.
"""

from typing import Optional

from .base_event import BaseEvent
from .event_types import EventType, EventCategory


class DocumentChangedEvent(BaseEvent):
    """
    Event published after a versioned document is committed.
    
    ``origin`` is the session that committed the change; it is not
    notified about its own write.
    """
    
    def __init__(
        self,
        key: str,
        raw_value: str,
        version: int,
        origin: Optional[str] = None
    ):
        super().__init__(
            event_type=EventType.DOCUMENT_CHANGED,
            event_category=EventCategory.DOCUMENT,
            actor_id=origin,
            data={
                "key": key,
                "raw_value": raw_value,
                "version": version
            },
            source="versioned_document"
        )
    
    @property
    def key(self) -> str:
        return self.data["key"]
    
    @property
    def raw_value(self) -> str:
        return self.data["raw_value"]
    
    @property
    def origin(self) -> Optional[str]:
        return self.actor_id

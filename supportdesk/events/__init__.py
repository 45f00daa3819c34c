"""
Event components for SupportDesk.

This package provides:
- Event types and categories
- Base event model
- Channel-based event bus for pub/sub
- Concrete record and document events
"""

from .event_types import EventType, EventCategory
from .base_event import BaseEvent
from .event_bus import EventBus, EventBusStats
from .record_events import (
    RecordCreatedEvent,
    RecordUpdatedEvent,
    RecordDeletedEvent,
    NotificationsSeenEvent,
)
from .document_events import DocumentChangedEvent

__all__ = [
    "EventType",
    "EventCategory",
    "BaseEvent",
    "EventBus",
    "EventBusStats",
    "RecordCreatedEvent",
    "RecordUpdatedEvent",
    "RecordDeletedEvent",
    "NotificationsSeenEvent",
    "DocumentChangedEvent",
]

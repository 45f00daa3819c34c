"""
Event types and categories.
"""

from enum import Enum


class EventCategory(str, Enum):
    """Categories of events in the system."""
    
    RECORD = "record"
    NOTIFICATION = "notification"
    DOCUMENT = "document"


class EventType(str, Enum):
    """Specific event types in the system."""
    
    # Record Events (curator channel)
    RECORD_CREATED = "record.created"
    RECORD_UPDATED = "record.updated"
    RECORD_DELETED = "record.deleted"
    
    # Notification Events
    NOTIFICATIONS_SEEN = "notifications.seen"
    
    # Document Events (cross-session sync)
    DOCUMENT_CHANGED = "document.changed"

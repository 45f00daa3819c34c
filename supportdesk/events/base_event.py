"""
Base event model.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field
import uuid

from .event_types import EventType, EventCategory


class BaseEvent(BaseModel):
    """
    Base class for all events in the system.
    
    Provides common metadata and structure for events.
    """
    
    model_config = ConfigDict(use_enum_values=True)
    
    # Event metadata
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_type: EventType
    event_category: EventCategory
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    
    # Context
    actor_id: Optional[str] = None  # User whose action produced the event
    
    # Event data
    data: Dict[str, Any]
    
    # Source metadata
    source: str  # Component that created the event
    
    def to_message(self) -> Dict[str, Any]:
        """JSON-ready form sent to live subscribers."""
        return {
            "type": self.event_type,
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
        }

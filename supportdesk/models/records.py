"""
Record and notification models.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


# Fields a support user must fill in when logging a session
REQUIRED_RECORD_FIELDS = ("date", "time", "group", "mentor", "student", "theme", "status")

# Fields owned by the system; never replaced by an update patch
IDENTITY_FIELDS = ("id", "owner_id", "owner_name", "created_at")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    """Roles of dashboard users."""
    
    SUPPORT = "support"
    CURATOR = "curator"


class UserSession(BaseModel):
    """
    Identity of the caller, issued by the (external) auth layer.
    """
    
    model_config = ConfigDict(use_enum_values=False)
    
    id: str = Field(..., min_length=1, description="User ID")
    name: str = Field("", description="Display name")
    role: Role = Field(Role.SUPPORT, description="User role")
    
    @property
    def is_curator(self) -> bool:
        return self.role == Role.CURATOR


class Record(BaseModel):
    """
    A logged tutoring session.
    
    Attributes:
        id: Unique identifier
        owner_id: Support user who created the record
        owner_name: Display name of the owner at creation time
        created_at: Creation timestamp (UTC)
        date, time, group, mentor, student, theme, status: Session details
    """
    
    id: str = Field(..., description="Unique identifier")
    owner_id: str = Field(..., description="Owner user ID")
    owner_name: str = Field("", description="Owner display name")
    created_at: datetime = Field(default_factory=utcnow, description="Creation timestamp (UTC)")
    
    date: str
    time: str
    group: str
    mentor: str
    student: str
    theme: str
    status: str
    
    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class NotificationType(str, Enum):
    """Notification kinds."""
    
    NEW_RECORD = "new_record"


class Notification(BaseModel):
    """
    Curator notification about an accepted record.
    
    ``seen`` only moves from False to True via "mark all seen".
    """
    
    id: str = Field(..., description="Unique identifier")
    record_id: str = Field(..., description="Record that spawned the notification")
    actor_id: str = Field(..., description="User who created the record")
    payload: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    seen: bool = False
    
    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

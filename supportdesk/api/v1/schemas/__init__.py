"""
API схемы (DTO) для v1.
"""

from .record_schemas import (
    SubmitRecordRequest,
    RecordResponse,
    DeleteRecordResponse,
)
from .notification_schemas import NotificationResponse
from .profile_schemas import ProfileWriteRequest, ProfileResponse, ProfileWriteResponse
from .health_schemas import HealthResponse

__all__ = [
    "SubmitRecordRequest",
    "RecordResponse",
    "DeleteRecordResponse",
    "NotificationResponse",
    "ProfileWriteRequest",
    "ProfileResponse",
    "ProfileWriteResponse",
    "HealthResponse",
]

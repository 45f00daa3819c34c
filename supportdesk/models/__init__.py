"""
Модели данных SupportDesk.
"""

from .records import (
    Role,
    UserSession,
    Record,
    Notification,
    NotificationType,
    REQUIRED_RECORD_FIELDS,
    IDENTITY_FIELDS,
)
from .documents import (
    VersionedDocument,
    WriteStatus,
    WriteResult,
    DEFAULT_PROFILE,
)
from .locks import Lock

__all__ = [
    "Role",
    "UserSession",
    "Record",
    "Notification",
    "NotificationType",
    "REQUIRED_RECORD_FIELDS",
    "IDENTITY_FIELDS",
    "VersionedDocument",
    "WriteStatus",
    "WriteResult",
    "DEFAULT_PROFILE",
    "Lock",
]

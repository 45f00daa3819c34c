"""
Сервисы прикладного слоя SupportDesk.
"""

from .notification_fanout import NotificationFanout
from .write_coordinator import WriteCoordinator
from .curator_connections import CuratorConnectionManager
from .documents import (
    VersionedDocumentStore,
    CrossSessionSync,
    DocumentSession,
)

__all__ = [
    "NotificationFanout",
    "WriteCoordinator",
    "CuratorConnectionManager",
    "VersionedDocumentStore",
    "CrossSessionSync",
    "DocumentSession",
]

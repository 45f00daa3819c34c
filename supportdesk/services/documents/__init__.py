"""
Версионные документы и межсессионная синхронизация.
"""

from .versioned_document import VersionedDocumentStore, is_empty_value
from .cross_session_sync import CrossSessionSync, DocumentSession, SaveStatus

__all__ = [
    "VersionedDocumentStore",
    "is_empty_value",
    "CrossSessionSync",
    "DocumentSession",
    "SaveStatus",
]

"""
Versioned document models for optimistic concurrency.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


DEFAULT_PROFILE: Dict[str, Any] = {
    "full_name": "",
    "email": "",
    "role": "Support",
    "phone": "",
    "avatar_url": "",
    "bio": "",
}


class VersionedDocument(BaseModel):
    """
    A single document guarded by a version counter.
    
    Every successful write increments ``version`` by exactly one
    relative to the version it was read from.
    """
    
    data: Dict[str, Any] = Field(default_factory=dict)
    version: int = Field(0, ge=0)
    updated_at: Optional[datetime] = None
    
    def to_raw(self) -> str:
        """Serialize to the raw form kept in storage and sent to other sessions."""
        return self.model_dump_json()
    
    @classmethod
    def from_raw(cls, raw: Any, defaults: Optional[Dict[str, Any]] = None) -> "VersionedDocument":
        """
        Build a document from a raw stored value.
        
        Accepts a JSON string or an already decoded dict. Missing data
        fields are filled from ``defaults``.
        """
        if isinstance(raw, (str, bytes)):
            document = cls.model_validate_json(raw)
        elif raw is None:
            document = cls()
        else:
            document = cls.model_validate(raw)
        
        if defaults:
            document.data = {**defaults, **document.data}
        return document


class WriteStatus(str, Enum):
    """Outcome of a versioned write."""
    
    SAVED = "saved"
    CONFLICT = "conflict"


class WriteResult(BaseModel):
    """
    Result of ``VersionedDocumentStore.write``.
    
    On CONFLICT ``value`` holds the merged, not yet persisted document.
    """
    
    status: WriteStatus
    value: VersionedDocument
    
    @property
    def saved(self) -> bool:
        return self.status == WriteStatus.SAVED
    
    @property
    def conflict(self) -> bool:
        return self.status == WriteStatus.CONFLICT

"""
Схемы для версионного профиля.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from ....models.documents import VersionedDocument, WriteResult, WriteStatus


class ProfileResponse(BaseModel):
    data: Dict[str, Any]
    version: int
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: VersionedDocument) -> "ProfileResponse":
        return cls(**document.model_dump())


class ProfileWriteRequest(BaseModel):
    """
    Запись профиля относительно версии, с которой начато редактирование.

    Пример:
        {"version": 3, "patch": {"bio": "Frontend mentor"}}
    """
    version: int = Field(..., ge=0)
    patch: Dict[str, Any] = Field(default_factory=dict)


class ProfileWriteResponse(BaseModel):
    status: WriteStatus
    value: ProfileResponse

    @classmethod
    def from_result(cls, result: WriteResult) -> "ProfileWriteResponse":
        return cls(status=result.status, value=ProfileResponse.from_document(result.value))

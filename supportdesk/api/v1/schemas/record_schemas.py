"""
Схемы для записей журнала.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ....models.records import Record


class SubmitRecordRequest(BaseModel):
    """
    Запрос на создание записи.

    Поля необязательны на уровне схемы: проверку заполненности
    выполняет WriteCoordinator, чтобы ошибка была единообразной.
    """
    date: Optional[str] = None
    time: Optional[str] = None
    group: Optional[str] = None
    mentor: Optional[str] = None
    student: Optional[str] = None
    theme: Optional[str] = None
    status: Optional[str] = None


class RecordResponse(BaseModel):
    id: str
    owner_id: str
    owner_name: str
    created_at: datetime
    date: str
    time: str
    group: str
    mentor: str
    student: str
    theme: str
    status: str

    @classmethod
    def from_record(cls, record: Record) -> "RecordResponse":
        return cls(**record.model_dump())


class DeleteRecordResponse(BaseModel):
    success: bool = True
    id: str

"""
Records роутер.

Предоставляет endpoints для создания, изменения и удаления записей
журнала. Вся логика конкурентности - в WriteCoordinator.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from ..errors import to_http_exception
from ..schemas.record_schemas import DeleteRecordResponse, RecordResponse, SubmitRecordRequest
from ....core.dependencies import get_current_session, get_write_coordinator
from ....core.errors import SupportDeskError
from ....models.records import UserSession
from ....services import WriteCoordinator

logger = logging.getLogger("supportdesk.api.records")

router = APIRouter(prefix="/records", tags=["records"])


@router.get("", response_model=List[RecordResponse])
async def list_records(
    owner_id: Optional[str] = None,
    date: Optional[str] = None,
    group: Optional[str] = None,
    search: Optional[str] = None,
    session: UserSession = Depends(get_current_session),
    coordinator: WriteCoordinator = Depends(get_write_coordinator)
) -> List[RecordResponse]:
    """
    Список записей, новые первыми.
    
    Куратор видит все записи, сотрудник поддержки - только свои.
    """
    records = await coordinator.list_records(
        session,
        owner_id=owner_id,
        date=date,
        group=group,
        search=search
    )
    return [RecordResponse.from_record(r) for r in records]


@router.post("", response_model=RecordResponse, status_code=201)
async def submit_record(
    request: SubmitRecordRequest,
    session: UserSession = Depends(get_current_session),
    coordinator: WriteCoordinator = Depends(get_write_coordinator)
) -> RecordResponse:
    """
    Создать запись.
    
    Raises:
        HTTPException 400: Обязательное поле не заполнено
        HTTPException 503: Ресурс занят (можно повторить)
    
    Пример запроса:
        POST /records
        {
            "date": "01.01.2026",
            "time": "10:00",
            "group": "G1",
            "mentor": "M",
            "student": "S",
            "theme": "T",
            "status": "group"
        }
    """
    try:
        record = await coordinator.submit(session, request.model_dump())
        return RecordResponse.from_record(record)
    except SupportDeskError as e:
        logger.warning(f"Submit rejected for {session.id}: {e.message}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error submitting record: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/{record_id}", response_model=RecordResponse)
async def update_record(
    record_id: str,
    patch: Dict[str, Any] = Body(...),
    session: UserSession = Depends(get_current_session),
    coordinator: WriteCoordinator = Depends(get_write_coordinator)
) -> RecordResponse:
    """
    Изменить свою запись.
    
    Raises:
        HTTPException 400: Неизвестное или пустое поле
        HTTPException 403: Запись принадлежит другому пользователю
        HTTPException 404: Запись не найдена
        HTTPException 503: Ресурс занят (можно повторить)
    """
    try:
        record = await coordinator.update(session, record_id, patch)
        return RecordResponse.from_record(record)
    except SupportDeskError as e:
        logger.warning(f"Update of {record_id} rejected for {session.id}: {e.message}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error updating record {record_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{record_id}", response_model=DeleteRecordResponse)
async def delete_record(
    record_id: str,
    session: UserSession = Depends(get_current_session),
    coordinator: WriteCoordinator = Depends(get_write_coordinator)
) -> DeleteRecordResponse:
    """
    Удалить свою запись.
    
    Raises:
        HTTPException 403: Запись принадлежит другому пользователю
        HTTPException 404: Запись не найдена или уже удалена
        HTTPException 503: Ресурс занят (можно повторить)
    """
    try:
        await coordinator.delete(session, record_id)
        return DeleteRecordResponse(id=record_id)
    except SupportDeskError as e:
        logger.warning(f"Delete of {record_id} rejected for {session.id}: {e.message}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Error deleting record {record_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

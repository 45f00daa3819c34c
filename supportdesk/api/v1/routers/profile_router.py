"""
Profile роутер.

Профиль - версионный документ: запись с устаревшей версией
возвращает status=conflict и слитое значение, которое клиент
должен отправить повторно.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header

from ..errors import to_http_exception
from ..schemas.profile_schemas import ProfileResponse, ProfileWriteRequest, ProfileWriteResponse
from ....core.container import ServiceContainer
from ....core.dependencies import get_container, get_current_session
from ....core.errors import SupportDeskError
from ....models.documents import VersionedDocument
from ....models.records import UserSession

logger = logging.getLogger("supportdesk.api.profile")

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def read_profile(
    session: UserSession = Depends(get_current_session),
    container: ServiceContainer = Depends(get_container)
) -> ProfileResponse:
    document = await container.profile_document(session.id).read()
    return ProfileResponse.from_document(document)


@router.put("", response_model=ProfileWriteResponse)
async def write_profile(
    request: ProfileWriteRequest,
    session: UserSession = Depends(get_current_session),
    container: ServiceContainer = Depends(get_container),
    x_session_id: Optional[str] = Header(default=None)
) -> ProfileWriteResponse:
    """
    Сохранить изменения профиля.

    ``X-Session-Id`` - вкладка-автор: её подключение к /ws/profile
    не получит сигнал о собственном сохранении.
    
    Пример ответа при конфликте:
        {
            "status": "conflict",
            "value": {"data": {...}, "version": 4, "updated_at": "..."}
        }
    """
    documents = container.profile_document(session.id)
    try:
        result = await documents.write(
            VersionedDocument(version=request.version),
            request.patch,
            origin=x_session_id
        )
    except SupportDeskError as e:
        logger.warning(f"Profile write failed for {session.id}: {e.message}")
        raise to_http_exception(e)
    return ProfileWriteResponse.from_result(result)

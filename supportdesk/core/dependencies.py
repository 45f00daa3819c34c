"""
FastAPI зависимости.

Сервисы берутся из контейнера на ``app.state``, созданного в lifespan.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from ..models.records import Role, UserSession
from ..services import NotificationFanout, WriteCoordinator
from .container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_write_coordinator(container: ServiceContainer = Depends(get_container)) -> WriteCoordinator:
    return container.write_coordinator


def get_notification_fanout(container: ServiceContainer = Depends(get_container)) -> NotificationFanout:
    return container.fanout


def get_current_session(
    x_user_id: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=""),
    x_user_role: Optional[str] = Header(default=Role.SUPPORT.value),
) -> UserSession:
    """
    Сессия вызывающего из заголовков, выставленных слоем аутентификации.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        role = Role(x_user_role or Role.SUPPORT.value)
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Unknown role: {x_user_role}")
    return UserSession(id=x_user_id, name=x_user_name or "", role=role)

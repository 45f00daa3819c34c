"""
Исключения прикладного слоя.

Ошибки последовательности действий вызывающего, а не бизнес-правил
или инфраструктуры.
"""

from typing import Optional, Dict, Any
from .base import ApplicationError


class NothingToResubmitError(ApplicationError):
    """
    Исключение: нет слитого значения для повторной отправки.
    
    Выбрасывается при ``resubmit_merge`` без предшествующего конфликта.
    
    Пример:
        >>> raise NothingToResubmitError(session_id="tab-1", key="profile:u1")
    """
    
    def __init__(
        self,
        session_id: str,
        key: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            session_id: ID сессии
            key: Ключ документа
            details: Дополнительные детали
        """
        message = f"Сессия '{session_id}' не имеет слитого значения для '{key}'"
        super().__init__(
            message=message,
            details={
                "session_id": session_id,
                "key": key,
                **(details or {})
            },
            error_code="NOTHING_TO_RESUBMIT"
        )

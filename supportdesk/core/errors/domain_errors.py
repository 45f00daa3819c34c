"""
Доменные исключения.

Исключения для ошибок бизнес-логики и нарушения бизнес-правил.
"""

from typing import Optional, Dict, Any, List
from .base import DomainError


class RecordValidationError(DomainError):
    """
    Исключение: запись не прошла валидацию.
    
    Выбрасывается когда обязательные поля отсутствуют или пусты,
    либо патч содержит неизвестные поля. Повтор не имеет смысла.
    
    Пример:
        >>> raise RecordValidationError(fields=["date", "theme"])
    """
    
    def __init__(
        self,
        fields: List[str],
        reason: str = "required field is missing or empty",
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            fields: Поля с ошибкой
            reason: Причина ошибки
            details: Дополнительные детали
        """
        message = f"Ошибка валидации полей {', '.join(fields)}: {reason}"
        super().__init__(
            message=message,
            details={
                "fields": list(fields),
                "reason": reason,
                **(details or {})
            },
            error_code="VALIDATION_ERROR"
        )


class RecordNotFoundError(DomainError):
    """
    Исключение: запись не найдена.
    
    Пример:
        >>> raise RecordNotFoundError("record-123")
    """
    
    def __init__(self, record_id: str, details: Optional[Dict[str, Any]] = None):
        """
        Args:
            record_id: ID несуществующей записи
            details: Дополнительные детали
        """
        message = f"Запись '{record_id}' не найдена"
        super().__init__(
            message=message,
            details={"record_id": record_id, **(details or {})},
            error_code="NOT_FOUND"
        )


class ForbiddenError(DomainError):
    """
    Исключение: нет прав на операцию.
    
    Выбрасывается при попытке изменить чужую запись или
    обратиться к ресурсам куратора без соответствующей роли.
    
    Пример:
        >>> raise ForbiddenError(
        ...     actor_id="u2",
        ...     action="update",
        ...     resource="record:r1"
        ... )
    """
    
    def __init__(
        self,
        actor_id: str,
        action: str,
        resource: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            actor_id: Кто выполняет операцию
            action: Операция
            resource: Ресурс
            details: Дополнительные детали
        """
        message = (
            f"Пользователь '{actor_id}' не может выполнить "
            f"'{action}' для {resource}"
        )
        super().__init__(
            message=message,
            details={
                "actor_id": actor_id,
                "action": action,
                "resource": resource,
                **(details or {})
            },
            error_code="FORBIDDEN"
        )

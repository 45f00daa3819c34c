"""
Инфраструктурные исключения.

Исключения для ошибок хранилища, блокировок и доставки событий.
"""

from typing import Optional, Dict, Any
from .base import InfrastructureError


class LockTimeoutError(InfrastructureError):
    """
    Исключение: не удалось захватить блокировку.
    
    Выбрасывается когда ресурс занят дольше, чем позволяет
    бюджет повторов. Ошибка временная: вызывающий может
    повторить операцию целиком.
    
    Пример:
        >>> raise LockTimeoutError(
        ...     resource_id="record:update:r1",
        ...     attempts=10,
        ...     waited=1.0
        ... )
    """
    
    retryable = True
    
    def __init__(
        self,
        resource_id: str,
        attempts: int,
        waited: float,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            resource_id: ID ресурса
            attempts: Количество попыток захвата
            waited: Суммарное ожидание (секунды)
            details: Дополнительные детали
        """
        message = (
            f"Не удалось захватить блокировку '{resource_id}' "
            f"после {attempts} попыток ({waited:.2f}s)"
        )
        super().__init__(
            message=message,
            details={
                "resource_id": resource_id,
                "attempts": attempts,
                "waited": waited,
                **(details or {})
            },
            error_code="LOCK_TIMEOUT"
        )


class StorageError(InfrastructureError):
    """
    Исключение: ошибка работы с хранилищем.
    
    Пример:
        >>> raise StorageError(
        ...     operation="set",
        ...     key="records",
        ...     reason="Disk full"
        ... )
    """
    
    def __init__(
        self,
        operation: str,
        key: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            operation: Операция (get, set)
            key: Ключ документа
            reason: Причина ошибки
            details: Дополнительные детали
        """
        message = (
            f"Ошибка хранилища при операции '{operation}' "
            f"с ключом '{key}': {reason}"
        )
        super().__init__(
            message=message,
            details={
                "operation": operation,
                "key": key,
                "reason": reason,
                **(details or {})
            },
            error_code="STORAGE_ERROR"
        )


class DeliveryError(InfrastructureError):
    """
    Исключение: ошибка доставки события подписчику.
    
    Перехватывается шиной событий и только логируется:
    запись к этому моменту уже сохранена.
    
    Пример:
        >>> raise DeliveryError(
        ...     channel="curators",
        ...     subscriber="conn-1",
        ...     reason="Connection closed"
        ... )
    """
    
    def __init__(
        self,
        channel: str,
        subscriber: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            channel: Канал
            subscriber: Идентификатор подписчика
            reason: Причина ошибки
            details: Дополнительные детали
        """
        message = (
            f"Ошибка доставки в канал '{channel}' "
            f"подписчику '{subscriber}': {reason}"
        )
        super().__init__(
            message=message,
            details={
                "channel": channel,
                "subscriber": subscriber,
                "reason": reason,
                **(details or {})
            },
            error_code="DELIVERY_ERROR"
        )

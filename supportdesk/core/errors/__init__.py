"""
Кастомные исключения для SupportDesk.

Этот модуль содержит иерархию исключений для различных
ошибочных ситуаций в системе.
"""

from .base import (
    SupportDeskError,
    DomainError,
    InfrastructureError,
    ApplicationError
)

from .domain_errors import (
    RecordValidationError,
    RecordNotFoundError,
    ForbiddenError,
)

from .infrastructure_errors import (
    LockTimeoutError,
    StorageError,
    DeliveryError,
)

from .application_errors import (
    NothingToResubmitError,
)

__all__ = [
    # Базовые исключения
    "SupportDeskError",
    "DomainError",
    "InfrastructureError",
    "ApplicationError",
    
    # Доменные исключения
    "RecordValidationError",
    "RecordNotFoundError",
    "ForbiddenError",
    
    # Инфраструктурные исключения
    "LockTimeoutError",
    "StorageError",
    "DeliveryError",
    
    # Исключения прикладного слоя
    "NothingToResubmitError",
]

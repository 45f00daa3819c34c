"""
Базовые исключения для SupportDesk.

Определяет иерархию исключений для различных слоев приложения.
"""

from typing import Optional, Dict, Any


class SupportDeskError(Exception):
    """
    Базовое исключение для всех ошибок SupportDesk.
    
    Все кастомные исключения должны наследоваться от этого класса.
    Позволяет легко отлавливать все ошибки приложения.
    
    Атрибуты:
        message: Сообщение об ошибке
        details: Дополнительные детали ошибки
        error_code: Код ошибки для идентификации
        retryable: Можно ли повторить всю операцию целиком
    
    Пример:
        >>> try:
        ...     raise SupportDeskError("Something went wrong")
        ... except SupportDeskError as e:
        ...     print(f"Error: {e}")
    """
    
    retryable: bool = False
    
    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        """
        Инициализация исключения.
        
        Args:
            message: Сообщение об ошибке
            details: Дополнительные детали (опционально)
            error_code: Код ошибки (опционально)
        """
        self.message = message
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__
        super().__init__(self.message)
    
    def to_dict(self) -> Dict[str, Any]:
        """
        Преобразовать исключение в словарь.
        
        Полезно для логирования и API ответов.
        
        Returns:
            Словарь с информацией об ошибке
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }
    
    def __str__(self) -> str:
        """Строковое представление ошибки"""
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class DomainError(SupportDeskError):
    """
    Базовое исключение для ошибок доменного слоя.
    
    Используется для ошибок бизнес-логики: валидация записей,
    отсутствие записи, нарушение прав владельца.
    """
    pass


class InfrastructureError(SupportDeskError):
    """
    Базовое исключение для ошибок инфраструктурного слоя.
    
    Используется для ошибок работы с хранилищем, блокировками
    и доставкой событий.
    """
    pass


class ApplicationError(SupportDeskError):
    """
    Базовое исключение для ошибок прикладного слоя.
    """
    pass

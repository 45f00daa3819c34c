"""
Управление конкурентностью.

Этот модуль содержит механизмы для безопасной работы
с конкурентными операциями.
"""

from .lock_service import LockService

__all__ = [
    "LockService",
]

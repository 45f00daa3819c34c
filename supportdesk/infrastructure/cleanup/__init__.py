"""
Сервисы автоматической очистки.

Этот модуль содержит фоновые сервисы для автоматической
очистки устаревших данных и освобождения ресурсов.
"""

from .lock_sweeper import LockSweepService

__all__ = [
    "LockSweepService",
]

"""
SupportDesk - журнал сессий поддержки с уведомлениями куратора.

Пакет содержит слой управления конкурентностью: блокировки ресурсов,
версионирование документов и рассылку событий кураторам.
"""

__version__ = "0.1.0"

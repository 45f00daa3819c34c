"""
Контейнер сервисов SupportDesk.

Собирает все сервисы одного экземпляра приложения. Состояние
блокировок и документов живет в экземпляре контейнера, а не в
глобальных переменных модулей: тесты создают изолированные контейнеры.
"""

import logging
from typing import Dict, Optional

from ..events import EventBus
from ..infrastructure.cleanup import LockSweepService
from ..infrastructure.concurrency import LockService
from ..infrastructure.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from ..models.documents import DEFAULT_PROFILE
from ..services import (
    CrossSessionSync,
    CuratorConnectionManager,
    NotificationFanout,
    VersionedDocumentStore,
    WriteCoordinator,
)
from .config import AppConfig

logger = logging.getLogger("supportdesk.core.container")


class ServiceContainer:
    """
    Контейнер зависимостей с жизненным циклом приложения.

    Пример:
        >>> container = ServiceContainer(AppConfig(storage_backend="memory"))
        >>> await container.start()
        >>> record = await container.write_coordinator.submit(session, payload)
        >>> await container.stop()
    """

    def __init__(self, config: AppConfig, store: Optional[KeyValueStore] = None):
        """
        Args:
            config: Настройки
            store: Готовое хранилище (по умолчанию по config.storage_backend)
        """
        self.config = config
        self.store = store or self._create_store(config)

        self.lock_service = LockService(
            timeout=config.lock_timeout,
            max_retries=config.lock_max_retries,
            retry_delay=config.lock_retry_delay
        )
        self.lock_sweeper = LockSweepService(
            self.lock_service,
            interval=config.lock_sweep_interval
        )

        self.event_bus = EventBus()
        self.fanout = NotificationFanout(
            self.store,
            self.lock_service,
            self.event_bus,
            channel=config.curator_channel,
            wait_for_delivery=config.wait_for_delivery
        )
        self.write_coordinator = WriteCoordinator(
            self.store,
            self.lock_service,
            self.fanout
        )
        self.document_sync = CrossSessionSync(self.event_bus)
        self.curator_connections = CuratorConnectionManager(
            self.event_bus,
            channel=config.curator_channel
        )

        self._documents: Dict[str, VersionedDocumentStore] = {}

        logger.debug(f"ServiceContainer initialized (storage={config.storage_backend})")

    @staticmethod
    def _create_store(config: AppConfig) -> KeyValueStore:
        if config.storage_backend == "memory":
            return InMemoryKeyValueStore()
        return JsonFileKeyValueStore(config.data_dir)

    def profile_document(self, user_id: str) -> VersionedDocumentStore:
        """Версионный документ профиля пользователя (один на ключ)."""
        key = f"profile:{user_id}"
        if key not in self._documents:
            self._documents[key] = VersionedDocumentStore(
                self.store,
                self.lock_service,
                key,
                defaults=DEFAULT_PROFILE,
                sync=self.document_sync
            )
        return self._documents[key]

    async def start(self):
        await self.lock_sweeper.start()
        logger.info("ServiceContainer started")

    async def stop(self):
        await self.lock_sweeper.stop()
        await self.event_bus.drain()
        self.document_sync.close()
        logger.info("ServiceContainer stopped")

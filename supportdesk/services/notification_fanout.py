"""
Рассылка уведомлений кураторам.

Создает и сохраняет уведомление о новой записи и доставляет события
всем подключенным подписчикам канала. Доставка best-effort: ошибка
у одного подписчика логируется и не откатывает уже сохраненную запись.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..core.errors import ForbiddenError
from ..events import BaseEvent, EventBus, RecordCreatedEvent, NotificationsSeenEvent
from ..infrastructure.concurrency import LockService
from ..infrastructure.storage import (
    KeyValueStore,
    NOTIFICATIONS_KEY,
    apply_to_collection,
    mutate_collection,
)
from ..models.records import Notification, NotificationType, Record, UserSession

logger = logging.getLogger("supportdesk.services.notification_fanout")


class NotificationFanout:
    """
    Сервис уведомлений и live-рассылки.

    Транзакционная единица - запись и сохранение уведомления;
    live-доставка - побочный эффект поверх неё и может теряться:
    отключенный куратор увидит сохраненное уведомление при следующем
    запросе списка.

    Атрибуты:
        _store: Хранилище документов
        _locks: Сервис блокировок
        _event_bus: Шина событий с каналами подписчиков
        _channel: Канал кураторов
        _wait_for_delivery: Ждать ли завершения доставки в publish

    Пример:
        >>> fanout = NotificationFanout(store, locks, event_bus)
        >>> notification = fanout.build_notification(record)
        >>> await fanout.store_notification(notification)
        >>> await fanout.record_created(record, notification, session)
    """

    def __init__(
        self,
        store: KeyValueStore,
        lock_service: LockService,
        event_bus: EventBus,
        channel: str = "curators",
        wait_for_delivery: bool = False,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4())
    ):
        """
        Args:
            store: Хранилище документов
            lock_service: Сервис блокировок
            event_bus: Шина событий
            channel: Канал кураторов
            wait_for_delivery: Ждать доставки всем подписчикам
            clock: Источник времени
            id_factory: Генератор ID уведомлений
        """
        self._store = store
        self._locks = lock_service
        self._event_bus = event_bus
        self._channel = channel
        self._wait_for_delivery = wait_for_delivery
        self._clock = clock
        self._id_factory = id_factory

    @property
    def channel(self) -> str:
        return self._channel

    async def publish(self, channel: str, event: BaseEvent) -> None:
        """
        Доставить событие всем текущим подписчикам канала.

        Никогда не выбрасывает исключений: запись к этому моменту
        уже сохранена.

        Args:
            channel: Канал
            event: Событие
        """
        try:
            await self._event_bus.publish(
                channel,
                event,
                wait_for_handlers=self._wait_for_delivery
            )
        except Exception as e:
            logger.error(
                f"Failed to publish {event.event_type} to {channel}: {e}",
                exc_info=True
            )

    def build_notification(self, record: Record) -> Notification:
        """
        Построить уведомление о новой записи.
        """
        return Notification(
            id=self._id_factory(),
            record_id=record.id,
            actor_id=record.owner_id,
            payload={
                "type": NotificationType.NEW_RECORD.value,
                "owner_name": record.owner_name,
                "student": record.student,
                "group": record.group,
                "theme": record.theme,
            },
            created_at=self._clock(),
            seen=False
        )

    async def store_notification(self, notification: Notification) -> Notification:
        """
        Дописать уведомление в коллекцию notifications.

        Вызывающий держит ``collection:notifications``: уведомление
        сохраняется в одной транзакции с записью.

        Raises:
            StorageError: Если запись не удалась
        """
        await apply_to_collection(
            self._store,
            NOTIFICATIONS_KEY,
            lambda items: items.append(notification.to_dict())
        )
        logger.info(f"Notification {notification.id} stored for record {notification.record_id}")
        return notification

    async def record_created(
        self,
        record: Record,
        notification: Notification,
        actor: Optional[UserSession] = None
    ) -> None:
        """
        Разослать record.created после сохранения записи и уведомления.

        Args:
            record: Сохраненная запись
            notification: Сохраненное уведомление
            actor: Автор записи
        """
        await self.publish(
            self._channel,
            RecordCreatedEvent(
                record=record,
                notification=notification,
                actor_id=actor.id if actor else None
            )
        )

    async def list_notifications(self, session: UserSession) -> List[Notification]:
        """
        Все уведомления, новые первыми. Только для куратора.

        Raises:
            ForbiddenError: Если вызывающий не куратор
        """
        self._require_curator(session, "list")
        items = await self._store.get(NOTIFICATIONS_KEY, [])
        notifications = [Notification.model_validate(item) for item in items]
        notifications.sort(key=lambda n: n.created_at, reverse=True)
        return notifications

    async def count_unseen(self, session: UserSession) -> int:
        notifications = await self.list_notifications(session)
        return sum(1 for n in notifications if not n.seen)

    async def mark_all_seen(self, session: UserSession) -> List[Notification]:
        """
        Отметить все уведомления просмотренными.

        ``seen`` меняется только false -> true.

        Raises:
            ForbiddenError: Если вызывающий не куратор
            LockTimeoutError: Если блокировка не получена
        """
        self._require_curator(session, "mark_seen")

        def mark(items):
            changed = 0
            for item in items:
                if not item.get("seen"):
                    item["seen"] = True
                    changed += 1
            return changed

        async with self._locks.lock("notifications:seen"):
            changed = await mutate_collection(self._store, self._locks, NOTIFICATIONS_KEY, mark)
            logger.info(f"Curator {session.id} marked {changed} notifications as seen")
            await self.publish(
                self._channel,
                NotificationsSeenEvent(count=changed, actor_id=session.id)
            )

        return await self.list_notifications(session)

    def _require_curator(self, session: UserSession, action: str) -> None:
        if not session.is_curator:
            raise ForbiddenError(
                actor_id=session.id,
                action=action,
                resource="notifications"
            )

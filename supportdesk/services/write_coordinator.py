"""
Координатор записи журналов поддержки.

Выполняет последовательности read-modify-write для создания,
изменения и удаления записей как сериализованную единицу на
каждый целевой ресурс.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ..core.errors import ForbiddenError, RecordNotFoundError, RecordValidationError
from ..events import RecordDeletedEvent, RecordUpdatedEvent
from ..infrastructure.concurrency import LockService
from ..infrastructure.storage import (
    KeyValueStore,
    NOTIFICATIONS_KEY,
    RECORDS_KEY,
    collection_lock_id,
    mutate_collection,
)
from ..models.records import IDENTITY_FIELDS, REQUIRED_RECORD_FIELDS, Record, UserSession
from .notification_fanout import NotificationFanout

logger = logging.getLogger("supportdesk.services.write_coordinator")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class WriteCoordinator:
    """
    Сериализует изменения записей через LockService.

    Гранулярность блокировок - ``<operation>:<target>``:
    - ``record:submit:<owner_id>`` - только последовательные отправки
      одного автора ждут друг друга; разные авторы пишут параллельно;
    - ``record:update:<id>`` / ``record:delete:<id>`` - два изменения
      одной записи не перемешивают чтение и запись (lost update).

    Атрибуты:
        _store: Хранилище документов
        _locks: Сервис блокировок
        _fanout: Сервис уведомлений кураторов

    Пример:
        >>> coordinator = WriteCoordinator(store, locks, fanout)
        >>> record = await coordinator.submit(session, payload)
        >>> await coordinator.update(session, record.id, {"theme": "CSS Grid"})
        >>> await coordinator.delete(session, record.id)
    """

    def __init__(
        self,
        store: KeyValueStore,
        lock_service: LockService,
        fanout: NotificationFanout,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4())
    ):
        """
        Args:
            store: Хранилище документов
            lock_service: Сервис блокировок
            fanout: Сервис уведомлений
            clock: Источник времени
            id_factory: Генератор ID записей
        """
        self._store = store
        self._locks = lock_service
        self._fanout = fanout
        self._clock = clock
        self._id_factory = id_factory

    async def submit(self, session: UserSession, payload: Dict[str, Any]) -> Record:
        """
        Создать запись и парное уведомление куратору.

        Args:
            session: Автор
            payload: Поля записи (все обязательные)

        Returns:
            Созданная запись

        Raises:
            RecordValidationError: Обязательное поле отсутствует или пусто
            LockTimeoutError: Блокировка не получена
            StorageError: Запись или уведомление не сохранены (ничего не зафиксировано)
        """
        fields = self._validate_payload(payload)

        async with self._locks.lock(f"record:submit:{session.id}"):
            record = Record(
                id=self._id_factory(),
                owner_id=session.id,
                owner_name=session.name,
                created_at=self._clock(),
                **fields
            )
            notification = self._fanout.build_notification(record)

            # Запись и уведомление - одна транзакция: если уведомление
            # не сохранено, запись не остается в хранилище
            async with self._locks.lock(collection_lock_id(NOTIFICATIONS_KEY)):
                await mutate_collection(
                    self._store,
                    self._locks,
                    RECORDS_KEY,
                    lambda items: items.append(record.to_dict())
                )
                try:
                    await self._fanout.store_notification(notification)
                except Exception:
                    await self._discard_record(record.id)
                    raise

            logger.info(f"Record {record.id} submitted by {session.id}")
            await self._fanout.record_created(record, notification, actor=session)

        return record

    async def update(self, session: UserSession, record_id: str, patch: Dict[str, Any]) -> Record:
        """
        Изменить запись владельца (замена полей, не глубокое слияние).

        Args:
            session: Вызывающий
            record_id: ID записи
            patch: Новые значения полей

        Returns:
            Обновленная запись

        Raises:
            RecordValidationError: Неизвестные поля или пустое обязательное поле
            RecordNotFoundError: Запись не найдена
            ForbiddenError: Запись принадлежит другому пользователю
            LockTimeoutError: Блокировка не получена
        """
        changes = self._validate_patch(patch)

        def apply(items: List[Dict[str, Any]]) -> Record:
            index = self._find_index(items, record_id)
            current = Record.model_validate(items[index])
            self._check_owner(session, current, "update")
            updated = current.model_copy(update=changes)
            items[index] = updated.to_dict()
            return updated

        async with self._locks.lock(f"record:update:{record_id}"):
            record = await mutate_collection(self._store, self._locks, RECORDS_KEY, apply)
            logger.info(f"Record {record_id} updated by {session.id}: {sorted(changes)}")

            await self._fanout.publish(
                self._fanout.channel,
                RecordUpdatedEvent(record=record, actor_id=session.id)
            )

        return record

    async def delete(self, session: UserSession, record_id: str) -> None:
        """
        Удалить запись владельца (без soft delete).

        Raises:
            RecordNotFoundError: Запись не найдена (в т.ч. уже удалена)
            ForbiddenError: Запись принадлежит другому пользователю
            LockTimeoutError: Блокировка не получена
        """
        def remove(items: List[Dict[str, Any]]) -> None:
            index = self._find_index(items, record_id)
            self._check_owner(session, Record.model_validate(items[index]), "delete")
            del items[index]

        async with self._locks.lock(f"record:delete:{record_id}"):
            await mutate_collection(self._store, self._locks, RECORDS_KEY, remove)
            logger.info(f"Record {record_id} deleted by {session.id}")

            await self._fanout.publish(
                self._fanout.channel,
                RecordDeletedEvent(record_id=record_id, actor_id=session.id)
            )

    async def list_records(
        self,
        session: UserSession,
        owner_id: Optional[str] = None,
        date: Optional[str] = None,
        group: Optional[str] = None,
        search: Optional[str] = None
    ) -> List[Record]:
        """
        Список записей, новые первыми. Читается без блокировки.

        Куратор видит все записи, сотрудник поддержки - только свои.

        Args:
            session: Вызывающий
            owner_id: Фильтр по автору
            date: Фильтр по дате
            group: Фильтр по группе
            search: Подстрока в student/mentor/theme/group
        """
        if not session.is_curator:
            owner_id = session.id

        records = [Record.model_validate(item) for item in await self._store.get(RECORDS_KEY, [])]

        if owner_id:
            records = [r for r in records if r.owner_id == owner_id]
        if date:
            records = [r for r in records if r.date == date]
        if group:
            records = [r for r in records if r.group == group]
        if search:
            q = search.lower()
            records = [
                r for r in records
                if q in f"{r.student}{r.mentor}{r.theme}{r.group}".lower()
            ]

        records.sort(key=lambda r: r.created_at, reverse=True)
        return records

    def _validate_payload(self, payload: Dict[str, Any]) -> Dict[str, str]:
        if not isinstance(payload, dict):
            raise RecordValidationError(fields=list(REQUIRED_RECORD_FIELDS), reason="payload must be an object")

        missing = [name for name in REQUIRED_RECORD_FIELDS if _is_blank(payload.get(name))]
        if missing:
            raise RecordValidationError(fields=missing)

        return {name: str(payload[name]).strip() for name in REQUIRED_RECORD_FIELDS}

    def _validate_patch(self, patch: Dict[str, Any]) -> Dict[str, str]:
        if not isinstance(patch, dict):
            raise RecordValidationError(fields=[], reason="patch must be an object")

        # Идентификационные поля не меняются
        changes = {k: v for k, v in patch.items() if k not in IDENTITY_FIELDS}

        unknown = [k for k in changes if k not in REQUIRED_RECORD_FIELDS]
        if unknown:
            raise RecordValidationError(fields=unknown, reason="unknown field")

        blank = [k for k, v in changes.items() if _is_blank(v)]
        if blank:
            raise RecordValidationError(fields=blank)

        return {k: str(v).strip() for k, v in changes.items()}

    @staticmethod
    def _find_index(items: List[Dict[str, Any]], record_id: str) -> int:
        for index, item in enumerate(items):
            if item.get("id") == record_id:
                return index
        raise RecordNotFoundError(record_id)

    @staticmethod
    def _check_owner(session: UserSession, record: Record, action: str) -> None:
        if record.owner_id != session.id:
            raise ForbiddenError(
                actor_id=session.id,
                action=action,
                resource=f"record:{record.id}"
            )

    async def _discard_record(self, record_id: str) -> None:
        """Откатить добавленную запись, если её уведомление не сохранилось."""
        def remove(items: List[Dict[str, Any]]) -> None:
            items[:] = [item for item in items if item.get("id") != record_id]

        try:
            await mutate_collection(self._store, self._locks, RECORDS_KEY, remove)
            logger.warning(f"Record {record_id} rolled back: notification was not stored")
        except Exception as e:
            logger.error(f"Failed to roll back record {record_id}: {e}", exc_info=True)

"""
Оптимистичная конкурентность для одиночных документов.

Документ хранится вместе со счетчиком версий. Запись с устаревшей
базовой версией - это конфликт, а не ошибка: вместо перезаписи
возвращается слитое значение, которое вызывающий должен отправить
повторно явно.
"""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from ...infrastructure.concurrency import LockService
from ...infrastructure.storage import KeyValueStore
from ...models.documents import VersionedDocument, WriteResult, WriteStatus

if TYPE_CHECKING:
    from .cross_session_sync import CrossSessionSync

logger = logging.getLogger("supportdesk.services.versioned_document")


def is_empty_value(value: Any) -> bool:
    """None, пустая строка и пустые коллекции считаются пустыми."""
    if value is None:
        return True
    if isinstance(value, (str, list, dict, tuple, set)):
        return len(value) == 0
    return False


class VersionedDocumentStore:
    """
    Обертка над одним документом хранилища с версией.

    Атрибуты:
        _store: Хранилище документов
        _locks: Сервис блокировок (сериализует read-compare-write)
        _key: Ключ документа
        _defaults: Значения полей по умолчанию
        _sync: Межсессионная синхронизация (опционально)

    Пример:
        >>> profile = VersionedDocumentStore(store, locks, "profile:u1", DEFAULT_PROFILE)
        >>> doc = await profile.read()
        >>> result = await profile.write(doc, {"bio": "Frontend mentor"})
        >>> if result.conflict:
        ...     result = await profile.write(result.value, result.value.data)
    """

    def __init__(
        self,
        store: KeyValueStore,
        lock_service: LockService,
        key: str,
        defaults: Optional[Dict[str, Any]] = None,
        sync: Optional["CrossSessionSync"] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        self._store = store
        self._locks = lock_service
        self._key = key
        self._defaults = dict(defaults or {})
        self._sync = sync
        self._clock = clock

    @property
    def key(self) -> str:
        return self._key

    @property
    def defaults(self) -> Dict[str, Any]:
        return dict(self._defaults)

    async def read(self) -> VersionedDocument:
        """
        Текущее сохраненное значение и версия.

        Отсутствующий документ читается как версия 0 со значениями
        по умолчанию.
        """
        raw = await self._store.get(self._key)
        return VersionedDocument.from_raw(raw, self._defaults)

    async def write(
        self,
        base: VersionedDocument,
        patch: Dict[str, Any],
        origin: Optional[str] = None
    ) -> WriteResult:
        """
        Записать изменения относительно базовой версии.

        Если сохраненная версия равна ``base.version``: патч применяется
        к сохраненным данным, версия +1, результат SAVED.
        Иначе хранилище не меняется, результат CONFLICT со слитым значением.

        Args:
            base: Документ, от которого сделаны изменения
            patch: Измененные поля
            origin: Сессия-автор (не получит собственный сигнал)

        Returns:
            WriteResult

        Raises:
            LockTimeoutError: Блокировка документа не получена
        """
        async with self._locks.lock(f"document:{self._key}"):
            latest = await self.read()

            if latest.version != base.version:
                merged = self.merge(latest, patch)
                logger.info(
                    f"Conflict on {self._key}: base version {base.version}, "
                    f"stored version {latest.version}"
                )
                return WriteResult(status=WriteStatus.CONFLICT, value=merged)

            saved = VersionedDocument(
                data={**latest.data, **patch},
                version=latest.version + 1,
                updated_at=self._clock()
            )
            await self._store.set(self._key, saved.model_dump(mode="json"))

        logger.info(f"Document {self._key} saved at version {saved.version}")

        if self._sync is not None:
            await self._sync.notify(self._key, saved, origin=origin)

        return WriteResult(status=WriteStatus.SAVED, value=saved)

    @staticmethod
    def merge(latest: VersionedDocument, patch: Dict[str, Any]) -> VersionedDocument:
        """
        Слить локальные изменения с сохраненным значением.

        Непустое локально измененное поле побеждает удаленное значение;
        для полей вне патча остается удаленное значение. Пустое локальное
        значение (например, очищенное поле) проигрывает удаленному.

        Слитое значение несет сохраненную версию, поэтому повторная
        отправка пройдет, если документ больше не менялся.
        """
        data = dict(latest.data)
        for name, value in patch.items():
            if not is_empty_value(value):
                data[name] = value

        return VersionedDocument(
            data=data,
            version=latest.version,
            updated_at=latest.updated_at
        )

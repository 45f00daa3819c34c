"""
Межсессионная синхронизация версионных документов.

После сохранения документа остальные сессии, открывшие тот же ключ,
получают сигнал ``on_document_changed(key, raw_value)`` и принимают
новое значение, только если его версия строго больше локальной.
"""

import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError

from ...core.errors import NothingToResubmitError
from ...events import DocumentChangedEvent, EventBus
from ...models.documents import VersionedDocument, WriteResult
from .versioned_document import VersionedDocumentStore, is_empty_value

logger = logging.getLogger("supportdesk.services.cross_session_sync")


class CrossSessionSync:
    """
    Транспорт сигналов изменения документов между сессиями.

    Поверх шины событий: публикует DocumentChangedEvent в канал
    документов и раздает его прикрепленным сессиям с тем же ключом,
    кроме сессии-автора.

    Пример:
        >>> sync = CrossSessionSync(event_bus)
        >>> profile = VersionedDocumentStore(store, locks, "profile:u1", sync=sync)
        >>> tab = DocumentSession("tab-1", profile, sync)
        >>> await tab.open()
    """

    def __init__(self, event_bus: EventBus, channel: str = "documents"):
        self._event_bus = event_bus
        self._channel = channel
        self._sessions: Dict[str, List["DocumentSession"]] = defaultdict(list)
        self._unsubscribe = event_bus.subscribe(
            channel,
            handler=self._dispatch,
            name="cross_session_sync"
        )

    def attach(self, session: "DocumentSession") -> None:
        """Начать доставку сигналов сессии."""
        sessions = self._sessions[session.key]
        if session not in sessions:
            sessions.append(session)
            logger.debug(f"Session {session.session_id} attached to {session.key}")

    def detach(self, session: "DocumentSession") -> None:
        """Прекратить доставку сигналов сессии. Идемпотентно."""
        sessions = self._sessions.get(session.key)
        if sessions and session in sessions:
            sessions.remove(session)
            if not sessions:
                del self._sessions[session.key]
            logger.debug(f"Session {session.session_id} detached from {session.key}")

    def session_count(self, key: str) -> int:
        return len(self._sessions.get(key, []))

    async def notify(self, key: str, document: VersionedDocument, origin: Optional[str] = None) -> None:
        """
        Сообщить о сохраненной версии документа.

        Вызывается слоем хранения после фиксации изменения.
        """
        await self._event_bus.publish(
            self._channel,
            DocumentChangedEvent(
                key=key,
                raw_value=document.to_raw(),
                version=document.version,
                origin=origin
            ),
            wait_for_handlers=True
        )

    async def _dispatch(self, event: DocumentChangedEvent) -> None:
        for session in list(self._sessions.get(event.key, [])):
            if origin_matches(session, event.origin):
                continue
            if not session.on_document_changed(event.key, event.raw_value):
                continue
            try:
                await session.announce()
            except Exception as e:
                logger.error(
                    f"[{session.session_id}] Failed to announce {event.key}: {e}",
                    exc_info=True
                )
                self.detach(session)

    def close(self) -> None:
        self._unsubscribe()
        self._sessions.clear()


def origin_matches(session: "DocumentSession", origin: Optional[str]) -> bool:
    return origin is not None and session.session_id == origin


class SaveStatus(str, Enum):
    """Состояние сохранения в сессии."""

    IDLE = "idle"
    SAVED = "saved"
    CONFLICT = "conflict"


class DocumentSession:
    """
    Сессия (вкладка), просматривающая и редактирующая один документ.

    Хранит последнюю известную зафиксированную версию и локальные
    незафиксированные правки отдельно: сигнал о более новой версии
    обновляет базу, но правки не теряет.

    Атрибуты:
        session_id: ID сессии
        committed: Последняя известная зафиксированная версия
        pending: Незафиксированные локальные правки
        merge_candidate: Слитое значение после конфликта
        _on_adopted: Слушатель принятых версий (например, WebSocket клиента)
    """

    def __init__(
        self,
        session_id: str,
        documents: VersionedDocumentStore,
        sync: Optional[CrossSessionSync] = None,
        on_adopted: Optional[Callable[[VersionedDocument], Awaitable[None]]] = None
    ):
        self.session_id = session_id
        self._documents = documents
        self._sync = sync
        self._on_adopted = on_adopted
        self.committed = VersionedDocument(data=documents.defaults)
        self.pending: Dict[str, Any] = {}
        self.merge_candidate: Optional[VersionedDocument] = None
        self.status = SaveStatus.IDLE

    @property
    def key(self) -> str:
        return self._documents.key

    @property
    def view(self) -> VersionedDocument:
        """Что видит пользователь: зафиксированная база + локальные правки."""
        return VersionedDocument(
            data={**self.committed.data, **self.pending},
            version=self.committed.version,
            updated_at=self.committed.updated_at
        )

    async def open(self) -> VersionedDocument:
        """Загрузить документ и подписаться на сигналы."""
        self.committed = await self._documents.read()
        if self._sync is not None:
            self._sync.attach(self)
        return self.view

    def close(self) -> None:
        if self._sync is not None:
            self._sync.detach(self)

    def edit(self, patch: Dict[str, Any]) -> VersionedDocument:
        """Локальная правка без сохранения."""
        self.pending.update(patch)
        self.status = SaveStatus.IDLE
        return self.view

    async def save(self) -> WriteResult:
        """
        Сохранить локальные правки относительно зафиксированной базы.

        При конфликте слитое значение кладется в ``merge_candidate``
        и ждет явного ``resubmit_merge``.
        """
        result = await self._documents.write(
            self.committed,
            dict(self.pending),
            origin=self.session_id
        )
        self._apply_result(result)
        return result

    async def resubmit_merge(self) -> WriteResult:
        """
        Явно отправить слитое значение после конфликта.

        Патчем служат только собственные непустые правки сессии:
        поля, которые пользователь не трогал, остаются за хранилищем,
        даже если между конфликтом и повторной отправкой их снова
        изменили. При повторном конфликте слияние делается заново.

        Raises:
            NothingToResubmitError: Конфликта не было
        """
        if self.merge_candidate is None:
            raise NothingToResubmitError(session_id=self.session_id, key=self.key)

        own_edits = {
            name: value for name, value in self.pending.items()
            if not is_empty_value(value)
        }
        result = await self._documents.write(
            self.merge_candidate,
            own_edits,
            origin=self.session_id
        )
        self._apply_result(result)
        return result

    def on_document_changed(self, key: str, raw_value: Any) -> bool:
        """
        Сигнал об изменении документа в другой сессии.

        Принимает значение только при строго большей версии; никогда
        не откатывается на старую версию и не трогает локальные правки.

        Returns:
            True если значение принято
        """
        if key != self.key:
            return False

        try:
            incoming = VersionedDocument.from_raw(raw_value, self._documents.defaults)
        except (ValidationError, ValueError) as e:
            logger.warning(f"[{self.session_id}] Ignoring malformed value for {key}: {e}")
            return False

        if incoming.version <= self.committed.version:
            logger.debug(
                f"[{self.session_id}] Ignoring {key} version {incoming.version} "
                f"(local {self.committed.version})"
            )
            return False

        logger.debug(
            f"[{self.session_id}] Adopting {key} version {incoming.version} "
            f"(was {self.committed.version}, pending={sorted(self.pending)})"
        )
        self.committed = incoming
        return True

    async def announce(self) -> None:
        """Передать слушателю текущее представление после принятия версии."""
        if self._on_adopted is not None:
            await self._on_adopted(self.view)

    def _apply_result(self, result: WriteResult) -> None:
        if result.saved:
            self.committed = result.value
            self.pending = {}
            self.merge_candidate = None
            self.status = SaveStatus.SAVED
        else:
            self.merge_candidate = result.value
            self.status = SaveStatus.CONFLICT

"""
Блокировки ресурсов для предотвращения race conditions.

Краткоживущие мьютексы по resource_id с повторами захвата
и истечением устаревших блокировок.
"""

import asyncio
import inspect
import logging
import time
import uuid
from contextlib import asynccontextmanager
from threading import Lock as ThreadLock
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from ...core.errors import LockTimeoutError
from ...models.locks import Lock

logger = logging.getLogger("supportdesk.infrastructure.lock_service")


class LockService:
    """
    Сервис блокировок на уровне ресурсов.

    Гарантирует, что для одного resource_id в каждый момент
    выполняется не более одной защищенной секции. Разные
    resource_id не конкурируют друг с другом.

    Блокировка "жива", пока её возраст меньше timeout, с которым
    она была захвачена. Устаревшая
    блокировка считается отсутствующей и удаляется лениво при
    попытке захвата или фоновой очисткой.

    Рекомендуемая схема resource_id: ``"<operation>:<target>"``,
    например ``record:update:<id>``.

    Атрибуты:
        _locks: Активные блокировки по resource_id
        _mutex: Блокировка для атомарной проверки-и-установки
        _timeout: Время жизни блокировки по умолчанию (секунды)
        _max_retries: Максимум попыток захвата в with_lock
        _retry_delay: Пауза между попытками (секунды)

    Пример:
        >>> locks = LockService()
        >>> async with locks.lock("record:update:r1"):
        ...     record = await load("r1")
        ...     await save(record)
    """

    def __init__(
        self,
        timeout: float = 5.0,
        max_retries: int = 10,
        retry_delay: float = 0.1,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Инициализация сервиса блокировок.

        Args:
            timeout: Время жизни блокировки (секунды)
            max_retries: Количество попыток захвата в with_lock
            retry_delay: Пауза между попытками (секунды)
            clock: Источник времени (для тестов)
        """
        self._locks: Dict[str, Lock] = {}
        self._mutex = ThreadLock()
        self._timeout = timeout
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._clock = clock

        logger.info(
            f"LockService initialized "
            f"(timeout={timeout}s, retries={max_retries}, delay={retry_delay}s)"
        )

    @property
    def timeout(self) -> float:
        return self._timeout

    def acquire(self, resource_id: str, timeout: Optional[float] = None) -> bool:
        """
        Попытаться захватить блокировку без ожидания.

        Args:
            resource_id: ID ресурса
            timeout: Время жизни блокировки (по умолчанию из конструктора)

        Returns:
            True если блокировка захвачена, False если ресурс занят
        """
        return self._try_acquire(resource_id, timeout) is not None

    def release(self, resource_id: str, holder_token: Optional[str] = None) -> None:
        """
        Освободить блокировку.

        Идемпотентно: освобождение отсутствующей блокировки не ошибка.
        Если передан holder_token, блокировка удаляется только когда
        она всё ещё принадлежит этому владельцу.

        Args:
            resource_id: ID ресурса
            holder_token: Токен владельца (опционально)
        """
        with self._mutex:
            current = self._locks.get(resource_id)
            if current is None:
                return
            if holder_token is not None and current.holder_token != holder_token:
                logger.warning(
                    f"Lock {resource_id} was taken over by another holder "
                    f"after expiry, leaving it in place"
                )
                return
            del self._locks[resource_id]
        logger.debug(f"Lock released: {resource_id}")

    @asynccontextmanager
    async def lock(self, resource_id: str, timeout: Optional[float] = None):
        """
        Захватить блокировку с повторами на время блока ``async with``.

        Блокировка освобождается на любом пути выхода, включая исключения.

        Args:
            resource_id: ID ресурса
            timeout: Время жизни блокировки (по умолчанию из конструктора)

        Raises:
            LockTimeoutError: Если ресурс не освободился за бюджет повторов
        """
        token = await self._acquire_with_retry(resource_id, timeout)
        try:
            yield
        finally:
            self.release(resource_id, holder_token=token)

    async def with_lock(
        self,
        resource_id: str,
        fn: Callable[[], Union[Awaitable[Any], Any]],
        timeout: Optional[float] = None
    ) -> Any:
        """
        Выполнить функцию под блокировкой.

        Args:
            resource_id: ID ресурса
            fn: Функция без аргументов (sync или async)
            timeout: Время жизни блокировки

        Returns:
            Результат fn

        Raises:
            LockTimeoutError: Если ресурс не освободился за бюджет повторов
        """
        async with self.lock(resource_id, timeout):
            result = fn()
            if inspect.isawaitable(result):
                result = await result
            return result

    def sweep_expired(self) -> int:
        """
        Удалить все блокировки, чей возраст >= их timeout.

        Returns:
            Количество удаленных блокировок
        """
        now = self._clock()
        with self._mutex:
            expired = [
                resource_id for resource_id, lock in self._locks.items()
                if not lock.is_live(now)
            ]
            for resource_id in expired:
                del self._locks[resource_id]

        if expired:
            logger.info(f"Swept {len(expired)} expired locks")
        return len(expired)

    def get_lock_count(self) -> int:
        """
        Получить количество записей о блокировках (включая устаревшие).
        """
        return len(self._locks)

    def is_locked(self, resource_id: str) -> bool:
        """
        Проверить, удерживается ли живая блокировка на ресурсе.
        """
        lock = self._locks.get(resource_id)
        return lock.is_live(self._clock()) if lock else False

    def _try_acquire(self, resource_id: str, timeout: Optional[float]) -> Optional[str]:
        """Атомарная проверка-и-установка. Возвращает токен владельца или None."""
        timeout = self._timeout if timeout is None else timeout
        now = self._clock()

        with self._mutex:
            existing = self._locks.get(resource_id)
            if existing is not None and existing.is_live(now):
                return None
            if existing is not None:
                logger.debug(
                    f"Lock {resource_id} expired after "
                    f"{existing.age(now):.2f}s, taking over"
                )

            token = uuid.uuid4().hex
            self._locks[resource_id] = Lock(
                resource_id=resource_id,
                acquired_at=now,
                holder_token=token,
                timeout=timeout
            )

        logger.debug(f"Lock acquired: {resource_id}")
        return token

    async def _acquire_with_retry(self, resource_id: str, timeout: Optional[float]) -> str:
        """Повторять захват с фиксированной паузой, пока не исчерпан бюджет."""
        for attempt in range(self._max_retries):
            token = self._try_acquire(resource_id, timeout)
            if token is not None:
                if attempt > 0:
                    logger.debug(f"Lock {resource_id} acquired on attempt {attempt + 1}")
                return token
            await asyncio.sleep(self._retry_delay)

        waited = self._max_retries * self._retry_delay
        logger.warning(
            f"Unable to acquire lock {resource_id} after "
            f"{self._max_retries} attempts ({waited:.2f}s)"
        )
        raise LockTimeoutError(
            resource_id=resource_id,
            attempts=self._max_retries,
            waited=waited
        )

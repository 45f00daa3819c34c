"""
Сервис фоновой очистки устаревших блокировок.

Страховка на случай, когда владелец блокировки не освободил её
(например, упал): ограничивает рост словаря блокировок.
"""

import asyncio
import logging

from ..concurrency.lock_service import LockService

logger = logging.getLogger("supportdesk.infrastructure.lock_sweeper")


class LockSweepService:
    """
    Сервис периодической очистки блокировок.
    
    Запускает фоновую задачу, которая каждые ``interval`` секунд
    удаляет блокировки старше их timeout.
    
    Атрибуты:
        _lock_service: Сервис блокировок
        _interval: Интервал между очистками (секунды)
        _task: Фоновая задача
    
    Пример:
        >>> sweeper = LockSweepService(lock_service, interval=10.0)
        >>> await sweeper.start()
        >>> ...
        >>> await sweeper.stop()
    """
    
    def __init__(self, lock_service: LockService, interval: float = 10.0):
        """
        Args:
            lock_service: Сервис блокировок
            interval: Интервал между очистками (секунды)
        """
        self._lock_service = lock_service
        self._interval = interval
        self._task: asyncio.Task | None = None
        self._running = False
        
        logger.info(f"LockSweepService initialized (interval={interval}s)")
    
    async def start(self):
        """
        Запустить фоновую очистку.
        """
        if self._running:
            logger.warning("LockSweepService already running")
            return
        
        self._running = True
        self._task = asyncio.create_task(self._sweep_loop())
        logger.info("LockSweepService started")
    
    async def stop(self):
        """
        Остановить фоновую очистку и дождаться завершения задачи.
        """
        if not self._running:
            return
        
        self._running = False
        
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        
        logger.info("LockSweepService stopped")
    
    async def _sweep_loop(self):
        """
        Цикл очистки, выполняется в фоне.
        """
        while self._running:
            try:
                await asyncio.sleep(self._interval)
                self.sweep_now()
            except asyncio.CancelledError:
                logger.info("Sweep loop cancelled")
                break
            except Exception as e:
                logger.error(f"Error in sweep loop: {e}", exc_info=True)
    
    def sweep_now(self) -> int:
        """
        Выполнить очистку немедленно (вне расписания).
        
        Returns:
            Количество удаленных блокировок
        """
        count = self._lock_service.sweep_expired()
        if count == 0:
            logger.debug("No expired locks to sweep")
        return count
    
    def is_running(self) -> bool:
        return self._running

"""
Live-подключения кураторов.

Каждое WebSocket-подключение подписывается на канал кураторов;
при отключении или ошибке отправки подписка снимается.
"""

import asyncio
import logging
from typing import Callable, Dict, Optional

from fastapi import WebSocket

from ..core.errors import DeliveryError
from ..events import BaseEvent, EventBus

logger = logging.getLogger("supportdesk.services.curator_connections")


class CuratorConnectionManager:
    """Управляет активными WebSocket-подключениями кураторов: хранит, подписывает, удаляет."""

    def __init__(self, event_bus: EventBus, channel: str = "curators"):
        self._event_bus = event_bus
        self._channel = channel
        self._active_websockets: Dict[str, WebSocket] = {}
        self._unsubscribers: Dict[str, Callable[[], None]] = {}
        self._lock = asyncio.Lock()

    async def connect(self, connection_id: str, websocket: WebSocket) -> None:
        async def deliver(event: BaseEvent):
            try:
                await websocket.send_json(event.to_message())
            except Exception as e:
                await self.disconnect(connection_id)
                raise DeliveryError(
                    channel=self._channel,
                    subscriber=connection_id,
                    reason=str(e)
                ) from e

        async with self._lock:
            if connection_id in self._unsubscribers:
                self._unsubscribers.pop(connection_id)()
            self._active_websockets[connection_id] = websocket
            self._unsubscribers[connection_id] = self._event_bus.subscribe(
                self._channel,
                handler=deliver,
                name=f"curator:{connection_id}"
            )
        logger.info(f"[{connection_id}] Curator subscribed to {self._channel}")

    async def get(self, connection_id: str) -> Optional[WebSocket]:
        async with self._lock:
            return self._active_websockets.get(connection_id)

    async def disconnect(self, connection_id: str) -> None:
        async with self._lock:
            self._active_websockets.pop(connection_id, None)
            unsubscribe = self._unsubscribers.pop(connection_id, None)
        if unsubscribe is not None:
            unsubscribe()
            logger.info(f"[{connection_id}] Curator unsubscribed from {self._channel}")

    def count(self) -> int:
        return len(self._active_websockets)

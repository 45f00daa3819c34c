"""
Pytest configuration and fixtures.
"""

import asyncio
from typing import Any, List

import pytest

from supportdesk.core.errors import StorageError
from supportdesk.events import BaseEvent, EventBus
from supportdesk.infrastructure.concurrency import LockService
from supportdesk.infrastructure.storage import NOTIFICATIONS_KEY, InMemoryKeyValueStore
from supportdesk.models.records import Role, UserSession
from supportdesk.services import NotificationFanout, WriteCoordinator


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class YieldingKeyValueStore(InMemoryKeyValueStore):
    """In-memory store that yields to the event loop on every get/set, like real I/O."""

    async def get(self, key: str, default: Any = None) -> Any:
        await asyncio.sleep(0)
        value = await super().get(key, default)
        await asyncio.sleep(0)
        return value

    async def set(self, key: str, value: Any) -> bool:
        await asyncio.sleep(0)
        return await super().set(key, value)


class FailingNotificationsStore(YieldingKeyValueStore):
    """Store whose notifications document cannot be written."""

    async def set(self, key: str, value: Any) -> bool:
        if key == NOTIFICATIONS_KEY:
            await asyncio.sleep(0)
            raise StorageError(operation="set", key=key, reason="disk full")
        return await super().set(key, value)


class EventCollector:
    """Channel subscriber that remembers every delivered event."""

    def __init__(self):
        self.events: List[BaseEvent] = []

    async def __call__(self, event: BaseEvent):
        self.events.append(event)

    @property
    def types(self) -> List[str]:
        return [e.event_type for e in self.events]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return YieldingKeyValueStore()


@pytest.fixture
def lock_service():
    """Fast retries with a generous attempt budget."""
    return LockService(timeout=5.0, max_retries=400, retry_delay=0.005)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def curator_events(event_bus):
    collector = EventCollector()
    event_bus.subscribe("curators", handler=collector, name="collector")
    return collector


@pytest.fixture
def fanout(store, lock_service, event_bus):
    return NotificationFanout(store, lock_service, event_bus, channel="curators", wait_for_delivery=True)


@pytest.fixture
def coordinator(store, lock_service, fanout):
    return WriteCoordinator(store, lock_service, fanout)


@pytest.fixture
def support_a():
    return UserSession(id="u1", name="Aziza Karimova", role=Role.SUPPORT)


@pytest.fixture
def support_b():
    return UserSession(id="u2", name="Bobur Toshmatov", role=Role.SUPPORT)


@pytest.fixture
def curator():
    return UserSession(id="curator", name="Kurator Admin", role=Role.CURATOR)


@pytest.fixture
def payload():
    return {
        "date": "01.01.2026",
        "time": "10:00",
        "group": "G1",
        "mentor": "M",
        "student": "S",
        "theme": "T",
        "status": "group",
    }

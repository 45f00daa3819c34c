"""
Тесты для WriteCoordinator.

Проверяет валидацию, владение записями, парное уведомление и
отсутствие потерянных обновлений при конкурентных изменениях.
"""

import asyncio

import pytest

from supportdesk.core.errors import (
    ForbiddenError,
    LockTimeoutError,
    RecordNotFoundError,
    RecordValidationError,
    StorageError,
)
from supportdesk.events import EventType
from supportdesk.infrastructure.concurrency import LockService
from supportdesk.infrastructure.storage import NOTIFICATIONS_KEY, RECORDS_KEY
from supportdesk.services import NotificationFanout, WriteCoordinator

from conftest import FailingNotificationsStore


class TestSubmit:
    """Тесты создания записи"""

    @pytest.mark.asyncio
    async def test_submit_persists_record_and_notification(self, coordinator, store, support_a, payload, curator_events):
        """Тест: запись и уведомление сохраняются, кураторы получают record.created"""
        record = await coordinator.submit(support_a, payload)

        records = await store.get(RECORDS_KEY)
        notifications = await store.get(NOTIFICATIONS_KEY)

        assert [r["id"] for r in records] == [record.id]
        assert records[0]["owner_id"] == "u1"
        assert records[0]["owner_name"] == "Aziza Karimova"

        assert len(notifications) == 1
        assert notifications[0]["record_id"] == record.id
        assert notifications[0]["seen"] is False
        assert notifications[0]["payload"]["type"] == "new_record"
        assert notifications[0]["payload"]["student"] == "S"

        assert curator_events.types == [EventType.RECORD_CREATED]
        event = curator_events.events[0]
        assert event.data["record"]["id"] == record.id
        assert event.data["notification"]["id"] == notifications[0]["id"]

    @pytest.mark.asyncio
    async def test_submit_strips_values(self, coordinator, support_a, payload):
        """Тест: значения полей обрезаются по краям"""
        payload["theme"] = "  Flexbox  "

        record = await coordinator.submit(support_a, payload)

        assert record.theme == "Flexbox"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["date", "time", "group", "mentor", "student", "theme", "status"])
    async def test_missing_field_rejected(self, coordinator, store, support_a, payload, field):
        """Тест: отсутствующее обязательное поле - ошибка валидации, ничего не сохраняется"""
        del payload[field]

        with pytest.raises(RecordValidationError) as exc_info:
            await coordinator.submit(support_a, payload)

        assert exc_info.value.details["fields"] == [field]
        assert await store.get(RECORDS_KEY) is None

    @pytest.mark.asyncio
    async def test_busy_notifications_leave_nothing_committed(self, store, event_bus, support_a, payload):
        """Тест: если коллекция уведомлений занята, запись не сохраняется и повтор не дублирует её"""
        locks = LockService(max_retries=2, retry_delay=0.01)
        fanout = NotificationFanout(store, locks, event_bus, wait_for_delivery=True)
        coordinator = WriteCoordinator(store, locks, fanout)
        locks.acquire(f"collection:{NOTIFICATIONS_KEY}")

        with pytest.raises(LockTimeoutError):
            await coordinator.submit(support_a, payload)

        assert await store.get(RECORDS_KEY, []) == []
        assert await store.get(NOTIFICATIONS_KEY, []) == []

        locks.release(f"collection:{NOTIFICATIONS_KEY}")
        record = await coordinator.submit(support_a, payload)

        assert [r["id"] for r in await store.get(RECORDS_KEY)] == [record.id]
        assert [n["record_id"] for n in await store.get(NOTIFICATIONS_KEY)] == [record.id]

    @pytest.mark.asyncio
    async def test_failed_notification_write_rolls_back_record(self, lock_service, event_bus, support_a, payload, curator_events):
        """Тест: ошибка сохранения уведомления откатывает запись, событие не рассылается"""
        store = FailingNotificationsStore()
        fanout = NotificationFanout(store, lock_service, event_bus, wait_for_delivery=True)
        coordinator = WriteCoordinator(store, lock_service, fanout)

        with pytest.raises(StorageError):
            await coordinator.submit(support_a, payload)

        assert await store.get(RECORDS_KEY, []) == []
        assert await store.get(NOTIFICATIONS_KEY, []) == []
        assert curator_events.events == []
        assert lock_service.get_lock_count() == 0
        assert await store.get(NOTIFICATIONS_KEY) is None

    @pytest.mark.asyncio
    async def test_blank_field_rejected(self, coordinator, support_a, payload):
        """Тест: пустая строка из пробелов считается отсутствующим полем"""
        payload["student"] = "   "
        payload["group"] = None

        with pytest.raises(RecordValidationError) as exc_info:
            await coordinator.submit(support_a, payload)

        assert sorted(exc_info.value.details["fields"]) == ["group", "student"]

    @pytest.mark.asyncio
    async def test_concurrent_submits_same_owner(self, coordinator, store, support_a, payload):
        """Тест: параллельные отправки одного автора не теряют записи"""
        records = await asyncio.gather(*[
            coordinator.submit(support_a, {**payload, "student": f"S{i}"})
            for i in range(5)
        ])

        stored = await store.get(RECORDS_KEY)
        assert sorted(r["id"] for r in stored) == sorted(r.id for r in records)
        assert len(await store.get(NOTIFICATIONS_KEY)) == 5

    @pytest.mark.asyncio
    async def test_concurrent_submits_different_owners(self, coordinator, store, support_a, support_b, payload):
        """Тест: разные авторы пишут параллельно без потерь"""
        await asyncio.gather(
            coordinator.submit(support_a, payload),
            coordinator.submit(support_b, payload),
            coordinator.submit(support_a, payload),
            coordinator.submit(support_b, payload),
        )

        stored = await store.get(RECORDS_KEY)
        assert sorted(r["owner_id"] for r in stored) == ["u1", "u1", "u2", "u2"]

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_abort_submit(self, coordinator, event_bus, store, support_a, payload):
        """Тест: ошибка доставки не откатывает сохраненную запись"""
        async def broken(event):
            raise ConnectionError("curator went away")

        event_bus.subscribe("curators", handler=broken)

        record = await coordinator.submit(support_a, payload)

        assert [r["id"] for r in await store.get(RECORDS_KEY)] == [record.id]
        assert len(await store.get(NOTIFICATIONS_KEY)) == 1

    @pytest.mark.asyncio
    async def test_submit_not_blocked_by_unrelated_update_lock(self, coordinator, lock_service, support_a, payload):
        """Тест: удерживаемая блокировка другой записи не мешает отправке"""
        lock_service.acquire("record:update:other")

        record = await coordinator.submit(support_a, payload)

        assert record.owner_id == "u1"
        assert lock_service.is_locked("record:update:other")

    @pytest.mark.asyncio
    async def test_lock_timeout_when_owner_submit_held(self, store, event_bus, support_a, payload):
        """Тест: занятая блокировка отправки автора дает LockTimeoutError без записи"""
        locks = LockService(max_retries=2, retry_delay=0.01)
        fanout = NotificationFanout(store, locks, event_bus, wait_for_delivery=True)
        coordinator = WriteCoordinator(store, locks, fanout)
        locks.acquire("record:submit:u1")

        with pytest.raises(LockTimeoutError):
            await coordinator.submit(support_a, payload)

        assert await store.get(RECORDS_KEY) is None


class TestUpdate:
    """Тесты изменения записи"""

    @pytest.mark.asyncio
    async def test_update_replaces_fields(self, coordinator, store, support_a, payload, curator_events):
        """Тест: патч заменяет поля, событие record.updated опубликовано"""
        record = await coordinator.submit(support_a, payload)

        updated = await coordinator.update(support_a, record.id, {"theme": "Grid", "status": "individual"})

        assert updated.theme == "Grid"
        assert updated.status == "individual"
        assert updated.student == "S"
        stored = (await store.get(RECORDS_KEY))[0]
        assert stored["theme"] == "Grid"
        assert curator_events.types == [EventType.RECORD_CREATED, EventType.RECORD_UPDATED]

    @pytest.mark.asyncio
    async def test_identity_fields_ignored(self, coordinator, support_a, payload):
        """Тест: id, автор и время создания не меняются патчем"""
        record = await coordinator.submit(support_a, payload)

        updated = await coordinator.update(
            support_a,
            record.id,
            {"id": "hijack", "owner_id": "u2", "theme": "New"}
        )

        assert updated.id == record.id
        assert updated.owner_id == "u1"
        assert updated.created_at == record.created_at
        assert updated.theme == "New"

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(self, coordinator, support_a, payload):
        """Тест: неизвестное поле - ошибка валидации"""
        record = await coordinator.submit(support_a, payload)

        with pytest.raises(RecordValidationError) as exc_info:
            await coordinator.update(support_a, record.id, {"colour": "red"})

        assert exc_info.value.details["fields"] == ["colour"]

    @pytest.mark.asyncio
    async def test_blank_value_rejected(self, coordinator, support_a, payload):
        """Тест: очистка обязательного поля - ошибка валидации"""
        record = await coordinator.submit(support_a, payload)

        with pytest.raises(RecordValidationError):
            await coordinator.update(support_a, record.id, {"theme": ""})

    @pytest.mark.asyncio
    async def test_update_missing_record(self, coordinator, support_a):
        """Тест: изменение несуществующей записи - NotFound"""
        with pytest.raises(RecordNotFoundError):
            await coordinator.update(support_a, "nope", {"theme": "X"})

    @pytest.mark.asyncio
    async def test_foreign_update_forbidden(self, coordinator, store, support_a, support_b, payload):
        """Тест: чужую запись изменить нельзя, хранилище не меняется"""
        record = await coordinator.submit(support_a, payload)
        before = await store.get(RECORDS_KEY)

        with pytest.raises(ForbiddenError):
            await coordinator.update(support_b, record.id, {"theme": "Hacked"})

        assert await store.get(RECORDS_KEY) == before

    @pytest.mark.asyncio
    async def test_concurrent_updates_no_lost_update(self, coordinator, store, support_a, payload, curator_events):
        """Тест: два параллельных изменения одной записи применяются оба"""
        record = await coordinator.submit(support_a, payload)

        await asyncio.gather(
            coordinator.update(support_a, record.id, {"theme": "A"}),
            coordinator.update(support_a, record.id, {"time": "11:00"}),
        )

        stored = (await store.get(RECORDS_KEY))[0]
        assert stored["theme"] == "A"
        assert stored["time"] == "11:00"

        # Второй по порядку видел результат первого как базу
        updates = [e for e in curator_events.events if e.event_type == EventType.RECORD_UPDATED]
        assert len(updates) == 2
        assert updates[1].data["record"]["theme"] == "A"
        assert updates[1].data["record"]["time"] == "11:00"

    @pytest.mark.asyncio
    async def test_submit_and_unrelated_update_both_complete(self, coordinator, store, support_a, support_b, payload):
        """Тест: отправка и изменение другой записи выполняются параллельно без потерь"""
        existing = await coordinator.submit(support_b, payload)

        created, updated = await asyncio.gather(
            coordinator.submit(support_a, payload),
            coordinator.update(support_b, existing.id, {"theme": "Updated"}),
        )

        stored = {r["id"]: r for r in await store.get(RECORDS_KEY)}
        assert set(stored) == {existing.id, created.id}
        assert stored[existing.id]["theme"] == "Updated"
        assert updated.theme == "Updated"


class TestDelete:
    """Тесты удаления записи"""

    @pytest.mark.asyncio
    async def test_delete(self, coordinator, store, support_a, payload, curator_events):
        """Тест: запись удаляется, событие несет только id"""
        record = await coordinator.submit(support_a, payload)

        await coordinator.delete(support_a, record.id)

        assert await store.get(RECORDS_KEY) == []
        deleted = curator_events.events[-1]
        assert deleted.event_type == EventType.RECORD_DELETED
        assert deleted.data == {"id": record.id}

    @pytest.mark.asyncio
    async def test_double_delete(self, coordinator, support_a, payload):
        """Тест: повторное удаление - NotFound"""
        record = await coordinator.submit(support_a, payload)
        await coordinator.delete(support_a, record.id)

        with pytest.raises(RecordNotFoundError):
            await coordinator.delete(support_a, record.id)

    @pytest.mark.asyncio
    async def test_concurrent_double_delete(self, coordinator, support_a, payload):
        """Тест: из двух параллельных удалений успешно ровно одно"""
        record = await coordinator.submit(support_a, payload)

        results = await asyncio.gather(
            coordinator.delete(support_a, record.id),
            coordinator.delete(support_a, record.id),
            return_exceptions=True
        )

        assert sum(1 for r in results if r is None) == 1
        assert sum(1 for r in results if isinstance(r, RecordNotFoundError)) == 1

    @pytest.mark.asyncio
    async def test_foreign_delete_forbidden(self, coordinator, store, support_a, support_b, payload):
        """Тест: чужую запись удалить нельзя"""
        record = await coordinator.submit(support_a, payload)

        with pytest.raises(ForbiddenError):
            await coordinator.delete(support_b, record.id)

        assert len(await store.get(RECORDS_KEY)) == 1


class TestListRecords:
    """Тесты чтения списка"""

    @pytest.mark.asyncio
    async def test_support_sees_only_own(self, coordinator, support_a, support_b, payload):
        """Тест: сотрудник поддержки видит только свои записи"""
        await coordinator.submit(support_a, payload)
        await coordinator.submit(support_b, payload)

        own = await coordinator.list_records(support_a, owner_id="u2")

        assert [r.owner_id for r in own] == ["u1"]

    @pytest.mark.asyncio
    async def test_curator_sees_all_newest_first(self, coordinator, support_a, support_b, curator, payload):
        """Тест: куратор видит все записи, новые первыми"""
        first = await coordinator.submit(support_a, payload)
        await asyncio.sleep(0.001)
        second = await coordinator.submit(support_b, payload)

        records = await coordinator.list_records(curator)

        assert [r.id for r in records] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_filters(self, coordinator, support_a, curator, payload):
        """Тест: фильтры по автору, дате, группе и поиск"""
        await coordinator.submit(support_a, payload)
        await coordinator.submit(support_a, {**payload, "date": "02.01.2026", "group": "G2", "student": "Dilnoza"})

        assert len(await coordinator.list_records(curator, owner_id="u1")) == 2
        assert len(await coordinator.list_records(curator, owner_id="u2")) == 0
        assert len(await coordinator.list_records(curator, date="02.01.2026")) == 1
        assert len(await coordinator.list_records(curator, group="G1")) == 1
        found = await coordinator.list_records(curator, search="dilnoza")
        assert [r.student for r in found] == ["Dilnoza"]

"""
Тесты для хранилищ документов.
"""

import json

import pytest

from supportdesk.core.errors import StorageError
from supportdesk.infrastructure.storage import InMemoryKeyValueStore, JsonFileKeyValueStore


class TestInMemoryKeyValueStore:
    """Тесты хранилища в памяти"""

    @pytest.mark.asyncio
    async def test_missing_key_returns_default(self):
        store = InMemoryKeyValueStore()

        assert await store.get("records") is None
        assert await store.get("records", []) == []

    @pytest.mark.asyncio
    async def test_values_are_copied(self):
        """Тест: изменение полученного значения не меняет хранилище"""
        store = InMemoryKeyValueStore({"records": [{"id": "r1"}]})

        items = await store.get("records")
        items.append({"id": "r2"})

        assert await store.get("records") == [{"id": "r1"}]
        assert store.keys() == ["records"]


class TestJsonFileKeyValueStore:
    """Тесты файлового хранилища"""

    @pytest.mark.asyncio
    async def test_set_and_get(self, tmp_path):
        store = JsonFileKeyValueStore(str(tmp_path))

        assert await store.set("records", [{"id": "r1", "student": "Дилноза"}]) is True

        assert await store.get("records") == [{"id": "r1", "student": "Дилноза"}]
        assert json.loads((tmp_path / "records.json").read_text(encoding="utf-8"))[0]["id"] == "r1"

    @pytest.mark.asyncio
    async def test_missing_key_returns_default(self, tmp_path):
        store = JsonFileKeyValueStore(str(tmp_path))

        assert await store.get("notifications", []) == []

    @pytest.mark.asyncio
    async def test_unsafe_key_characters(self, tmp_path):
        """Тест: ключ profile:<id> сохраняется в безопасное имя файла"""
        store = JsonFileKeyValueStore(str(tmp_path))

        await store.set("profile:u1", {"version": 1})

        assert (tmp_path / "profile_u1.json").exists()
        assert await store.get("profile:u1") == {"version": 1}

    @pytest.mark.asyncio
    async def test_no_temp_files_left(self, tmp_path):
        store = JsonFileKeyValueStore(str(tmp_path))

        await store.set("records", [])
        await store.set("records", [{"id": "r1"}])

        assert sorted(p.name for p in tmp_path.iterdir()) == ["records.json"]

    @pytest.mark.asyncio
    async def test_corrupt_file_raises_storage_error(self, tmp_path):
        store = JsonFileKeyValueStore(str(tmp_path))
        (tmp_path / "records.json").write_text("{broken", encoding="utf-8")

        with pytest.raises(StorageError) as exc_info:
            await store.get("records")

        assert exc_info.value.details["operation"] == "get"

    @pytest.mark.asyncio
    async def test_unserializable_value_raises_storage_error(self, tmp_path):
        store = JsonFileKeyValueStore(str(tmp_path))

        with pytest.raises(StorageError):
            await store.set("records", [object()])

        assert list(tmp_path.iterdir()) == []

"""
Key-value хранилище документов.

Контракт: ``get(key, default)`` возвращает значение или default
(отсутствие ключа - не ошибка), ``set(key, value)`` сохраняет значение.
Значения - JSON-совместимые структуры.
"""

import asyncio
import copy
import json
import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from ...core.errors import StorageError

logger = logging.getLogger("supportdesk.infrastructure.key_value_store")

RECORDS_KEY = "records"
NOTIFICATIONS_KEY = "notifications"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class KeyValueStore(ABC):
    """
    Абстрактное хранилище именованных документов.
    
    Доступно всем компонентам. Изменять документы records,
    notifications и profile разрешено только под соответствующей
    блокировкой; читать можно без блокировки.
    """
    
    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """
        Получить документ.
        
        Args:
            key: Имя документа
            default: Значение при отсутствии ключа
            
        Returns:
            Копия сохраненного значения или default
        """
        pass
    
    @abstractmethod
    async def set(self, key: str, value: Any) -> bool:
        """
        Сохранить документ.
        
        Args:
            key: Имя документа
            value: JSON-совместимое значение
            
        Returns:
            True при успехе
            
        Raises:
            StorageError: Если запись не удалась
        """
        pass


class InMemoryKeyValueStore(KeyValueStore):
    """
    Хранилище в памяти процесса.
    
    Хранит глубокие копии значений, чтобы вызывающий код
    не мог изменить документ в обход ``set``.
    """
    
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial or {})
    
    async def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return copy.deepcopy(default)
        return copy.deepcopy(self._data[key])
    
    async def set(self, key: str, value: Any) -> bool:
        self._data[key] = copy.deepcopy(value)
        return True
    
    def keys(self):
        return list(self._data.keys())


class JsonFileKeyValueStore(KeyValueStore):
    """
    Хранилище на файлах: один JSON-файл на ключ.
    
    Запись атомарна (временный файл + os.replace), файловый I/O
    выполняется вне event loop.
    
    Пример:
        >>> store = JsonFileKeyValueStore("data")
        >>> await store.set("records", [])
        >>> await store.get("records", [])
        []
    """
    
    def __init__(self, data_dir: str):
        """
        Args:
            data_dir: Каталог для файлов документов
        """
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"JsonFileKeyValueStore initialized (data_dir={self._data_dir})")
    
    def _path_for(self, key: str) -> Path:
        return self._data_dir / f"{_UNSAFE_CHARS.sub('_', key)}.json"
    
    async def get(self, key: str, default: Any = None) -> Any:
        return await asyncio.to_thread(self._read, key, default)
    
    async def set(self, key: str, value: Any) -> bool:
        return await asyncio.to_thread(self._write, key, value)
    
    def _read(self, key: str, default: Any) -> Any:
        path = self._path_for(key)
        if not path.exists():
            return copy.deepcopy(default)
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading {path}: {e}")
            raise StorageError(operation="get", key=key, reason=str(e)) from e
    
    def _write(self, key: str, value: Any) -> bool:
        path = self._path_for(key)
        fd, tmp_path = tempfile.mkstemp(dir=self._data_dir, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error writing {path}: {e}")
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(operation="set", key=key, reason=str(e)) from e
        return True

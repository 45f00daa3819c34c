"""
Read-modify-write для документов-коллекций (records, notifications).
"""

import logging
from typing import Any, Callable, Dict, List, TypeVar

from ..concurrency.lock_service import LockService
from .key_value_store import KeyValueStore

logger = logging.getLogger("supportdesk.infrastructure.collection")

T = TypeVar("T")


def collection_lock_id(key: str) -> str:
    return f"collection:{key}"


async def apply_to_collection(
    store: KeyValueStore,
    key: str,
    mutate: Callable[[List[Dict[str, Any]]], T]
) -> T:
    """
    Прочитать коллекцию, изменить её на месте и сохранить.
    
    Без блокировки: вызывающий уже держит ``collection:<key>``.
    Если ``mutate`` выбрасывает исключение, коллекция не сохраняется.
    """
    items = await store.get(key, [])
    result = mutate(items)
    await store.set(key, items)
    logger.debug(f"Collection {key} saved ({len(items)} items)")
    return result


async def mutate_collection(
    store: KeyValueStore,
    lock_service: LockService,
    key: str,
    mutate: Callable[[List[Dict[str, Any]]], T]
) -> T:
    """
    То же, что ``apply_to_collection``, под блокировкой ``collection:<key>``.
    
    Операции над разными целями (свои блокировки операций) не теряют
    записи друг друга, если хранилище уступает управление между get
    и set. Блокировку коллекции всегда берут после блокировки операции;
    если нужны обе коллекции, ``collection:notifications`` берется
    раньше ``collection:records``.
    
    Args:
        store: Хранилище
        lock_service: Сервис блокировок
        key: Ключ коллекции
        mutate: Функция, изменяющая список на месте
        
    Returns:
        Результат mutate
    """
    async with lock_service.lock(collection_lock_id(key)):
        return await apply_to_collection(store, key, mutate)

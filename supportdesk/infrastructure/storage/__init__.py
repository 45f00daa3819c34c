"""
Хранилища документов.

Предоставляет контракт get/set для именованных документов
и его реализации.
"""

from .collection import apply_to_collection, collection_lock_id, mutate_collection
from .key_value_store import (
    KeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    RECORDS_KEY,
    NOTIFICATIONS_KEY,
)

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "RECORDS_KEY",
    "NOTIFICATIONS_KEY",
    "apply_to_collection",
    "collection_lock_id",
    "mutate_collection",
]

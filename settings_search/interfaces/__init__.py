"""Интерфейсы (контракты) для компонентов системы.

Классы:
    BaseKeyValueStore
        Абстрактное key-value хранилище для истории поиска.
    StorageError
        Ошибка бэкенда хранилища.
"""

from settings_search.interfaces.storage import BaseKeyValueStore, StorageError

__all__ = [
    "BaseKeyValueStore",
    "StorageError",
]

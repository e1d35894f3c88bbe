"""In-memory реализация BaseKeyValueStore.

Классы:
    MemoryKeyValueStore
        Хранилище на словаре, живёт до конца процесса.
"""

import threading
from typing import Optional

from settings_search.interfaces import BaseKeyValueStore
from settings_search.utils.logger import get_logger

logger = get_logger(__name__)


class MemoryKeyValueStore(BaseKeyValueStore):
    """Хранилище в памяти процесса.

    Используется в тестах и при ``storage_backend = "memory"``.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value
        logger.trace("Key stored", key=key, size=len(value))

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)

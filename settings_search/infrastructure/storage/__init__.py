"""Адаптеры локального хранилища истории поиска.

Модули:
    memory
        Хранилище в памяти процесса.
    peewee
        Реализация BaseKeyValueStore для SQLite + Peewee.
"""

from settings_search.infrastructure.storage.memory import MemoryKeyValueStore
from settings_search.infrastructure.storage.peewee.adapter import PeeweeKeyValueStore
from settings_search.infrastructure.storage.peewee.engine import init_peewee_database

__all__ = [
    "MemoryKeyValueStore",
    "PeeweeKeyValueStore",
    "init_peewee_database",
]

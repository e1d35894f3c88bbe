"""Реализация хранилища для Peewee + SQLite.

Модули:
    engine
        Инициализация SQLite.
    models
        Внутренние ORM модели.
    adapter
        Реализация BaseKeyValueStore.
"""

from settings_search.infrastructure.storage.peewee.adapter import PeeweeKeyValueStore
from settings_search.infrastructure.storage.peewee.engine import init_peewee_database

__all__ = [
    "PeeweeKeyValueStore",
    "init_peewee_database",
]

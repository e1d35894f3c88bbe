"""Реализация BaseKeyValueStore для Peewee + SQLite.

Классы:
    PeeweeKeyValueStore
        Файловое key-value хранилище на основе SQLite.
"""

from datetime import datetime
from typing import Optional

from peewee import PeeweeException, SqliteDatabase

from settings_search.interfaces import BaseKeyValueStore, StorageError
from settings_search.infrastructure.storage.peewee.models import StorageEntryModel
from settings_search.utils.logger import get_logger

logger = get_logger(__name__)


class PeeweeKeyValueStore(BaseKeyValueStore):
    """Адаптер key-value хранилища для SQLite + Peewee.

    Ошибки peewee/sqlite3 оборачиваются в StorageError.

    Attributes:
        db: Экземпляр SqliteDatabase.
    """

    def __init__(self, database: SqliteDatabase):
        """Инициализация адаптера.

        Args:
            database: Настроенный экземпляр SqliteDatabase.
        """
        self.db = database

        # Привязываем модель к БД
        StorageEntryModel._meta.database = self.db

        try:
            self.db.create_tables([StorageEntryModel], safe=True)
        except PeeweeException as e:
            raise StorageError(f"Failed to create storage tables: {e}") from e

        logger.debug("PeeweeKeyValueStore initialized", path=str(self.db.database))

    def get(self, key: str) -> Optional[str]:
        try:
            entry = StorageEntryModel.get_or_none(StorageEntryModel.key == key)
        except PeeweeException as e:
            raise StorageError(f"Failed to read '{key}': {e}") from e

        return entry.value if entry is not None else None

    def set(self, key: str, value: str) -> None:
        try:
            with self.db.atomic():
                StorageEntryModel.replace(
                    key=key,
                    value=value,
                    updated_at=datetime.now(),
                ).execute()
        except PeeweeException as e:
            raise StorageError(f"Failed to write '{key}': {e}") from e

        logger.trace("Key stored", key=key, size=len(value))

    def delete(self, key: str) -> None:
        try:
            StorageEntryModel.delete().where(StorageEntryModel.key == key).execute()
        except PeeweeException as e:
            raise StorageError(f"Failed to delete '{key}': {e}") from e

    def close(self) -> None:
        if not self.db.is_closed():
            self.db.close()
            logger.debug("Storage database closed", path=str(self.db.database))

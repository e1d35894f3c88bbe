"""Инициализация SQLite БД для локального хранилища.

Функции:
    init_peewee_database
        Создаёт и настраивает SqliteDatabase.
"""

from pathlib import Path

from peewee import PeeweeException, SqliteDatabase

from settings_search.interfaces import StorageError
from settings_search.utils.logger import get_logger

logger = get_logger(__name__)


def init_peewee_database(db_path: str | Path) -> SqliteDatabase:
    """Инициализирует SQLite БД.

    Родительская директория создаётся при необходимости.
    ``":memory:"`` поддерживается для тестов.

    Args:
        db_path: Путь к файлу БД.

    Returns:
        Подключённый экземпляр SqliteDatabase.

    Raises:
        StorageError: Файл недоступен или не является БД SQLite.
    """
    path_str = str(db_path)
    if path_str != ":memory:":
        Path(path_str).expanduser().parent.mkdir(parents=True, exist_ok=True)

    logger.debug("Initializing storage database", path=path_str)

    database = SqliteDatabase(
        path_str,
        pragmas={
            "journal_mode": "wal",
            "cache_size": -1024 * 8,  # 8MB
            "synchronous": 1,
            "busy_timeout": 5000,
        },
    )
    try:
        database.connect(reuse_if_open=True)
    except PeeweeException as e:
        raise StorageError(f"Cannot open storage database {path_str}: {e}") from e

    logger.info("Storage database initialized", path=path_str)

    return database

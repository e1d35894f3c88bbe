"""Интерфейс локального key-value хранилища.

Классы:
    StorageError
        Ошибка чтения/записи хранилища.
    BaseKeyValueStore
        Абстрактное строковое key-value хранилище.
"""

from abc import ABC, abstractmethod
from typing import Optional


class StorageError(Exception):
    """Ошибка бэкенда хранилища (недоступно, переполнено, повреждено)."""


class BaseKeyValueStore(ABC):
    """Абстрактное key-value хранилище строк.

    Аналог браузерного localStorage: значения - сериализованный JSON,
    разбор выполняет владелец данных. Реализации выбрасывают
    StorageError при любой ошибке бэкенда.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Возвращает значение или None, если ключа нет.

        Raises:
            StorageError: Ошибка бэкенда.
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Сохраняет значение (перезаписывает существующее).

        Raises:
            StorageError: Ошибка бэкенда.
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Удаляет ключ. Отсутствующий ключ не является ошибкой."""
        pass

    def close(self) -> None:
        """Освобождает ресурсы бэкенда."""


__all__ = ["StorageError", "BaseKeyValueStore"]

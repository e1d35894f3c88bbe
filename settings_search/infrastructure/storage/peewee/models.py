"""Внутренние ORM модели для Peewee (скрыты от внешнего API).

Классы:
    BaseModel
        Базовая модель с общими настройками.
    StorageEntryModel
        Одна пара ключ/значение.
"""

from datetime import datetime

from peewee import CharField, DateTimeField, Model, TextField


class BaseModel(Model):
    """Базовая модель (без привязки к конкретной БД).

    База данных устанавливается в адаптере через _meta.database.
    """

    class Meta:
        database = None  # Будет установлена в адаптере


class StorageEntryModel(BaseModel):
    """Запись key-value хранилища.

    Attributes:
        key: Логический ключ (aby_whisky_search_history, ...).
        value: Сериализованный JSON.
        updated_at: Время последней записи.
    """

    key = CharField(max_length=255, primary_key=True)
    value = TextField()
    updated_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "storage_entries"

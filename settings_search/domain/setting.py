"""Модель настройки админки.

Классы:
    DataType
        Перечисление типов значения настройки.
    SearchWeight
        Приоритет настройки в выдаче.
    SearchMetadata
        Поисковые метаданные (заголовок, ключевые слова, синонимы, вес).
    SettingRecord
        DTO одной настройки системы.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Optional


class DataType(str, Enum):
    """Тип значения настройки.

    Attributes:
        BOOLEAN: Флаг ("true"/"false" в API).
        NUMBER: Число.
        STRING: Строка.
        JSON: Произвольный JSON-объект.
        ARRAY: JSON-массив.
    """

    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    JSON = "json"
    ARRAY = "array"


class SearchWeight(str, Enum):
    """Вес настройки при сортировке без нечёткого score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Числовой ранг: high=3, medium=2, low=1."""
        return _WEIGHT_RANK[self]


_WEIGHT_RANK = {
    SearchWeight.LOW: 1,
    SearchWeight.MEDIUM: 2,
    SearchWeight.HIGH: 3,
}


def unique_terms(values: Optional[Iterable[Any]]) -> tuple[str, ...]:
    """Упорядоченное множество непустых строк (первое вхождение побеждает)."""
    if not values:
        return ()
    if isinstance(values, str):
        values = [values]

    seen: dict[str, None] = {}
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text and text not in seen:
            seen[text] = None
    return tuple(seen)


@dataclass(frozen=True)
class SearchMetadata:
    """Поисковые метаданные настройки.

    Attributes:
        title: Человекочитаемый заголовок (пусто = генерируется из key).
        keywords: Ключевые слова (множество с сохранением порядка).
        synonyms: Синонимы (множество с сохранением порядка).
        weight: Приоритет в выдаче.
    """

    title: str = ""
    keywords: tuple[str, ...] = ()
    synonyms: tuple[str, ...] = ()
    weight: SearchWeight = SearchWeight.MEDIUM

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "SearchMetadata":
        data = data or {}
        weight = data.get("weight") or SearchWeight.MEDIUM.value
        try:
            weight = SearchWeight(str(weight).lower())
        except ValueError:
            weight = SearchWeight.MEDIUM

        return cls(
            title=str(data.get("title") or ""),
            keywords=unique_terms(data.get("keywords")),
            synonyms=unique_terms(data.get("synonyms")),
            weight=weight,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "keywords": list(self.keywords),
            "synonyms": list(self.synonyms),
            "weight": self.weight.value,
        }


def humanize_key(key: str) -> str:
    """enable_dark_mode -> Enable Dark Mode."""
    return " ".join(part.capitalize() for part in key.split("_") if part)


def parse_value(raw: Any, data_type: DataType) -> Any:
    """Приводит значение из API к типу настройки.

    Строковые значения разбираются так же, как на бэкенде; при ошибке
    разбора возвращается исходное значение.
    """
    if raw is None or not isinstance(raw, str):
        return raw

    try:
        if data_type is DataType.BOOLEAN:
            return raw == "true"
        if data_type is DataType.NUMBER:
            return float(raw)
        if data_type in (DataType.JSON, DataType.ARRAY):
            return json.loads(raw)
    except ValueError:
        return raw

    return raw


@dataclass(frozen=True)
class SettingRecord:
    """Одна настраиваемая опция системы.

    Не привязана к хранилищу или API: чистый DTO, загружаемый пачкой
    и доступный подсистеме поиска только на чтение.

    Attributes:
        key: Уникальный идентификатор настройки.
        value: Текущее значение (тип зависит от data_type).
        data_type: Тип значения.
        category: Категория (security, email, ...).
        description: Описание для человека.
        search: Поисковые метаданные.
        is_public: Доступна ли настройка не-админам.
        is_readonly: Запрещено ли изменение из UI.
    """

    key: str
    value: Any = None
    data_type: DataType = DataType.STRING
    category: str = "general"
    description: str = ""
    search: SearchMetadata = field(default_factory=SearchMetadata)
    is_public: bool = False
    is_readonly: bool = False

    @property
    def display_title(self) -> str:
        """Заголовок для выдачи: search.title или key в человеческом виде."""
        return self.search.title or humanize_key(self.key)

    @property
    def weight_rank(self) -> int:
        return self.search.weight.rank

    def with_search(self, search: SearchMetadata) -> "SettingRecord":
        """Копия записи с другими поисковыми метаданными."""
        return replace(self, search=search)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SettingRecord":
        """Создаёт запись из ответа API или JSON-файла.

        Поддерживает как snake_case (``data_type``, ``search``), так и
        camelCase (``dataType``, ``searchMetadata``).

        Raises:
            ValueError: Если нет ключа или неизвестный data_type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Setting must be an object, got {type(data).__name__}")

        key = data.get("key")
        if not key or not isinstance(key, str):
            raise ValueError("Setting is missing 'key'")

        raw_type = data.get("data_type") or data.get("dataType") or DataType.STRING.value
        try:
            data_type = DataType(str(raw_type).lower())
        except ValueError as e:
            raise ValueError(f"Unknown data_type '{raw_type}' for setting '{key}'") from e

        search_data = data.get("search")
        if search_data is None:
            search_data = data.get("searchMetadata")

        return cls(
            key=key,
            value=parse_value(data.get("value"), data_type),
            data_type=data_type,
            category=str(data.get("category") or "general"),
            description=str(data.get("description") or ""),
            search=SearchMetadata.from_dict(search_data),
            is_public=bool(data.get("is_public", data.get("isPublic", False))),
            is_readonly=bool(data.get("is_readonly", data.get("isReadonly", False))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "value": self.value,
            "data_type": self.data_type.value,
            "category": self.category,
            "description": self.description,
            "search": self.search.to_dict(),
            "is_public": self.is_public,
            "is_readonly": self.is_readonly,
        }

    def __repr__(self) -> str:
        return (
            f"SettingRecord(key='{self.key}', category='{self.category}', "
            f"weight={self.search.weight.value})"
        )

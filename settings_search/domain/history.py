"""Модели истории поиска.

Классы:
    SearchMode
        Режим поиска (нечёткий / точный).
    SearchHistoryEntry
        Одна запись истории запросов.
    PopularTermStat
        Накопленная статистика по нормализованному запросу.
    SearchSettings
        Пользовательские настройки истории (pydantic, с валидацией).
    SuggestionType
        Источник подсказки (recent / popular).
    Suggestion
        Подсказка автодополнения.
    CategoryCount
        Категория и число запросов, где она встречалась.
    SearchAnalytics
        Агрегированная аналитика по истории.

Все модели сериализуются в camelCase JSON, совместимый с экспортом
из веб-админки.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """datetime -> ISO-8601 с миллисекундами и суффиксом Z."""
    if value is None:
        return None
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: Any) -> datetime:
    """ISO-8601 строка (или datetime) -> aware datetime в UTC.

    Raises:
        ValueError: Если значение не является датой.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class SearchMode(str, Enum):
    """Режим поиска.

    Attributes:
        FUZZY: Нечёткий поиск с допуском опечаток.
        EXACT: Поиск подстроки без учёта регистра.
    """

    FUZZY = "fuzzy"
    EXACT = "exact"


@dataclass
class SearchHistoryEntry:
    """Запись истории поиска.

    Attributes:
        id: Уникальный идентификатор (миллисекунды + случайный суффикс).
        term: Нормализованный запрос (trim + lower).
        original_term: Запрос как введён (после trim).
        timestamp: Время запроса (UTC).
        result_count: Число найденных настроек.
        search_mode: Режим поиска.
        categories: Уникальные категории среди результатов.
    """

    id: str
    term: str
    original_term: str
    timestamp: datetime
    result_count: int = 0
    search_mode: SearchMode = SearchMode.FUZZY
    categories: list[str] = field(default_factory=list)

    @property
    def successful(self) -> bool:
        """Запрос успешен, если нашлась хотя бы одна настройка."""
        return self.result_count > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "term": self.term,
            "originalTerm": self.original_term,
            "timestamp": to_iso(self.timestamp),
            "resultCount": self.result_count,
            "searchMode": self.search_mode.value,
            "categories": list(self.categories),
            "successful": self.successful,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchHistoryEntry":
        """Восстанавливает запись из JSON.

        Raises:
            ValueError: Если нет обязательных полей или они некорректны.
            KeyError: Если нет term или timestamp.
        """
        if not isinstance(data, dict):
            raise ValueError("History entry must be an object")

        term = str(data["term"]).strip().lower()
        if not term:
            raise ValueError("History entry has empty term")

        mode = data.get("searchMode", data.get("search_mode", SearchMode.FUZZY.value))
        categories = data.get("categories") or []
        if not isinstance(categories, list):
            raise ValueError("History entry categories must be a list")

        return cls(
            id=str(data.get("id") or ""),
            term=term,
            original_term=str(
                data.get("originalTerm", data.get("original_term")) or term
            ),
            timestamp=parse_iso(data["timestamp"]),
            result_count=int(data.get("resultCount", data.get("result_count", 0))),
            search_mode=SearchMode(mode),
            categories=[str(c) for c in categories],
        )


@dataclass
class PopularTermStat:
    """Накопленная статистика по запросу.

    Не удаляется по сроку хранения, сбрасывается только явной очисткой.
    """

    term: str
    count: int = 0
    success_count: int = 0
    first_used: Optional[datetime] = None
    last_used: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        return self.success_count / self.count if self.count > 0 else 0.0

    def record(self, successful: bool, when: datetime) -> None:
        """Учитывает ещё один запрос."""
        if self.first_used is None:
            self.first_used = when
        self.count += 1
        if successful:
            self.success_count += 1
        self.last_used = when

    def to_dict(self) -> dict[str, Any]:
        """Значение для карты ``term -> stat`` (без самого term)."""
        return {
            "count": self.count,
            "successCount": self.success_count,
            "firstUsed": to_iso(self.first_used),
            "lastUsed": to_iso(self.last_used),
        }

    @classmethod
    def from_dict(cls, term: str, data: dict[str, Any]) -> "PopularTermStat":
        if not isinstance(data, dict):
            raise ValueError(f"Popular term stat for '{term}' must be an object")

        count = int(data.get("count", 0))
        success_count = int(data.get("successCount", data.get("success_count", 0)))
        if count < 0 or success_count < 0 or success_count > count:
            raise ValueError(f"Inconsistent counters for popular term '{term}'")

        first_used = data.get("firstUsed", data.get("first_used"))
        last_used = data.get("lastUsed", data.get("last_used"))

        return cls(
            term=term,
            count=count,
            success_count=success_count,
            first_used=parse_iso(first_used) if first_used else None,
            last_used=parse_iso(last_used) if last_used else None,
        )


class SearchSettings(BaseModel):
    """Пользовательские настройки истории поиска.

    Сохраняются в хранилище сразу после изменения.

    Example:
        >>> SearchSettings.model_validate({"maxHistorySize": 20}).max_history_size
        20
    """

    max_history_size: int = Field(default=50, ge=1, le=1000)
    max_suggestions: int = Field(default=8, ge=1, le=50)
    enable_history: bool = True
    enable_analytics: bool = True
    retention_days: int = Field(default=30, ge=1, le=3650)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class SuggestionType(str, Enum):
    RECENT = "recent"
    POPULAR = "popular"


@dataclass(frozen=True)
class Suggestion:
    """Подсказка автодополнения.

    Attributes:
        term: Текст, подставляемый в строку поиска.
        display_text: Текст для отображения.
        type: Источник (история или популярные запросы).
        reason: Пояснение для UI ("Popular (8 searches)").
        count: Число запросов (для popular).
        result_count: Число результатов (для recent).
        success_rate: Доля успешных запросов (для popular).
        timestamp: Время запроса (для recent).
    """

    term: str
    display_text: str
    type: SuggestionType
    reason: str
    count: Optional[int] = None
    result_count: Optional[int] = None
    success_rate: Optional[float] = None
    timestamp: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "term": self.term,
            "displayText": self.display_text,
            "type": self.type.value,
            "reason": self.reason,
        }
        if self.count is not None:
            data["count"] = self.count
        if self.result_count is not None:
            data["resultCount"] = self.result_count
        if self.success_rate is not None:
            data["successRate"] = self.success_rate
        if self.timestamp is not None:
            data["timestamp"] = to_iso(self.timestamp)
        return data


@dataclass(frozen=True)
class CategoryCount:
    category: str
    count: int


@dataclass(frozen=True)
class SearchAnalytics:
    """Аналитика по текущей истории.

    Attributes:
        total_searches: Число записей истории.
        successful_searches: Записи с результатами.
        success_rate: successful / total (0 при пустой истории).
        unique_terms: Число уникальных запросов.
        weekly_searches: Запросы за последние 7 дней.
        monthly_searches: Запросы за последние 30 дней.
        top_categories: До 5 самых частых категорий результатов.
        average_results_per_search: Среднее число результатов.
    """

    total_searches: int = 0
    successful_searches: int = 0
    success_rate: float = 0.0
    unique_terms: int = 0
    weekly_searches: int = 0
    monthly_searches: int = 0
    top_categories: tuple[CategoryCount, ...] = ()
    average_results_per_search: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalSearches": self.total_searches,
            "successfulSearches": self.successful_searches,
            "successRate": self.success_rate,
            "uniqueTerms": self.unique_terms,
            "weeklySearches": self.weekly_searches,
            "monthlySearches": self.monthly_searches,
            "topCategories": [
                {"category": c.category, "count": c.count} for c in self.top_categories
            ],
            "averageResultsPerSearch": self.average_results_per_search,
        }

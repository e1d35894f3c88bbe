"""Доменный слой с чистыми объектами данных (DTO).

Классы:
    SettingRecord
        Настройка системы с поисковыми метаданными.
    SearchMetadata
        Заголовок, ключевые слова, синонимы и вес настройки.
    SearchHistoryEntry
        Запись истории поиска.
    PopularTermStat
        Статистика по популярному запросу.
    SearchSettings
        Пользовательские настройки истории.
    Suggestion
        Подсказка автодополнения.
    SearchAnalytics
        Аналитика по истории.
    SearchHit
        Результат поиска с score и совпадениями.
"""

from settings_search.domain.setting import (
    DataType,
    SearchMetadata,
    SearchWeight,
    SettingRecord,
    humanize_key,
)
from settings_search.domain.history import (
    CategoryCount,
    PopularTermStat,
    SearchAnalytics,
    SearchHistoryEntry,
    SearchMode,
    SearchSettings,
    Suggestion,
    SuggestionType,
)
from settings_search.domain.search_result import (
    CategoryGroup,
    FieldMatch,
    HighlightSegment,
    SearchHit,
)

__all__ = [
    "DataType",
    "SearchMetadata",
    "SearchWeight",
    "SettingRecord",
    "humanize_key",
    "CategoryCount",
    "PopularTermStat",
    "SearchAnalytics",
    "SearchHistoryEntry",
    "SearchMode",
    "SearchSettings",
    "Suggestion",
    "SuggestionType",
    "CategoryGroup",
    "FieldMatch",
    "HighlightSegment",
    "SearchHit",
]

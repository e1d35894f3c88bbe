"""Бизнес-логика поиска по настройкам.

Классы:
    SearchEngine
        Обогащение корпуса и поиск.
    FuzzyMatcher
        Взвешенное нечёткое сопоставление.
    KeywordIndex
        Скомпилированная таблица ключевых слов.
    SearchHistoryManager
        История, популярные запросы, подсказки, экспорт/импорт.
    SearchSession
        Debounce ввода и запись истории.
    Debouncer, Throttler
        Отложенный запуск.
"""

from settings_search.core.engine import ALL_CATEGORIES, SearchEngine
from settings_search.core.fuzzy import FIELD_WEIGHTS, FuzzyMatcher
from settings_search.core.history import (
    HISTORY_KEY,
    POPULAR_TERMS_KEY,
    SETTINGS_KEY,
    SearchHistoryManager,
)
from settings_search.core.keyword_map import (
    DEFAULT_KEYWORD_MAPPINGS,
    KeywordIndex,
    KeywordMapping,
    default_keyword_index,
    enrich_records,
)
from settings_search.core.presentation import category_label, group_by_category, highlight
from settings_search.core.scheduling import Debouncer, Throttler
from settings_search.core.session import SearchSession
from settings_search.core.suggestions import build_suggestions

__all__ = [
    "ALL_CATEGORIES",
    "SearchEngine",
    "FIELD_WEIGHTS",
    "FuzzyMatcher",
    "HISTORY_KEY",
    "POPULAR_TERMS_KEY",
    "SETTINGS_KEY",
    "SearchHistoryManager",
    "DEFAULT_KEYWORD_MAPPINGS",
    "KeywordIndex",
    "KeywordMapping",
    "default_keyword_index",
    "enrich_records",
    "category_label",
    "group_by_category",
    "highlight",
    "Debouncer",
    "Throttler",
    "SearchSession",
    "build_suggestions",
]

"""Settings Search - поиск по системным настройкам админки.

Архитектура:
    Domain: Чистые DTO (SettingRecord, SearchHistoryEntry, SearchHit).
    Interfaces: Контракты (BaseKeyValueStore).
    Infrastructure: Реализации (PeeweeKeyValueStore, SettingsAPIClient).
    Core: Бизнес-логика (SearchEngine, SearchHistoryManager, SearchSession).
    CLI: Typer-приложение settings-search.

Пример:
    >>> from settings_search import SearchEngine, SearchHistoryManager
    >>> from settings_search.infrastructure.api import load_settings_file
    >>> from settings_search.infrastructure.storage import MemoryKeyValueStore
    >>>
    >>> engine = SearchEngine(load_settings_file("settings.json"))
    >>> history = SearchHistoryManager(MemoryKeyValueStore())
    >>>
    >>> hits = engine.search("emial")
    >>> history.add_search("emial", hits)
"""

__version__ = "0.1.0"

# Domain Layer
from settings_search.domain import (
    SettingRecord,
    SearchMetadata,
    SearchWeight,
    DataType,
    SearchHistoryEntry,
    PopularTermStat,
    SearchSettings,
    SearchMode,
    Suggestion,
    SuggestionType,
    SearchAnalytics,
    SearchHit,
    FieldMatch,
    HighlightSegment,
    CategoryGroup,
)

# Interfaces
from settings_search.interfaces import BaseKeyValueStore, StorageError

# Core
from settings_search.core import (
    SearchEngine,
    FuzzyMatcher,
    KeywordIndex,
    KeywordMapping,
    SearchHistoryManager,
    SearchSession,
    group_by_category,
    highlight,
)

__all__ = [
    "__version__",
    # Domain
    "SettingRecord",
    "SearchMetadata",
    "SearchWeight",
    "DataType",
    "SearchHistoryEntry",
    "PopularTermStat",
    "SearchSettings",
    "SearchMode",
    "Suggestion",
    "SuggestionType",
    "SearchAnalytics",
    "SearchHit",
    "FieldMatch",
    "HighlightSegment",
    "CategoryGroup",
    # Interfaces
    "BaseKeyValueStore",
    "StorageError",
    # Core
    "SearchEngine",
    "FuzzyMatcher",
    "KeywordIndex",
    "KeywordMapping",
    "SearchHistoryManager",
    "SearchSession",
    "group_by_category",
    "highlight",
]

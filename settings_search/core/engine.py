"""Поисковый движок по настройкам админки.

Классы:
    SearchEngine
        Обогащение корпуса, нечёткий/точный поиск, фильтр категории.
"""

from typing import Optional, Sequence

from settings_search.core.fuzzy import FuzzyMatcher
from settings_search.core.keyword_map import (
    KeywordIndex,
    default_keyword_index,
    enrich_records,
)
from settings_search.domain import SearchHit, SettingRecord
from settings_search.utils.logger import get_logger

logger = get_logger(__name__)

ALL_CATEGORIES = "all"


def searchable_text(record: SettingRecord) -> str:
    """Склейка полей записи для поиска подстроки (lower)."""
    parts = [
        record.display_title,
        record.description,
        record.key,
        record.category,
        *record.search.keywords,
        *record.search.synonyms,
    ]
    return " ".join(part for part in parts if part).lower()


def _weight_order(hit: SearchHit) -> tuple:
    return (-hit.setting.weight_rank, hit.setting.display_title.lower())


def _score_order(hit: SearchHit) -> tuple:
    return (hit.score if hit.score is not None else 1.0, *_weight_order(hit))


class SearchEngine:
    """Поиск по корпусу настроек.

    Корпус обогащается таблицей ключевых слов один раз при загрузке.
    search() - чистая функция от (query, category, fuzzy_enabled):
    историю записывает вызывающий код.

    Attributes:
        matcher: Нечёткий сопоставитель.
        keyword_index: Скомпилированная таблица ключевых слов.

    Example:
        >>> engine = SearchEngine(records)
        >>> hits = engine.search("2fa")
        >>> hits[0].setting.key
        'enable_two_factor_auth'
    """

    def __init__(
        self,
        records: Sequence[SettingRecord] = (),
        *,
        keyword_index: Optional[KeywordIndex] = None,
        matcher: Optional[FuzzyMatcher] = None,
    ):
        self.keyword_index = keyword_index or default_keyword_index()
        self.matcher = matcher or FuzzyMatcher()

        self._source: Sequence[SettingRecord] = ()
        self._source_index: Optional[KeywordIndex] = None
        self._records: list[SettingRecord] = []

        self.load(records)

    @property
    def records(self) -> list[SettingRecord]:
        """Обогащённый корпус."""
        return list(self._records)

    def load(self, records: Sequence[SettingRecord]) -> None:
        """Загружает корпус.

        Повторная загрузка того же объекта с тем же индексом не
        пересчитывает обогащение.
        """
        if records is self._source and self.keyword_index is self._source_index:
            logger.trace("Corpus unchanged, enrichment skipped")
            return

        self._records = enrich_records(records, self.keyword_index)
        self._source = records
        self._source_index = self.keyword_index

        logger.debug("Corpus loaded", settings=len(self._records))

    def categories(self) -> list[str]:
        """Список категорий для фильтра: "all" и отсортированные категории."""
        cats = sorted({record.category for record in self._records if record.category})
        return [ALL_CATEGORIES, *cats]

    def search(
        self,
        query: str,
        category: str = ALL_CATEGORIES,
        fuzzy_enabled: bool = True,
    ) -> list[SearchHit]:
        """Ищет настройки.

        Args:
            query: Текст запроса.
            category: Категория или "all".
            fuzzy_enabled: Нечёткий поиск (иначе подстрока без учёта регистра).

        Returns:
            Упорядоченные SearchHit. При внутренней ошибке - весь корпус
            без фильтрации.
        """
        try:
            return self._search(query, category or ALL_CATEGORIES, fuzzy_enabled)
        except Exception as e:
            logger.error_with_context(
                e,
                "Search failed, returning unfiltered corpus",
                query=query,
                category=category,
            )
            return [SearchHit(setting=record) for record in self._records]

    def _search(self, query: str, category: str, fuzzy_enabled: bool) -> list[SearchHit]:
        normalized = query.strip().lower()

        if not normalized and category == ALL_CATEGORIES:
            return [SearchHit(setting=record) for record in self._records]

        if not normalized:
            hits = [
                SearchHit(setting=record)
                for record in self._records
                if record.category == category
            ]
            return sorted(hits, key=_weight_order)

        if fuzzy_enabled:
            hits = self.matcher.search(normalized, self._records)
        else:
            hits = [
                SearchHit(setting=record)
                for record in self._records
                if normalized in searchable_text(record)
            ]

        if category != ALL_CATEGORIES:
            hits = [hit for hit in hits if hit.setting.category == category]

        ordered = sorted(hits, key=_score_order if fuzzy_enabled else _weight_order)

        logger.debug(
            "Search complete",
            query=normalized,
            category=category,
            fuzzy=fuzzy_enabled,
            results=len(ordered),
        )
        return ordered

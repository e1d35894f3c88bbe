"""Менеджер истории поиска.

Хранит историю запросов, статистику популярных запросов и настройки
в локальном key-value хранилище. Ошибки хранилища логируются и не
выходят за пределы публичного API.

Классы:
    SearchHistoryManager
        Единственный владелец истории в рамках сессии.

Константы:
    HISTORY_KEY, POPULAR_TERMS_KEY, SETTINGS_KEY
        Логические ключи хранилища.
"""

import json
import threading
import uuid
from collections import Counter
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, Optional, Union

from pydantic import ValidationError

from settings_search.core.scheduling import Throttler
from settings_search.core.suggestions import build_suggestions, rank_popular_terms
from settings_search.domain import (
    CategoryCount,
    PopularTermStat,
    SearchAnalytics,
    SearchHistoryEntry,
    SearchMode,
    SearchSettings,
    Suggestion,
)
from settings_search.domain.history import to_iso, utc_now
from settings_search.interfaces import BaseKeyValueStore, StorageError
from settings_search.utils.logger import get_logger

logger = get_logger(__name__)

HISTORY_KEY = "aby_whisky_search_history"
POPULAR_TERMS_KEY = "aby_whisky_popular_terms"
SETTINGS_KEY = "aby_whisky_search_settings"

DEFAULT_PERSIST_INTERVAL = 1.0
DEFAULT_DUPLICATE_WINDOW = 5.0

_LOAD_ERRORS = (StorageError, ValueError, KeyError, TypeError)


class SearchHistoryManager:
    """История поиска, популярные запросы и пользовательские настройки.

    Создаётся один раз при старте приложения и передаётся туда, где
    нужен. Запись в хранилище после add_search() откладывается
    (не чаще раза в persist_interval); явные действия (очистка,
    удаление, смена настроек, импорт) сохраняются сразу.

    Потокобезопасный: отложенная запись выполняется в потоке таймера.

    Attributes:
        store: Key-value хранилище.
        duplicate_window: Окно подавления повторного запроса, секунды.

    Example:
        >>> manager = SearchHistoryManager(MemoryKeyValueStore())
        >>> manager.add_search("Macallan", hits)
        >>> manager.get_recent_searches(1)[0].term
        'macallan'
    """

    def __init__(
        self,
        store: BaseKeyValueStore,
        *,
        defaults: Optional[SearchSettings] = None,
        clock: Callable[[], datetime] = utc_now,
        persist_interval: float = DEFAULT_PERSIST_INTERVAL,
        duplicate_window: float = DEFAULT_DUPLICATE_WINDOW,
    ):
        """Инициализация и загрузка состояния из хранилища.

        Args:
            store: Key-value хранилище.
            defaults: Настройки, если в хранилище их нет.
            clock: Источник текущего времени (aware UTC).
            persist_interval: Минимальный интервал отложенной записи, секунды.
            duplicate_window: Окно подавления повторного запроса, секунды.
        """
        self.store = store
        self.duplicate_window = duplicate_window
        self._defaults = defaults or SearchSettings()
        self._clock = clock
        self._lock = threading.RLock()
        self._throttle = Throttler(persist_interval, self._save_all)

        self._settings = self._load_settings()
        self._history = self._load_history()
        self._popular = self._load_popular_terms()

        logger.debug(
            "History manager initialized",
            history=len(self._history),
            popular_terms=len(self._popular),
            enable_history=self._settings.enable_history,
        )

    # === Время ===

    def _now(self) -> datetime:
        # Точность до миллисекунд, как в сериализованном виде
        now = self._clock()
        return now.replace(microsecond=now.microsecond // 1000 * 1000)

    # === Загрузка ===

    def _read_json(self, key: str) -> Any:
        raw = self.store.get(key)
        return json.loads(raw) if raw else None

    def _load_settings(self) -> SearchSettings:
        try:
            data = self._read_json(SETTINGS_KEY)
            if data is None:
                return self._defaults
            if not isinstance(data, dict):
                raise ValueError("Settings must be an object")
            merged = {**self._defaults.to_dict(), **data}
            return SearchSettings.model_validate(merged)
        except _LOAD_ERRORS as e:
            logger.warning(
                "Failed to load search settings, using defaults",
                error_type=type(e).__name__,
                error=str(e),
            )
            return self._defaults

    def _load_history(self) -> list[SearchHistoryEntry]:
        if not self._settings.enable_history:
            return []

        try:
            data = self._read_json(HISTORY_KEY)
        except _LOAD_ERRORS as e:
            logger.warning(
                "Failed to load search history",
                error_type=type(e).__name__,
                error=str(e),
            )
            return []

        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning("Stored search history is not a list, ignoring")
            return []

        entries: list[SearchHistoryEntry] = []
        for item in data:
            try:
                entries.append(SearchHistoryEntry.from_dict(item))
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("Skipping corrupt history entry", error=str(e))

        return self._prune_history(entries, self._settings)

    def _prune_history(
        self,
        entries: Iterable[SearchHistoryEntry],
        settings: SearchSettings,
    ) -> list[SearchHistoryEntry]:
        """Отбрасывает устаревшие записи и повторы терма, обрезает до лимита.

        Из повторов остаётся первая запись (самая свежая в сохранённом порядке).
        """
        cutoff = self._now() - timedelta(days=settings.retention_days)
        history: list[SearchHistoryEntry] = []
        seen: set[str] = set()
        expired = 0

        for entry in entries:
            if entry.timestamp <= cutoff:
                expired += 1
                continue
            if entry.term in seen:
                continue

            seen.add(entry.term)
            history.append(entry)

        if expired:
            logger.info("Expired history entries dropped", count=expired)

        return history[: settings.max_history_size]

    def _load_popular_terms(self) -> dict[str, PopularTermStat]:
        if not self._settings.enable_analytics:
            return {}

        try:
            data = self._read_json(POPULAR_TERMS_KEY)
            if data is None:
                return {}
            if not isinstance(data, dict):
                raise ValueError("Popular terms must be an object")
            return {
                str(term): PopularTermStat.from_dict(str(term), stat)
                for term, stat in data.items()
            }
        except _LOAD_ERRORS as e:
            logger.warning(
                "Failed to load popular terms",
                error_type=type(e).__name__,
                error=str(e),
            )
            return {}

    # === Сохранение ===

    def _write_json(self, key: str, value: Any) -> bool:
        try:
            self.store.set(key, json.dumps(value, ensure_ascii=False))
            return True
        except (StorageError, TypeError, ValueError) as e:
            logger.error(
                "Failed to persist search data",
                storage_key=key,
                error_type=type(e).__name__,
                error=str(e),
            )
            return False

    def _save_settings(self) -> bool:
        with self._lock:
            payload = self._settings.to_dict()
        return self._write_json(SETTINGS_KEY, payload)

    def _save_history(self, force: bool = False) -> bool:
        with self._lock:
            if not (self._settings.enable_history or force):
                return True
            payload = [entry.to_dict() for entry in self._history]
        return self._write_json(HISTORY_KEY, payload)

    def _save_popular_terms(self, force: bool = False) -> bool:
        with self._lock:
            if not (self._settings.enable_analytics or force):
                return True
            payload = {term: stat.to_dict() for term, stat in self._popular.items()}
        return self._write_json(POPULAR_TERMS_KEY, payload)

    def _save_all(self) -> None:
        saved_history = self._save_history()
        saved_popular = self._save_popular_terms()
        logger.trace(
            "History persisted",
            history_ok=saved_history,
            popular_ok=saved_popular,
        )

    def flush(self) -> bool:
        """Немедленно записывает отложенные изменения.

        Returns:
            True если была отложенная запись.
        """
        return self._throttle.flush()

    def close(self) -> None:
        """Записывает отложенные изменения. Хранилище не закрывается."""
        self.flush()
        self._throttle.cancel()

    # === Запись запросов ===

    def add_search(
        self,
        term: str,
        results: Iterable[Any] = (),
        mode: Union[SearchMode, str] = SearchMode.FUZZY,
    ) -> Optional[SearchHistoryEntry]:
        """Записывает выполненный запрос.

        Повтор последнего запроса в пределах duplicate_window не создаёт
        новую запись, но учитывается в статистике популярных запросов.

        Args:
            term: Запрос как введён.
            results: Результаты (объекты с атрибутом ``category``).
            mode: Режим поиска.

        Returns:
            Новая запись или None, если запись не создана.
        """
        if not term or not term.strip():
            return None

        try:
            search_mode = SearchMode(mode)
        except ValueError:
            logger.warning("Unknown search mode, search not recorded", mode=str(mode))
            return None

        with self._lock:
            if not self._settings.enable_history:
                return None

            results = list(results)
            normalized = term.strip().lower()
            now = self._now()
            successful = len(results) > 0

            if self._settings.enable_analytics:
                stat = self._popular.get(normalized)
                if stat is None:
                    stat = self._popular[normalized] = PopularTermStat(term=normalized)
                stat.record(successful, now)

            latest = self._history[0] if self._history else None
            if (
                latest is not None
                and latest.term == normalized
                and (now - latest.timestamp).total_seconds() < self.duplicate_window
            ):
                logger.trace("Duplicate search suppressed", query=normalized)
                self._throttle.schedule()
                return None

            categories: dict[str, None] = {}
            for item in results:
                category = getattr(item, "category", None)
                if category:
                    categories[category] = None

            entry = SearchHistoryEntry(
                id=f"{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:8]}",
                term=normalized,
                original_term=term.strip(),
                timestamp=now,
                result_count=len(results),
                search_mode=search_mode,
                categories=list(categories),
            )

            self._history = [e for e in self._history if e.term != normalized]
            self._history.insert(0, entry)
            del self._history[self._settings.max_history_size :]

        logger.debug(
            "Search recorded",
            entry_id=entry.id,
            query=normalized,
            results=entry.result_count,
        )
        self._throttle.schedule()
        return entry

    # === Чтение ===

    def get_recent_searches(self, limit: int = 10) -> list[SearchHistoryEntry]:
        """Последние запросы, новые первыми."""
        with self._lock:
            return list(self._history[: max(0, limit)])

    def get_popular_terms(self, limit: int = 10) -> list[PopularTermStat]:
        """Популярные запросы: success rate desc, count desc, term asc."""
        with self._lock:
            ranked = rank_popular_terms(replace(s) for s in self._popular.values())
        return ranked[: max(0, limit)]

    def get_suggestions(self, term: str = "", limit: Optional[int] = None) -> list[Suggestion]:
        """Подсказки для текущего ввода.

        Args:
            term: Текущий ввод.
            limit: Максимум подсказок (по умолчанию max_suggestions).
        """
        with self._lock:
            max_items = limit if limit is not None else self._settings.max_suggestions
            history = list(self._history)
            popular = [replace(s) for s in self._popular.values()]

        return build_suggestions(term, history, popular, max_items)

    def get_analytics(self) -> SearchAnalytics:
        """Агрегаты по текущей истории."""
        with self._lock:
            history = list(self._history)

        total = len(history)
        if total == 0:
            return SearchAnalytics()

        now = self._now()
        week_ago = now - timedelta(days=7)
        month_ago = now - timedelta(days=30)

        successful = sum(1 for e in history if e.successful)
        category_counts: Counter[str] = Counter()
        for entry in history:
            category_counts.update(entry.categories)

        top_categories = sorted(category_counts.items(), key=lambda kv: (-kv[1], kv[0]))[:5]

        return SearchAnalytics(
            total_searches=total,
            successful_searches=successful,
            success_rate=successful / total,
            unique_terms=len({e.term for e in history}),
            weekly_searches=sum(1 for e in history if e.timestamp > week_ago),
            monthly_searches=sum(1 for e in history if e.timestamp > month_ago),
            top_categories=tuple(CategoryCount(c, n) for c, n in top_categories),
            average_results_per_search=sum(e.result_count for e in history) / total,
        )

    def get_settings(self) -> SearchSettings:
        with self._lock:
            return self._settings

    # === Изменение ===

    def update_settings(self, **changes: Any) -> bool:
        """Изменяет настройки и сразу сохраняет их.

        Args:
            **changes: Поля SearchSettings (snake_case).

        Returns:
            False если поле неизвестно или значение не прошло валидацию.
        """
        unknown = set(changes) - set(SearchSettings.model_fields)
        if unknown:
            logger.warning("Unknown search settings", fields=sorted(unknown))
            return False

        with self._lock:
            try:
                updated = SearchSettings.model_validate(
                    {**self._settings.model_dump(), **changes}
                )
            except ValidationError as e:
                logger.warning("Invalid search settings", error=str(e))
                return False

            self._settings = updated
            del self._history[updated.max_history_size :]

        saved = self._save_settings()
        self._save_history()
        logger.info("Search settings updated", **changes)
        return saved

    def remove_item(self, entry_id: str) -> bool:
        """Удаляет запись истории. Статистика популярных запросов не меняется.

        Returns:
            True если запись найдена.
        """
        with self._lock:
            before = len(self._history)
            self._history = [e for e in self._history if e.id != str(entry_id)]
            removed = len(self._history) != before

        if removed:
            self._save_history(force=True)
            logger.debug("History entry removed", entry_id=entry_id)
        return removed

    def clear_history(self) -> None:
        with self._lock:
            self._history = []
        self._save_history(force=True)
        logger.info("Search history cleared")

    def clear_popular_terms(self) -> None:
        with self._lock:
            self._popular = {}
        self._save_popular_terms(force=True)
        logger.info("Popular terms cleared")

    def clear_all(self) -> None:
        self._throttle.cancel()
        self.clear_history()
        self.clear_popular_terms()

    # === Экспорт / импорт ===

    def export_data(self) -> dict[str, Any]:
        """Снимок состояния в JSON-совместимом виде.

        Returns:
            ``{settings, history, popularTerms, analytics, exportDate}``.
        """
        analytics = self.get_analytics()
        with self._lock:
            return {
                "settings": self._settings.to_dict(),
                "history": [entry.to_dict() for entry in self._history],
                "popularTerms": {
                    term: stat.to_dict() for term, stat in self._popular.items()
                },
                "analytics": analytics.to_dict(),
                "exportDate": to_iso(self._now()),
            }

    def import_data(self, data: Any) -> bool:
        """Загружает состояние из экспорта.

        Каждое присутствующее поле (settings, history, popularTerms)
        перезаписывает текущее; отсутствующие не меняются. При любой
        ошибке разбора состояние не меняется. К импортированной истории
        применяются те же правила, что при загрузке: срок хранения,
        одна запись на терм, лимит размера.

        Returns:
            True при успехе.
        """
        if not isinstance(data, dict):
            logger.error("Import payload must be an object", payload_type=type(data).__name__)
            return False

        try:
            settings = None
            if data.get("settings") is not None:
                if not isinstance(data["settings"], dict):
                    raise ValueError("'settings' must be an object")
                with self._lock:
                    current = self._settings.to_dict()
                settings = SearchSettings.model_validate({**current, **data["settings"]})

            history = None
            if data.get("history") is not None:
                if not isinstance(data["history"], list):
                    raise ValueError("'history' must be a list")
                history = [SearchHistoryEntry.from_dict(item) for item in data["history"]]

            popular = None
            if data.get("popularTerms") is not None:
                if not isinstance(data["popularTerms"], dict):
                    raise ValueError("'popularTerms' must be an object")
                popular = {
                    str(term): PopularTermStat.from_dict(str(term), stat)
                    for term, stat in data["popularTerms"].items()
                }
        except (ValueError, KeyError, TypeError) as e:
            logger.error(
                "Failed to import search data",
                error_type=type(e).__name__,
                error=str(e),
            )
            return False

        self._throttle.cancel()
        with self._lock:
            if settings is not None:
                self._settings = settings
            if history is not None:
                self._history = self._prune_history(history, self._settings)
            if popular is not None:
                self._popular = popular

        if settings is not None:
            self._save_settings()
        if history is not None:
            self._save_history(force=True)
        if popular is not None:
            self._save_popular_terms(force=True)

        logger.info(
            "Search data imported",
            settings=settings is not None,
            history=len(history) if history is not None else None,
            popular_terms=len(popular) if popular is not None else None,
        )
        return True

"""Интерактивная сессия поиска.

Классы:
    SearchSession
        Связка ввода, debounce, движка и истории.
"""

import threading
import uuid
from typing import Callable, Optional

from settings_search.core.engine import ALL_CATEGORIES, SearchEngine
from settings_search.core.history import SearchHistoryManager
from settings_search.core.scheduling import Debouncer
from settings_search.domain import SearchHit, SearchMode
from settings_search.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3

# (hits, has_active_search, term)
ResultsCallback = Callable[[list[SearchHit], bool, str], None]


class SearchSession:
    """Состояние строки поиска одного пользователя.

    Непустой запрос выполняется после паузы debounce_seconds, пустой -
    сразу. Изменение запроса до срабатывания таймера отменяет ожидающий
    поиск: выполняется только последний запрос в окне.

    Attributes:
        engine: Поисковый движок.
        history: Менеджер истории (None = не записывать).
        query: Текущий текст запроса.
        category: Текущий фильтр категории.
        fuzzy_enabled: Нечёткий режим.

    Example:
        >>> session = SearchSession(engine, history, on_results=render)
        >>> session.set_query("ema")
        >>> session.set_query("email")
        >>> session.flush()  # render(hits, True, "email")
    """

    def __init__(
        self,
        engine: SearchEngine,
        history: Optional[SearchHistoryManager],
        on_results: ResultsCallback,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        fuzzy_enabled: bool = True,
    ):
        self.engine = engine
        self.history = history
        self.query = ""
        self.category = ALL_CATEGORIES
        self.fuzzy_enabled = fuzzy_enabled

        self._on_results = on_results
        self._debouncer = Debouncer(debounce_seconds, self._run)
        self._lock = threading.Lock()
        self._last_results: list[SearchHit] = []
        self._log = logger.bind(session_id=f"session-{uuid.uuid4().hex[:6]}")

    @property
    def is_searching(self) -> bool:
        """Есть ли ожидающий поиск."""
        return self._debouncer.pending

    @property
    def last_results(self) -> list[SearchHit]:
        with self._lock:
            return list(self._last_results)

    def categories(self) -> list[str]:
        return self.engine.categories()

    def set_query(self, query: str) -> None:
        self.query = query
        self._schedule()

    def set_category(self, category: str) -> None:
        self.category = category or ALL_CATEGORIES
        self._schedule()

    def set_fuzzy(self, enabled: bool) -> None:
        self.fuzzy_enabled = enabled
        self._schedule()

    def clear(self) -> None:
        """Сбрасывает запрос и фильтр; результат приходит сразу."""
        self.query = ""
        self.category = ALL_CATEGORIES
        self._schedule()

    def flush(self) -> bool:
        """Выполняет ожидающий поиск немедленно."""
        return self._debouncer.flush()

    def cancel(self) -> None:
        self._debouncer.cancel()

    def _schedule(self) -> None:
        term = self.query.strip()
        delay = self._debouncer.delay if term else 0.0
        self._log.trace("Search scheduled", delay_ms=round(delay * 1000))
        self._debouncer.call(self.query, self.category, self.fuzzy_enabled, delay=delay)

    def _run(self, query: str, category: str, fuzzy_enabled: bool) -> None:
        term = query.strip()
        hits = self.engine.search(term, category, fuzzy_enabled)

        with self._lock:
            self._last_results = hits

        if term and self.history is not None:
            mode = SearchMode.FUZZY if fuzzy_enabled else SearchMode.EXACT
            self.history.add_search(term, hits, mode)

        self._log.debug("Search executed", query=term, category=category, results=len(hits))
        self._on_results(hits, bool(term), term)

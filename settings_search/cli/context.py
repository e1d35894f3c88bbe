"""CLI Context - контейнер зависимостей для команд.

Компоненты создаются лениво, чтобы --help работал мгновенно.

Classes:
    CLIContext: Контейнер с ленивой загрузкой движка, хранилища и истории.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from rich.console import Console

from settings_search.config import SearchConfig, get_config
from settings_search.cli.console import console as default_console

if TYPE_CHECKING:
    from settings_search.core import SearchEngine, SearchHistoryManager, SearchSession
    from settings_search.core.session import ResultsCallback
    from settings_search.interfaces import BaseKeyValueStore


class CorpusNotConfiguredError(Exception):
    """Не задан ни файл настроек, ни URL админского API."""


@dataclass
class CLIContext:
    """Контейнер зависимостей для CLI команд.

    Attributes:
        storage_path: Override пути к хранилищу истории.
        settings_file: Override файла с корпусом настроек.
        log_level: Override уровня логирования.
        json_output: Режим JSON вывода (для скриптов).
        verbose: Подробный вывод.
        console: Rich Console для вывода.

    Example:
        >>> ctx = CLIContext(settings_file=Path("settings.json"))
        >>> hits = ctx.get_engine().search("2fa")
        >>> ctx.close()
    """

    # CLI overrides (приоритет над config)
    storage_path: Optional[Path] = None
    settings_file: Optional[Path] = None
    log_level: Optional[str] = None
    json_output: bool = False
    verbose: bool = False
    console: Console = field(default_factory=lambda: default_console)

    # Ленивая инициализация
    _config: Optional[SearchConfig] = field(default=None, init=False, repr=False)
    _store: Optional["BaseKeyValueStore"] = field(default=None, init=False, repr=False)
    _history: Optional["SearchHistoryManager"] = field(default=None, init=False, repr=False)
    _engine: Optional["SearchEngine"] = field(default=None, init=False, repr=False)
    _logging_configured: bool = field(default=False, init=False, repr=False)

    def get_config(self) -> SearchConfig:
        """Загрузить конфигурацию (с учётом CLI overrides)."""
        if self._config is None:
            overrides = {}
            if self.storage_path:
                overrides["storage_path"] = self.storage_path
            if self.settings_file:
                overrides["settings_file"] = self.settings_file
            if self.log_level:
                overrides["log_level"] = self.log_level.upper()

            self._config = get_config(**overrides)
            self._ensure_logging(self._config)
        return self._config

    def get_store(self) -> "BaseKeyValueStore":
        """Хранилище истории (SQLite-файл или память)."""
        if self._store is None:
            config = self.get_config()

            if config.storage_backend == "memory":
                from settings_search.infrastructure.storage import MemoryKeyValueStore

                self._store = MemoryKeyValueStore()
            else:
                from settings_search.infrastructure.storage.peewee import (
                    PeeweeKeyValueStore,
                    init_peewee_database,
                )

                db = init_peewee_database(config.storage_path)
                self._store = PeeweeKeyValueStore(db)
        return self._store

    def get_history(self) -> "SearchHistoryManager":
        """Менеджер истории поиска (один на запуск CLI)."""
        if self._history is None:
            from settings_search.core import SearchHistoryManager

            config = self.get_config()
            self._history = SearchHistoryManager(
                self.get_store(),
                defaults=config.history_defaults(),
                persist_interval=config.persist_interval_seconds,
                duplicate_window=config.duplicate_window_seconds,
            )
        return self._history

    def get_engine(self) -> "SearchEngine":
        """Поисковый движок с загруженным корпусом.

        Raises:
            CorpusNotConfiguredError: Источник настроек не задан.
            SettingsSourceError: Источник недоступен или повреждён.
        """
        if self._engine is None:
            from settings_search.core import FuzzyMatcher, SearchEngine

            config = self.get_config()
            matcher = FuzzyMatcher(
                threshold=config.fuzzy_threshold,
                min_match_char_length=config.min_match_char_length,
            )
            self._engine = SearchEngine(self._load_corpus(config), matcher=matcher)
        return self._engine

    def create_session(self, on_results: "ResultsCallback") -> "SearchSession":
        """Интерактивная сессия поиска с debounce и режимом из конфига.

        История подключается, только если включена в настройках.
        """
        from settings_search.core import SearchSession

        config = self.get_config()
        history = self.get_history()
        return SearchSession(
            self.get_engine(),
            history if history.get_settings().enable_history else None,
            on_results,
            debounce_seconds=config.debounce_seconds,
            fuzzy_enabled=config.fuzzy_enabled,
        )

    def _load_corpus(self, config: SearchConfig) -> list:
        from settings_search.infrastructure.api import (
            SettingsAPIClient,
            load_settings_file,
        )

        if config.settings_file:
            return load_settings_file(config.settings_file)

        if config.api_url:
            client = SettingsAPIClient(
                config.api_url,
                token=config.api_token,
                timeout=config.api_timeout,
            )
            try:
                return client.fetch_settings()
            finally:
                client.close()

        raise CorpusNotConfiguredError(
            "No settings source configured. Use --settings-file or set "
            "SETTINGS_SEARCH_API_URL."
        )

    def close(self) -> None:
        """Сохраняет отложенную историю и закрывает хранилище."""
        if self._history is not None:
            self._history.close()
        if self._store is not None:
            self._store.close()

    def _ensure_logging(self, config: SearchConfig) -> None:
        """Настройка логирования из конфига (один раз)."""
        if self._logging_configured:
            return

        from settings_search.utils.logger import LoggingConfig, setup_logging

        # Verbose mode повышает уровень до INFO
        level = config.log_level
        if self.verbose and level in ("WARNING", "ERROR", "CRITICAL"):
            level = "INFO"

        setup_logging(LoggingConfig(level=level, log_file=config.log_file))
        self._logging_configured = True


__all__ = ["CLIContext", "CorpusNotConfiguredError"]

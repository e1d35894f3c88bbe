"""Единая конфигурация Settings Search.

Загружает настройки из (в порядке приоритета):
1. CLI аргументы (переданные как kwargs)
2. Environment variables (SETTINGS_SEARCH_*)
3. settings_search.toml в текущей или родительской директории
4. Default values

Классы:
    SearchConfig
        Pydantic Settings с поддержкой TOML и env variables.

Функции:
    get_config
        Получить конфигурацию с возможными override'ами.
    reset_config
        Сбросить глобальный конфиг (для тестов).
    find_config_file
        Найти settings_search.toml вверх по дереву директорий.

Example:
    >>> from settings_search.config import get_config
    >>> config = get_config(storage_backend="memory", log_level="DEBUG")
    >>> config.debounce_seconds
    0.3
"""

import os
import tomllib
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from settings_search.domain.history import SearchSettings
from settings_search.utils.logger import get_logger

logger = get_logger(__name__)


LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
StorageBackend = Literal["sqlite", "memory"]

CONFIG_FILE_NAME = "settings_search.toml"


def find_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Найти settings_search.toml в текущей или родительских директориях.

    Args:
        start_dir: Начальная директория поиска (по умолчанию cwd).

    Returns:
        Path к файлу или None если не найден.
    """
    current = start_dir or Path.cwd()

    # Максимум 10 уровней вверх
    for _ in range(10):
        config_path = current / CONFIG_FILE_NAME
        if config_path.exists():
            return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


class SearchConfig(BaseSettings):
    """Конфигурация поиска по настройкам.

    Attributes:
        storage_path: SQLite-файл локального key-value хранилища.
        storage_backend: sqlite (файл) или memory (без сохранения).
        settings_file: JSON-файл с корпусом настроек.
        api_url: Базовый URL админского API (альтернатива settings_file).
        api_token: Bearer-токен админского API.
        api_timeout: Таймаут HTTP-запросов, секунды.
        fuzzy_enabled: Нечёткий поиск по умолчанию.
        fuzzy_threshold: Порог score (0 = точное совпадение, 1 = всё подряд).
        min_match_char_length: Минимальная длина подсвечиваемого фрагмента.
        debounce_ms: Задержка поиска после ввода.
        persist_interval_ms: Минимальный интервал записи истории.
        duplicate_window_seconds: Окно подавления повторного запроса.
        max_history_size: Дефолт SearchSettings.max_history_size.
        max_suggestions: Дефолт SearchSettings.max_suggestions.
        retention_days: Дефолт SearchSettings.retention_days.
        log_level: Уровень логирования.
        log_file: Путь к файлу логов.

    Environment Variables:
        SETTINGS_SEARCH_STORAGE_PATH, SETTINGS_SEARCH_API_URL,
        SETTINGS_SEARCH_API_TOKEN, SETTINGS_SEARCH_LOG_LEVEL
        ... и другие с префиксом SETTINGS_SEARCH_.
    """

    # === Storage ===
    storage_path: Path = Field(
        default=Path("settings_search.db"),
        description="Путь к SQLite-файлу хранилища истории",
    )

    storage_backend: StorageBackend = Field(
        default="sqlite",
        description="Бэкенд хранилища истории",
    )

    # === Corpus source ===
    settings_file: Optional[Path] = Field(
        default=None,
        description="JSON-файл с настройками (список или ответ API)",
    )

    api_url: Optional[str] = Field(
        default=None,
        description="Базовый URL админского API, например http://localhost:5000/api",
    )

    api_token: Optional[str] = Field(
        default=None,
        description="Bearer-токен для админского API",
    )

    api_timeout: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Таймаут HTTP-запросов в секундах",
    )

    # === Search ===
    fuzzy_enabled: bool = Field(
        default=True,
        description="Нечёткий поиск по умолчанию",
    )

    fuzzy_threshold: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Порог score для нечёткого поиска",
    )

    min_match_char_length: int = Field(
        default=2,
        ge=1,
        le=10,
        description="Минимальная длина совпадения для подсветки",
    )

    debounce_ms: int = Field(
        default=300,
        ge=0,
        le=5000,
        description="Задержка перед поиском после ввода, мс",
    )

    # === History ===
    persist_interval_ms: int = Field(
        default=1000,
        ge=0,
        le=60_000,
        description="Минимальный интервал между записями истории, мс",
    )

    duplicate_window_seconds: float = Field(
        default=5.0,
        ge=0,
        le=3600,
        description="Окно подавления повторных запросов, секунды",
    )

    max_history_size: int = Field(default=50, ge=1, le=1000)
    max_suggestions: int = Field(default=8, ge=1, le=50)
    retention_days: int = Field(default=30, ge=1, le=3650)

    # === Logging ===
    log_level: LogLevel = Field(
        default="WARNING",
        description="Уровень логирования",
    )

    log_file: Optional[Path] = Field(
        default=None,
        description="Путь к файлу логов (None = только консоль)",
    )

    # === Validators ===
    @field_validator("storage_path", mode="before")
    @classmethod
    def validate_storage_path(cls, v: Any) -> Path:
        """Преобразует строку в Path."""
        if v is None or v == "":
            return Path("settings_search.db")
        return Path(v).expanduser()

    @field_validator("settings_file", "log_file", mode="before")
    @classmethod
    def validate_optional_path(cls, v: Any) -> Optional[Path]:
        if v is None or v == "":
            return None
        return Path(v).expanduser()

    @field_validator("api_url", mode="before")
    @classmethod
    def normalize_api_url(cls, v: Any) -> Optional[str]:
        """Убирает пробелы и завершающий слэш."""
        if v is None or str(v).strip() == "":
            return None
        return str(v).strip().rstrip("/")

    @field_validator("api_token", mode="before")
    @classmethod
    def strip_token(cls, v: Any) -> Optional[str]:
        if v is None or v == "":
            return None
        return str(v).strip()

    @model_validator(mode="after")
    def log_config_source(self) -> "SearchConfig":
        """Логирует итоговую конфигурацию после загрузки."""
        logger.debug(
            "Config loaded",
            storage_backend=self.storage_backend,
            storage_path=str(self.storage_path),
            fuzzy_enabled=self.fuzzy_enabled,
            has_api_token=self.api_token is not None,
        )
        return self

    model_config = SettingsConfigDict(
        env_prefix="SETTINGS_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **data: Any):
        """Инициализация с поддержкой TOML файла.

        TOML значения имеют низший приоритет: env variables и kwargs
        переопределяют их.
        """
        toml_path = find_config_file()
        toml_data: dict = {}

        if toml_path:
            toml_data = self._load_toml(toml_path)
            logger.debug("Loaded config from TOML", path=str(toml_path))

        # kwargs перебивают env, поэтому заданные в окружении поля из TOML не берём
        env_names = {name.upper() for name in os.environ}
        toml_data = {
            key: value
            for key, value in toml_data.items()
            if f"SETTINGS_SEARCH_{key.upper()}" not in env_names
        }

        merged = {**toml_data, **data}
        super().__init__(**merged)

    @staticmethod
    def _load_toml(path: Path) -> dict:
        """Загружает и выравнивает TOML файл.

        [storage]
        path = "history.db"

        превращается в ``storage_path = "history.db"``. Плоские ключи
        верхнего уровня тоже поддерживаются.
        """
        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning("Failed to load TOML", path=str(path), error=str(e))
            return {}

        mapping = {
            ("storage", "path"): "storage_path",
            ("storage", "backend"): "storage_backend",
            ("api", "url"): "api_url",
            ("api", "token"): "api_token",
            ("api", "timeout"): "api_timeout",
            ("api", "settings_file"): "settings_file",
            ("search", "fuzzy"): "fuzzy_enabled",
            ("search", "threshold"): "fuzzy_threshold",
            ("search", "min_match_char_length"): "min_match_char_length",
            ("search", "debounce_ms"): "debounce_ms",
            ("history", "persist_interval_ms"): "persist_interval_ms",
            ("history", "duplicate_window_seconds"): "duplicate_window_seconds",
            ("history", "max_size"): "max_history_size",
            ("history", "max_suggestions"): "max_suggestions",
            ("history", "retention_days"): "retention_days",
            ("logging", "level"): "log_level",
            ("logging", "file"): "log_file",
        }

        flat: dict = {}

        for (section, key), field_name in mapping.items():
            section_data = raw.get(section)
            if isinstance(section_data, dict) and key in section_data:
                flat[field_name] = section_data[key]

        for field_name in set(mapping.values()):
            if field_name in raw:
                flat[field_name] = raw[field_name]

        return flat

    # === Utility Methods ===

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000

    @property
    def persist_interval_seconds(self) -> float:
        return self.persist_interval_ms / 1000

    def history_defaults(self) -> SearchSettings:
        """Дефолтные SearchSettings для менеджера истории.

        Используются, пока в хранилище нет сохранённых настроек.
        """
        return SearchSettings(
            max_history_size=self.max_history_size,
            max_suggestions=self.max_suggestions,
            retention_days=self.retention_days,
        )

    def to_toml_dict(self) -> dict:
        """Преобразует конфигурацию в структуру для TOML.

        Note:
            api_token НЕ включается.
        """
        return {
            "storage": {
                "path": str(self.storage_path),
                "backend": self.storage_backend,
            },
            "api": {
                **({"url": self.api_url} if self.api_url else {}),
                "timeout": self.api_timeout,
                **({"settings_file": str(self.settings_file)} if self.settings_file else {}),
            },
            "search": {
                "fuzzy": self.fuzzy_enabled,
                "threshold": self.fuzzy_threshold,
                "min_match_char_length": self.min_match_char_length,
                "debounce_ms": self.debounce_ms,
            },
            "history": {
                "persist_interval_ms": self.persist_interval_ms,
                "duplicate_window_seconds": self.duplicate_window_seconds,
                "max_size": self.max_history_size,
                "max_suggestions": self.max_suggestions,
                "retention_days": self.retention_days,
            },
            "logging": {
                "level": self.log_level,
                **({"file": str(self.log_file)} if self.log_file else {}),
            },
        }


# === Global Config Accessor ===

_config: Optional[SearchConfig] = None


def get_config(**overrides: Any) -> SearchConfig:
    """Получить конфигурацию с возможными override'ами.

    Если переданы overrides, всегда создаёт новый экземпляр.

    Example:
        >>> config = get_config()
        >>> config = get_config(log_level="DEBUG")
    """
    global _config

    if overrides or _config is None:
        _config = SearchConfig(**overrides)

    return _config


def reset_config() -> None:
    """Сбросить глобальный конфиг (для тестов)."""
    global _config
    _config = None


__all__ = [
    "SearchConfig",
    "get_config",
    "reset_config",
    "find_config_file",
    "CONFIG_FILE_NAME",
    "LogLevel",
    "StorageBackend",
]

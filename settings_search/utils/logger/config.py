"""Конфигурация системы логирования.

Классы:
    LoggingConfig
        Pydantic-модель настроек логирования с поддержкой env variables.

Environment Variables:
    SETTINGS_SEARCH_LOG_LEVEL: Уровень консольного вывода.
    SETTINGS_SEARCH_LOG_FILE: Путь к файлу логов.
    SETTINGS_SEARCH_LOG_JSON: JSON-контекст в файле (true/false).
    SETTINGS_SEARCH_LOG_REDACT: Маскировать токены и пароли (true/false).
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingConfig(BaseSettings):
    """Настройки логирования.

    Приоритет (от высшего к низшему):
        1. Явный параметр в коде
        2. Environment variable с префиксом SETTINGS_SEARCH_LOG_
        3. Default value

    Attributes:
        level: Минимальный уровень для консоли.
        file_level: Минимальный уровень для файла.
        log_file: Путь к файлу логов (None = только консоль).
        json_format: Писать extra-контекст в файл как JSON.
        show_path: Показывать путь к модулю в консоли.
        redact_secrets: Маскировать токены и пароли.

    Example:
        >>> config = LoggingConfig(level="DEBUG", log_file="/tmp/search.log")
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Минимальный уровень для консольного вывода",
    )

    file_level: LogLevel = Field(
        default="DEBUG",
        description="Минимальный уровень для файлового вывода",
    )

    log_file: Path | None = Field(
        default=None,
        alias="file",
        description="Путь к файлу логов (None = только консоль)",
    )

    json_format: bool = Field(
        default=False,
        alias="json",
        description="JSON-формат extra-контекста в файле",
    )

    show_path: bool = Field(
        default=False,
        description="Показывать путь к модулю в выводе",
    )

    redact_secrets: bool = Field(
        default=True,
        alias="redact",
        description="Маскировать токены и пароли в логах",
    )

    model_config = SettingsConfigDict(
        env_prefix="SETTINGS_SEARCH_LOG_",
        env_file=None,
        extra="forbid",
        frozen=True,
        populate_by_name=True,
    )

"""Логирование settings_search: Rich-консоль, файл, маскирование секретов.

Функции:
    get_logger(name: str) -> SemanticLogger
        Получить логгер для модуля (лениво настраивает систему).

    setup_logging(config: LoggingConfig | None = None) -> None
        Настроить хендлеры корневого логгера пакета.

Классы:
    SemanticLogger
        Адаптер с контекстом (bind) и keyword-аргументами.

    LoggingConfig
        Pydantic-модель конфигурации с поддержкой env variables.

Example:
    >>> from settings_search.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Corpus loaded", settings=42)
"""

import logging

from rich.logging import RichHandler

from .config import LoggingConfig
from .filters import SensitiveDataFilter
from .formatters import FileFormatter
from .levels import TRACE, install_trace_level
from .logger import SemanticLogger

install_trace_level()

_logging_configured: bool = False
_current_config: LoggingConfig | None = None

ROOT_LOGGER_NAME: str = "settings_search"


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Настраивает логирование пакета.

    - RichHandler для консоли (stderr)
    - FileHandler с FileFormatter (если задан log_file)
    - SensitiveDataFilter на обоих хендлерах

    Повторный вызов заменяет ранее установленные хендлеры.

    Args:
        config: Конфигурация. Если None, используются дефолты/env.
    """
    global _logging_configured, _current_config

    config = config or LoggingConfig()
    _current_config = config

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    # Фильтрация выполняется на хендлерах
    root_logger.setLevel(TRACE)

    sensitive_filter = SensitiveDataFilter() if config.redact_secrets else None

    # stderr, чтобы логи не смешивались с выводом CLI (--json)
    from rich.console import Console

    console_handler = RichHandler(
        console=Console(stderr=True),
        level=getattr(logging, config.level, TRACE),
        show_time=True,
        show_level=False,  # уровень обозначается эмодзи
        show_path=config.show_path,
        rich_tracebacks=True,
        markup=False,  # [session-1] не должен читаться как style tag
    )
    if sensitive_filter:
        console_handler.addFilter(sensitive_filter)
    root_logger.addHandler(console_handler)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(getattr(logging, config.file_level, TRACE))
        file_handler.setFormatter(FileFormatter(json_context=config.json_format))
        if sensitive_filter:
            file_handler.addFilter(sensitive_filter)
        root_logger.addHandler(file_handler)

    root_logger.propagate = False

    _logging_configured = True


def get_logger(name: str) -> SemanticLogger:
    """Получить логгер для модуля.

    Args:
        name: Имя модуля (обычно __name__).

    Returns:
        SemanticLogger с поддержкой контекста.
    """
    if not _logging_configured:
        setup_logging()

    return SemanticLogger(name)


def get_current_config() -> LoggingConfig:
    """Активная LoggingConfig (или дефолтная, если не настроено)."""
    return _current_config or LoggingConfig()


__all__ = [
    "TRACE",
    "get_logger",
    "setup_logging",
    "get_current_config",
    "SemanticLogger",
    "LoggingConfig",
    "FileFormatter",
    "SensitiveDataFilter",
]

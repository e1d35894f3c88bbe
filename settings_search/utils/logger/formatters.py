"""Форматтеры логирования с эмодзи модулей.

Классы:
    FileFormatter
        Подробный форматтер для файлового вывода.

Функции:
    get_module_emoji
        Эмодзи по имени логгера.
    format_context_prefix
        Префикс вида "[session-1/entry-2]".
"""

import json
import logging
from datetime import datetime
from typing import Any

from .levels import TRACE

# Маппинг компонентов имени модуля на эмодзи
EMOJI_MAP: dict[str, str] = {
    # Поиск
    "engine": "🔍",
    "search": "🔍",
    "fuzzy": "🧩",
    "keyword_map": "🏷️",
    "session": "⌨️",
    "scheduling": "⏱️",
    "presentation": "🖍️",
    # История и подсказки
    "history": "🕘",
    "suggestions": "💡",
    # Хранилище
    "storage": "💾",
    "memory": "💾",
    "peewee": "💾",
    "adapter": "💾",
    "models": "🗄️",
    # Источник настроек
    "api": "🌐",
    "client": "🌐",
    "loader": "📁",
    # Конфиг и CLI
    "config": "⚙️",
    "cli": "🖥️",
    "commands": "🖥️",
}

LEVEL_EMOJI: dict[int, str] = {
    logging.CRITICAL: "💀",
    logging.ERROR: "❌",
    logging.WARNING: "⚠️",
    logging.INFO: "",  # для INFO используется эмодзи модуля
    logging.DEBUG: "🔧",
    TRACE: "🔬",
}

FALLBACK_EMOJI: str = "📌"

# Ключи контекста, которые выводятся префиксом сообщения
CONTEXT_ID_KEYS: tuple[str, ...] = (
    "session_id",
    "entry_id",
    "setting_key",
)

# Стандартные поля LogRecord, которые не считаются контекстом
_STANDARD_FIELDS: frozenset[str] = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


def get_module_emoji(logger_name: str) -> str:
    """Определяет эмодзи по имени логгера.

    Ищет совпадение с конца имени, т.е. более специфичный модуль важнее
    пакета (``settings_search.core.history`` → 🕘).

    Args:
        logger_name: Полное имя логгера.

    Returns:
        Эмодзи модуля или FALLBACK_EMOJI.
    """
    parts = logger_name.lower().split(".")

    for part in reversed(parts):
        if part in EMOJI_MAP:
            return EMOJI_MAP[part]

    return FALLBACK_EMOJI


def format_context_prefix(record: logging.LogRecord) -> str:
    """Формирует префикс с Context ID или пустую строку."""
    context_ids: list[str] = []

    for key in CONTEXT_ID_KEYS:
        value = getattr(record, key, None)
        if value:
            context_ids.append(str(value))

    if context_ids:
        return f"[{'/'.join(context_ids)}] "
    return ""


def format_extra_context(record: logging.LogRecord) -> dict[str, Any]:
    """Извлекает extra-контекст из записи (без стандартных полей)."""
    context_fields = set(CONTEXT_ID_KEYS)

    extra: dict[str, Any] = {}
    for key, value in record.__dict__.items():
        if key in _STANDARD_FIELDS or key in context_fields:
            continue
        if not key.startswith("_"):
            extra[key] = value

    return extra


class FileFormatter(logging.Formatter):
    """Подробный форматтер для файла.

    Формат: 2026-01-05 14:20:02 | HISTORY | INFO | 🕘 Message | key=value
    """

    def __init__(self, json_context: bool = False) -> None:
        """Инициализирует форматтер.

        Args:
            json_context: Выводить extra-контекст как JSON.
        """
        super().__init__()
        self.json_context = json_context

    def format(self, record: logging.LogRecord) -> str:
        time_str = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        module = record.name.split(".")[-1].upper()
        emoji = get_module_emoji(record.name)
        context_prefix = format_context_prefix(record)
        message = record.getMessage()
        extra = format_extra_context(record)

        parts = [time_str, module, record.levelname, f"{emoji} {context_prefix}{message}"]

        if extra:
            if self.json_context:
                parts.append(json.dumps(extra, ensure_ascii=False, default=str))
            else:
                parts.append(" ".join(f"{k}={v}" for k, v in extra.items()))

        result = " | ".join(parts)

        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)

        return result

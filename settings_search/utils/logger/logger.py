"""Логгер с привязкой контекста.

Классы:
    SemanticLogger
        Адаптер над logging.Logger с keyword-контекстом и bind().
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

from .levels import TRACE
from .formatters import CONTEXT_ID_KEYS, get_module_emoji, LEVEL_EMOJI


class SemanticLogger:
    """Адаптер для структурированного логирования с контекстом.

    Контекст передаётся именованными аргументами и попадает в ``extra``
    записи. Ключи из CONTEXT_ID_KEYS дополнительно выводятся префиксом.

    Note:
        Нельзя использовать имена полей LogRecord (``name``, ``module``,
        ``message``, ``args``) как ключи контекста.

    Example:
        >>> logger = SemanticLogger("settings_search.core.session")
        >>> log = logger.bind(session_id="session-1")
        >>> log.debug("Query scheduled", delay_ms=300)
    """

    def __init__(self, name: str, context: dict[str, Any] | None = None) -> None:
        self.name = name
        self._logger = logging.getLogger(name)
        self._context: dict[str, Any] = context or {}

    def bind(self, **context: Any) -> SemanticLogger:
        """Создаёт новый логгер с объединённым контекстом."""
        return SemanticLogger(self.name, {**self._context, **context})

    def _log(self, level: int, msg: str, **context: Any) -> None:
        extra = {**self._context, **context}

        # RichHandler не использует наш форматтер, поэтому префикс
        # контекста вставляется прямо в сообщение.
        context_ids = [str(extra[key]) for key in CONTEXT_ID_KEYS if extra.get(key)]
        context_prefix = f"[{'/'.join(context_ids)}] " if context_ids else ""

        emoji = LEVEL_EMOJI.get(level, "") or get_module_emoji(self.name)

        self._logger.log(level, f"{emoji} {context_prefix}{msg}", extra=extra)

    def trace(self, msg: str, **context: Any) -> None:
        self._log(TRACE, msg, **context)

    def debug(self, msg: str, **context: Any) -> None:
        self._log(logging.DEBUG, msg, **context)

    def info(self, msg: str, **context: Any) -> None:
        self._log(logging.INFO, msg, **context)

    def warning(self, msg: str, **context: Any) -> None:
        self._log(logging.WARNING, msg, **context)

    def error(self, msg: str, **context: Any) -> None:
        self._log(logging.ERROR, msg, **context)

    def critical(self, msg: str, **context: Any) -> None:
        self._log(logging.CRITICAL, msg, **context)

    def error_with_context(
        self,
        exc: Exception,
        msg: str | None = None,
        *,
        include_traceback: bool = True,
        **context: Any,
    ) -> None:
        """Логирует исключение с типом, текстом и (опционально) traceback.

        Args:
            exc: Исключение.
            msg: Сообщение (по умолчанию str(exc)).
            include_traceback: Добавить traceback в контекст.
            **context: Дополнительный контекст.
        """
        error_context = {
            "error_type": type(exc).__name__,
            "error": str(exc),
            **context,
        }

        if include_traceback:
            error_context["traceback"] = "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )

        self.error(msg or str(exc), **error_context)

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    @property
    def level(self) -> int:
        """Эффективный уровень логгера."""
        return self._logger.getEffectiveLevel()

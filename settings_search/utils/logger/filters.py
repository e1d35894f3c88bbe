"""Фильтры логирования для безопасности.

Классы:
    SensitiveDataFilter
        Маскирует токены админского API и пароли из значений настроек.
"""

import logging
import re
from typing import Pattern

# Значения настроек вроде smtp_password и токены админского API
# не должны попадать в логи.
SENSITIVE_PATTERNS: list[Pattern[str]] = [
    re.compile(r"(?i)bearer\s+[a-zA-Z0-9._~+/=-]{16,}"),  # Authorization header
    re.compile(r"eyJ[a-zA-Z0-9_-]{8,}\.[a-zA-Z0-9_-]{8,}\.[a-zA-Z0-9_-]{8,}"),  # JWT
    re.compile(r"(?i)((?:password|passwd|pwd|secret|api_key|token)\s*[=:]\s*)[^\s,;&]+"),
]

REDACTED: str = "***REDACTED***"


class SensitiveDataFilter(logging.Filter):
    """Фильтр, заменяющий секреты на ***REDACTED***.

    Обрабатывает record.msg и record.args. Для паттернов-присваиваний
    (``password=...``) имя ключа сохраняется, маскируется только значение.

    Attributes:
        patterns: Скомпилированные regex-паттерны.
        redacted: Строка замены.
    """

    def __init__(
        self,
        patterns: list[Pattern[str]] | None = None,
        redacted: str = REDACTED,
        name: str = "",
    ) -> None:
        super().__init__(name)
        self.patterns = patterns or SENSITIVE_PATTERNS
        self.redacted = redacted

    def _redact_string(self, text: str) -> str:
        result = text
        for pattern in self.patterns:
            if pattern.groups:
                result = pattern.sub(lambda m: f"{m.group(1)}{self.redacted}", result)
            else:
                result = pattern.sub(self.redacted, result)
        return result

    def _redact_value(self, value: object) -> object:
        """Рекурсивно маскирует секреты в строках, словарях и списках."""
        if isinstance(value, str):
            return self._redact_string(value)
        elif isinstance(value, dict):
            return {k: self._redact_value(v) for k, v in value.items()}
        elif isinstance(value, (list, tuple)):
            return type(value)(self._redact_value(item) for item in value)
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        """Маскирует секреты и всегда пропускает запись дальше."""
        if isinstance(record.msg, str):
            record.msg = self._redact_string(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._redact_value(v) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self._redact_value(arg) for arg in record.args)

        return True
